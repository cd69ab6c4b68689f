"""Identity of whoever performs an operation."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    RECEPTIONIST = "RECEPTIONIST"


class Actor(BaseModel):
    """
    Authenticated actor threaded explicitly into every store mutation.

    ``audit_name`` is what lands in ``created_by``/``updated_by``/``deleted_by``
    columns; ``name`` is the display name carried on lifecycle events.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID | None
    name: str
    email: str | None = None
    role: UserRole | None = None

    @property
    def audit_name(self) -> str:
        """Identifier stored in audit columns."""
        return self.email or self.name

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR


# Placeholder used when a write happens without an authenticated actor
SYSTEM_ACTOR = Actor(id=None, name="system")


def audit_name(actor: Actor | None) -> str:
    """Resolve the audit identity, falling back to the system placeholder."""
    return (actor or SYSTEM_ACTOR).audit_name
