"""Appointment status catalog."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor
from clinic_scheduler.core.exceptions import ConflictException, NotFoundException
from clinic_scheduler.models.appointment_statuses import appointment_statuses
from clinic_scheduler.repositories.soft_delete import SoftDeleteTable
from clinic_scheduler.schemas.statuses import StatusCode, StatusCreate

logger = structlog.get_logger(__name__)

DEFAULT_STATUSES: tuple[tuple[str, str], ...] = (
    (StatusCode.SCHEDULED, "Appointment scheduled"),
    (StatusCode.IN_PROGRESS, "Appointment in progress"),
    (StatusCode.COMPLETED, "Appointment completed"),
    (StatusCode.CANCELED, "Appointment canceled"),
)

statuses = SoftDeleteTable(appointment_statuses)


class StatusCatalog:
    """Lookup and maintenance of the status reference set."""

    def __init__(self, db: AsyncSession):
        """Initialize catalog with database session."""
        self.db = db

    async def _find_any(self, code: str) -> dict | None:
        stmt = statuses.select_including_deleted().where(statuses.c.code == code)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def ensure_defaults(self, actor: Actor | None = None) -> list[str]:
        """
        Create the well-known status codes that are missing.

        Safe to call on every start. A default code that was soft-deleted is
        restored, since the lifecycle engine cannot run without it.

        Returns:
            Codes created or restored by this call
        """
        touched: list[str] = []

        for code, description in DEFAULT_STATUSES:
            existing = await self._find_any(code)
            if existing is None:
                await statuses.insert(self.db, {"code": code, "description": description}, actor)
                logger.info("status_created", code=code)
                touched.append(code)
            elif existing["deleted"]:
                await statuses.restore(self.db, existing["id"], actor)
                logger.warning("status_restored", code=code)
                touched.append(code)

        await self.db.commit()
        return touched

    async def lookup(self, code: str) -> dict:
        """
        Get an active status by code.

        Raises:
            NotFoundException: If the code is unknown or soft-deleted
        """
        stmt = statuses.select().where(statuses.c.code == code)
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if not row:
            raise NotFoundException.for_field("Appointment status", "code", code)

        return dict(row)

    async def list_active(self) -> list[dict]:
        """List non-deleted statuses."""
        result = await self.db.execute(statuses.select().order_by(statuses.c.id))
        return [dict(row) for row in result.mappings().all()]

    async def add(self, data: StatusCreate, actor: Actor) -> dict:
        """
        Extend the catalog with a new code.

        Raises:
            ConflictException: If the code is already taken, even by a deleted entry
        """
        if await self._find_any(data.code) is not None:
            raise ConflictException(f"Status code already exists: {data.code}")

        status_id = await statuses.insert(
            self.db,
            {"code": data.code, "description": data.description},
            actor,
        )
        await self.db.commit()
        logger.info("status_created", code=data.code, status_id=status_id, created_by=actor.audit_name)

        return await self.lookup(data.code)
