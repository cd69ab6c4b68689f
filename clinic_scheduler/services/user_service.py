"""User management, doctor lookup and actor resolution."""

from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor, UserRole
from clinic_scheduler.core.exceptions import ConflictException, NotFoundException
from clinic_scheduler.models.users import users
from clinic_scheduler.repositories.soft_delete import SoftDeleteTable, utcnow
from clinic_scheduler.schemas.users import UserCreate

logger = structlog.get_logger(__name__)

active_users = SoftDeleteTable(users)


def actor_from_user(user: dict) -> Actor:
    """Build the actor context for an authenticated user row."""
    return Actor(
        id=user["id"],
        name=user["name"],
        email=user["email"],
        role=UserRole(user["role"]),
    )


class UserService:
    """Service for user operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def find_user(self, user_id: UUID) -> dict | None:
        """Get a non-deleted user by ID, or None."""
        result = await self.db.execute(active_users.select().where(users.c.id == user_id))
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_user(self, user_id: UUID) -> dict:
        """
        Get a non-deleted user by ID.

        Raises:
            NotFoundException: If the user is missing or soft-deleted
        """
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundException.for_field("User", "id", user_id)
        return user

    async def create_user(self, data: UserCreate, actor: Actor | None = None) -> dict:
        """
        Create a new user.

        Raises:
            ConflictException: If the email is already registered
        """
        result = await self.db.execute(
            active_users.select_including_deleted(users.c.id).where(users.c.email == data.email)
        )
        if result.first() is not None:
            raise ConflictException(f"Email already registered: {data.email}")

        user_id = await active_users.insert(
            self.db,
            {
                "id": uuid4(),
                "name": data.name,
                "email": data.email,
                "role": data.role.value,
                "is_active": True,
            },
            actor,
        )
        await self.db.commit()
        logger.info("user_created", user_id=str(user_id), role=data.role.value)

        return await self.get_user(user_id)

    async def list_by_role(self, role: UserRole) -> list[dict]:
        """List active users holding a role."""
        stmt = active_users.select().where(users.c.role == role.value, users.c.is_active.is_(True))
        result = await self.db.execute(stmt.order_by(users.c.name))
        return [dict(row) for row in result.mappings().all()]

    async def list_active(self) -> list[dict]:
        """List every active user, ordered by name."""
        stmt = active_users.select().where(users.c.is_active.is_(True))
        result = await self.db.execute(stmt.order_by(users.c.name))
        return [dict(row) for row in result.mappings().all()]

    async def deactivate_user(self, user_id: UUID, actor: Actor) -> None:
        """
        Deactivate a user account.

        The row is kept and soft-deleted, so audit names on appointments the
        user touched stay resolvable. Their tokens stop authenticating at once.

        Args:
            user_id: User ID
            actor: Administrator performing the change

        Raises:
            NotFoundException: If the user is missing or already deactivated
        """
        now = utcnow()
        try:
            await self.get_user(user_id)
            await active_users.update(self.db, user_id, {"is_active": False}, actor, now)
            if await active_users.soft_delete(self.db, user_id, actor, now) == 0:
                raise NotFoundException.for_field("User", "id", user_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("user_deactivated", user_id=str(user_id), deactivated_by=actor.audit_name)
