"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor
from clinic_scheduler.core.exceptions import BusinessRuleViolation, UnauthorizedException
from clinic_scheduler.core.security import token_subject
from clinic_scheduler.database import get_db
from clinic_scheduler.services.event_publisher import (
    AppointmentEventPublisher,
    get_event_publisher,
)
from clinic_scheduler.services.user_service import UserService, actor_from_user

# Security
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    return token_subject(credentials.credentials)


async def get_current_actor(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Actor:
    """
    Resolve the authenticated actor.

    Args:
        user_id: User ID from JWT token
        db: Database session

    Returns:
        Actor identity and role

    Raises:
        UnauthorizedException: If the user no longer exists or is deactivated
    """
    user = await UserService(db).find_user(user_id)

    if not user or not user["is_active"]:
        raise UnauthorizedException("User not found or inactive")

    return actor_from_user(user)


async def require_admin(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
    """Actor dependency restricted to administrators."""
    if not actor.is_admin:
        raise BusinessRuleViolation("Only administrators can perform this operation")
    return actor


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
AdminActor = Annotated[Actor, Depends(require_admin)]
EventPublisher = Annotated[AppointmentEventPublisher, Depends(get_event_publisher)]
