"""User management endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from clinic_scheduler.dependencies import AdminActor, DatabaseSession
from clinic_scheduler.schemas.users import UserCreate, UserResponse
from clinic_scheduler.services.user_service import UserService

router = APIRouter()


@router.get(
    "/",
    response_model=list[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List active users",
)
async def list_users(actor: AdminActor, db: DatabaseSession) -> list[UserResponse]:
    """List every active user, ordered by name."""
    rows = await UserService(db).list_active()
    return [UserResponse.model_validate(row) for row in rows]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user by ID",
)
async def get_user(user_id: UUID, actor: AdminActor, db: DatabaseSession) -> UserResponse:
    """Get a user that has not been deactivated."""
    row = await UserService(db).get_user(user_id)
    return UserResponse.model_validate(row)


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    data: UserCreate,
    actor: AdminActor,
    db: DatabaseSession,
) -> UserResponse:
    """
    Register a new user.

    Args:
        data: Name, email and role
        actor: Authenticated administrator
        db: Database session

    Returns:
        Created user
    """
    row = await UserService(db).create_user(data, actor)
    return UserResponse.model_validate(row)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate user",
)
async def deactivate_user(user_id: UUID, actor: AdminActor, db: DatabaseSession) -> None:
    """Deactivate a user; the account row is soft-deleted, never removed."""
    await UserService(db).deactivate_user(user_id, actor)
