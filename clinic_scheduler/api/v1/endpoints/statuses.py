"""Status catalog endpoints."""

from fastapi import APIRouter, status

from clinic_scheduler.dependencies import AdminActor, CurrentActor, DatabaseSession
from clinic_scheduler.schemas.statuses import StatusCreate, StatusResponse
from clinic_scheduler.services.status_catalog import StatusCatalog

router = APIRouter()


@router.get(
    "/",
    response_model=list[StatusResponse],
    status_code=status.HTTP_200_OK,
    summary="List active statuses",
)
async def list_statuses(actor: CurrentActor, db: DatabaseSession) -> list[StatusResponse]:
    """List every status that is not soft-deleted."""
    rows = await StatusCatalog(db).list_active()
    return [StatusResponse.model_validate(row) for row in rows]


@router.get(
    "/{code}",
    response_model=StatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Get status by code",
)
async def get_status(code: str, actor: CurrentActor, db: DatabaseSession) -> StatusResponse:
    """Look up one status by its code."""
    row = await StatusCatalog(db).lookup(code.upper())
    return StatusResponse.model_validate(row)


@router.post(
    "/",
    response_model=StatusResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a status code",
)
async def create_status(
    data: StatusCreate,
    actor: AdminActor,
    db: DatabaseSession,
) -> StatusResponse:
    """
    Extend the catalog with a new status code.

    Args:
        data: Code and description
        actor: Authenticated administrator
        db: Database session

    Returns:
        Created status
    """
    row = await StatusCatalog(db).add(data, actor)
    return StatusResponse.model_validate(row)
