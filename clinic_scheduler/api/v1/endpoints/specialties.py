"""Specialty endpoints."""

from fastapi import APIRouter, status

from clinic_scheduler.dependencies import CurrentActor, DatabaseSession
from clinic_scheduler.schemas.specialties import SpecialtyResponse
from clinic_scheduler.services.specialty_service import SpecialtyService

router = APIRouter()


@router.get(
    "/",
    response_model=list[SpecialtyResponse],
    status_code=status.HTTP_200_OK,
    summary="List specialties",
)
async def list_specialties(actor: CurrentActor, db: DatabaseSession) -> list[SpecialtyResponse]:
    """List specialties that can be assigned to appointments."""
    rows = await SpecialtyService(db).list_active()
    return [SpecialtyResponse.model_validate(row) for row in rows]
