"""Appointment endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import CurrentActor, DatabaseSession, EventPublisher
from clinic_scheduler.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentUpdate,
)
from clinic_scheduler.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    actor: CurrentActor,
    db: DatabaseSession,
    publisher: EventPublisher,
) -> AppointmentResponse:
    """
    Create a new appointment in the SCHEDULED status.

    Args:
        data: Appointment creation data
        actor: Authenticated actor
        db: Database session
        publisher: Lifecycle event publisher

    Returns:
        Created appointment
    """
    service = AppointmentService(db, publisher)
    return await service.create_appointment(data, actor)


@router.get(
    "/",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    actor: CurrentActor,
    db: DatabaseSession,
    doctor_id: UUID | None = Query(None),
    status_code: str | None = Query(None, alias="status"),
    from_date: datetime | None = Query(None),
    to_date: datetime | None = Query(None),
    patient: str | None = Query(None, min_length=1, max_length=100),
    created_by: str | None = Query(None),
) -> list[AppointmentResponse]:
    """
    List non-deleted appointments with optional filters.

    Args:
        actor: Authenticated actor
        db: Database session
        doctor_id: Filter by assigned doctor
        status_code: Filter by status code
        from_date: Scheduled at or after
        to_date: Scheduled at or before
        patient: Case-insensitive fragment of the patient name
        created_by: Filter by creator

    Returns:
        Matching appointments ordered by scheduled time
    """
    filters = AppointmentFilters(
        doctor_id=doctor_id,
        status=status_code.upper() if status_code else None,
        from_date=from_date,
        to_date=to_date,
        patient=patient,
        created_by=created_by,
    )

    service = AppointmentService(db)
    return await service.list_appointments(filters)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    actor: CurrentActor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Get a specific appointment by ID."""
    service = AppointmentService(db)
    return await service.get_appointment(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment and transition its status",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    actor: CurrentActor,
    db: DatabaseSession,
    publisher: EventPublisher,
) -> AppointmentResponse:
    """
    Update an existing appointment.

    Args:
        appointment_id: Appointment ID
        data: Update data including the target status code
        actor: Authenticated actor
        db: Database session
        publisher: Lifecycle event publisher

    Returns:
        Updated appointment
    """
    service = AppointmentService(db, publisher)
    return await service.update_appointment(appointment_id, data, actor)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    actor: CurrentActor,
    db: DatabaseSession,
    publisher: EventPublisher,
) -> None:
    """
    Soft delete an appointment. Administrators only.

    Args:
        appointment_id: Appointment ID
        actor: Authenticated actor
        db: Database session
        publisher: Lifecycle event publisher
    """
    service = AppointmentService(db, publisher)
    await service.delete_appointment(appointment_id, actor)
