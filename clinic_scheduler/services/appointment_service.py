"""Appointment lifecycle engine."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor
from clinic_scheduler.core.exceptions import NotFoundException
from clinic_scheduler.repositories.appointments import AppointmentRepository
from clinic_scheduler.repositories.soft_delete import utcnow
from clinic_scheduler.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentUpdate,
)
from clinic_scheduler.schemas.events import EventType
from clinic_scheduler.schemas.specialties import SpecialtyResponse
from clinic_scheduler.schemas.statuses import StatusCode, StatusResponse
from clinic_scheduler.schemas.users import DoctorSummary
from clinic_scheduler.services.appointment_policy import (
    authorize_deletion,
    authorize_status_change,
    ensure_doctor,
    ensure_future,
    ensure_mutable,
    ensure_removable,
)
from clinic_scheduler.services.event_publisher import AppointmentEventPublisher
from clinic_scheduler.services.specialty_service import SpecialtyService
from clinic_scheduler.services.status_catalog import StatusCatalog
from clinic_scheduler.services.user_service import UserService

logger = structlog.get_logger(__name__)


def to_response(row: dict) -> AppointmentResponse:
    """Map a joined appointment row to the caller-facing projection."""
    return AppointmentResponse(
        id=row["id"],
        patient_name=row["patient_name"],
        doctor=DoctorSummary(
            id=row["doctor_id"],
            name=row["doctor_name"],
            email=row["doctor_email"],
        ),
        specialty=SpecialtyResponse(
            id=row["specialty_id"],
            code=row["specialty_code"],
            name=row["specialty_name"],
            description=row["specialty_description"],
        ),
        status=StatusResponse(
            id=row["status_id"],
            code=row["status_code"],
            description=row["status_description"],
        ),
        scheduled_at=row["scheduled_at"],
        notes=row["notes"],
        created_at=row["created_at"],
        created_by=row["created_by"],
        updated_at=row["updated_at"],
        updated_by=row["updated_by"],
    )


class AppointmentService:
    """
    Creates, transitions and removes appointments.

    Every mutation runs in one transaction on the session: any rule violation
    rolls back and leaves the store untouched. Lifecycle events are handed to
    the publisher outside that guarantee; a publishing problem never changes
    the outcome returned to the caller.
    """

    def __init__(
        self,
        db: AsyncSession,
        publisher: AppointmentEventPublisher | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize service with database session and event publisher."""
        self.db = db
        self.publisher = publisher
        self.clock = clock
        self.repository = AppointmentRepository(db)
        self.statuses = StatusCatalog(db)
        self.users = UserService(db)
        self.specialties = SpecialtyService(db)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    def _publish(self, event_type: EventType, appointment: AppointmentResponse, actor: Actor) -> None:
        if self.publisher is None:
            logger.debug(
                "event_publisher_not_configured",
                event_type=event_type.value,
                appointment_id=str(appointment.id),
            )
            return

        try:
            self.publisher.publish(event_type, appointment, actor)
        except Exception as e:
            # Lifecycle outcome is already decided
            logger.error(
                "event_dispatch_failed",
                event_type=event_type.value,
                appointment_id=str(appointment.id),
                error=str(e),
            )

    async def _assignable_doctor(self, doctor_id: UUID) -> dict:
        doctor = await self.users.get_user(doctor_id)
        ensure_doctor(doctor)
        return doctor

    async def create_appointment(self, data: AppointmentCreate, actor: Actor) -> AppointmentResponse:
        """
        Create a new appointment in the initial status.

        Args:
            data: Appointment creation data
            actor: Authenticated actor

        Returns:
            Created appointment

        Raises:
            BusinessRuleViolation: If the date is not in the future or the user is not a doctor
            NotFoundException: If the doctor or specialty does not exist
        """
        now = self.clock()
        appointment_id = uuid4()

        async with self._transaction():
            ensure_future(data.scheduled_at, now)
            await self._assignable_doctor(data.doctor_id)
            await self.specialties.get_specialty(data.specialty_id)
            initial_status = await self.statuses.lookup(StatusCode.INITIAL)

            await self.repository.insert(
                {
                    "id": appointment_id,
                    "patient_name": data.patient_name,
                    "doctor_id": data.doctor_id,
                    "specialty_id": data.specialty_id,
                    "status_id": initial_status["id"],
                    "scheduled_at": data.scheduled_at,
                    "notes": data.notes,
                },
                actor,
                now,
            )

        appointment = await self.get_appointment(appointment_id)
        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            doctor_id=str(data.doctor_id),
            created_by=actor.audit_name,
        )

        self._publish(EventType.CREATED, appointment, actor)
        return appointment

    async def update_appointment(
        self,
        appointment_id: UUID,
        data: AppointmentUpdate,
        actor: Actor,
    ) -> AppointmentResponse:
        """
        Apply field edits and a status transition.

        Args:
            appointment_id: Appointment ID
            data: Update data; ``status_code`` is always required
            actor: Authenticated actor

        Returns:
            Updated appointment

        Raises:
            NotFoundException: If the appointment, doctor, specialty or status is missing
            BusinessRuleViolation: If the appointment is completed or the actor may not
                perform the transition
        """
        now = self.clock()

        async with self._transaction():
            current = await self.get_appointment(appointment_id)
            ensure_mutable(current.status.code)

            values: dict[str, Any] = {}

            if data.scheduled_at is not None:
                ensure_future(data.scheduled_at, now)
                values["scheduled_at"] = data.scheduled_at

            if data.doctor_id is not None:
                await self._assignable_doctor(data.doctor_id)
                values["doctor_id"] = data.doctor_id

            if data.specialty_id is not None:
                await self.specialties.get_specialty(data.specialty_id)
                values["specialty_id"] = data.specialty_id

            new_status = await self.statuses.lookup(data.status_code)
            authorize_status_change(actor, current.doctor.id, new_status["code"])
            values["status_id"] = new_status["id"]

            if data.notes is not None:
                values["notes"] = data.notes

            if await self.repository.update(appointment_id, values, actor, now) == 0:
                # Removed concurrently after it was read
                raise NotFoundException.for_field("Appointment", "id", appointment_id)

        appointment = await self.get_appointment(appointment_id)
        logger.info(
            "appointment_updated",
            appointment_id=str(appointment_id),
            old_status=current.status.code,
            new_status=appointment.status.code,
            updated_by=actor.audit_name,
        )

        self._publish(EventType.UPDATED, appointment, actor)
        return appointment

    async def delete_appointment(self, appointment_id: UUID, actor: Actor) -> None:
        """
        Soft delete an appointment.

        The DELETED event is published before the row is marked, so it carries
        the pre-deletion snapshot.

        Raises:
            BusinessRuleViolation: If the actor is not an admin or the appointment is completed
            NotFoundException: If the appointment does not exist
        """
        authorize_deletion(actor)
        now = self.clock()

        async with self._transaction():
            appointment = await self.get_appointment(appointment_id)
            ensure_removable(appointment.status.code)

            self._publish(EventType.DELETED, appointment, actor)
            if await self.repository.soft_delete(appointment_id, actor, now) == 0:
                raise NotFoundException.for_field("Appointment", "id", appointment_id)

        logger.info(
            "appointment_deleted",
            appointment_id=str(appointment_id),
            deleted_by=actor.audit_name,
        )

    async def get_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If the appointment is missing or soft-deleted
        """
        row = await self.repository.get(appointment_id)
        if row is None:
            raise NotFoundException.for_field("Appointment", "id", appointment_id)
        return to_response(row)

    async def list_appointments(
        self,
        filters: AppointmentFilters | None = None,
    ) -> list[AppointmentResponse]:
        """List non-deleted appointments, optionally filtered."""
        if filters is None:
            rows = await self.repository.list_all()
        else:
            rows = await self.repository.list_filtered(filters)
        return [to_response(row) for row in rows]

    async def list_by_doctor(self, doctor_id: UUID) -> list[AppointmentResponse]:
        return [to_response(row) for row in await self.repository.list_by_doctor(doctor_id)]

    async def list_by_status(self, status_code: str) -> list[AppointmentResponse]:
        return [to_response(row) for row in await self.repository.list_by_status_code(status_code)]

    async def list_scheduled_between(
        self,
        start: datetime,
        end: datetime,
    ) -> list[AppointmentResponse]:
        rows = await self.repository.list_scheduled_between(start, end)
        return [to_response(row) for row in rows]

    async def list_created_by(self, created_by: str) -> list[AppointmentResponse]:
        return [to_response(row) for row in await self.repository.list_created_by(created_by)]

    async def search_by_patient(self, fragment: str) -> list[AppointmentResponse]:
        return [to_response(row) for row in await self.repository.search_by_patient(fragment)]
