"""Appointment store: persistence and lookups over non-deleted appointments."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor
from clinic_scheduler.models.appointment_statuses import appointment_statuses
from clinic_scheduler.models.appointments import appointments
from clinic_scheduler.models.specialties import medical_specialties
from clinic_scheduler.models.users import users
from clinic_scheduler.repositories.soft_delete import SoftDeleteTable
from clinic_scheduler.schemas.appointments import AppointmentFilters

store = SoftDeleteTable(appointments)

# Appointment joined with the references a projection needs
_projection_join = appointments.join(users, appointments.c.doctor_id == users.c.id).join(
    medical_specialties, appointments.c.specialty_id == medical_specialties.c.id
).join(appointment_statuses, appointments.c.status_id == appointment_statuses.c.id)

_projection_columns = (
    appointments,
    users.c.name.label("doctor_name"),
    users.c.email.label("doctor_email"),
    medical_specialties.c.code.label("specialty_code"),
    medical_specialties.c.name.label("specialty_name"),
    medical_specialties.c.description.label("specialty_description"),
    appointment_statuses.c.code.label("status_code"),
    appointment_statuses.c.description.label("status_description"),
)


class AppointmentRepository:
    """Appointment rows keyed by UUID, read through the soft-delete filter."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    @staticmethod
    def _projection() -> Select:
        return store.select(*_projection_columns, from_=_projection_join)

    async def _fetch_all(self, stmt: Select) -> list[dict]:
        result = await self.db.execute(stmt.order_by(appointments.c.scheduled_at))
        return [dict(row) for row in result.mappings().all()]

    async def get(self, appointment_id: UUID) -> dict | None:
        """Get one non-deleted appointment with its references."""
        stmt = self._projection().where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_including_deleted(self, appointment_id: UUID) -> dict | None:
        """Raw row regardless of soft-delete state; for audit inspection only."""
        stmt = store.select_including_deleted().where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def list_all(self) -> list[dict]:
        return await self._fetch_all(self._projection())

    async def list_by_doctor(self, doctor_id: UUID) -> list[dict]:
        return await self._fetch_all(self._projection().where(appointments.c.doctor_id == doctor_id))

    async def list_by_status_code(self, status_code: str) -> list[dict]:
        return await self._fetch_all(
            self._projection().where(appointment_statuses.c.code == status_code)
        )

    async def list_scheduled_between(self, start: datetime, end: datetime) -> list[dict]:
        """Appointments whose scheduled time falls in ``[start, end]``."""
        return await self._fetch_all(
            self._projection().where(appointments.c.scheduled_at.between(start, end))
        )

    async def list_created_by(self, created_by: str) -> list[dict]:
        return await self._fetch_all(
            self._projection().where(appointments.c.created_by == created_by)
        )

    async def search_by_patient(self, fragment: str) -> list[dict]:
        """Case-insensitive substring match on the patient name."""
        return await self._fetch_all(
            self._projection().where(appointments.c.patient_name.icontains(fragment, autoescape=True))
        )

    async def list_filtered(self, filters: AppointmentFilters) -> list[dict]:
        """Combine any of the individual lookups into one query."""
        conditions: list[Any] = []

        if filters.doctor_id:
            conditions.append(appointments.c.doctor_id == filters.doctor_id)

        if filters.status:
            conditions.append(appointment_statuses.c.code == filters.status)

        if filters.from_date:
            conditions.append(appointments.c.scheduled_at >= filters.from_date)

        if filters.to_date:
            conditions.append(appointments.c.scheduled_at <= filters.to_date)

        if filters.patient:
            conditions.append(appointments.c.patient_name.icontains(filters.patient, autoescape=True))

        if filters.created_by:
            conditions.append(appointments.c.created_by == filters.created_by)

        stmt = self._projection()
        if conditions:
            stmt = stmt.where(*conditions)

        return await self._fetch_all(stmt)

    async def insert(self, values: dict[str, Any], actor: Actor, now: datetime) -> UUID:
        return await store.insert(self.db, values, actor, now)

    async def update(
        self,
        appointment_id: UUID,
        values: dict[str, Any],
        actor: Actor,
        now: datetime,
    ) -> int:
        return await store.update(self.db, appointment_id, values, actor, now)

    async def soft_delete(self, appointment_id: UUID, actor: Actor, now: datetime) -> int:
        return await store.soft_delete(self.db, appointment_id, actor, now)

    async def restore(self, appointment_id: UUID, actor: Actor, now: datetime) -> int:
        return await store.restore(self.db, appointment_id, actor, now)
