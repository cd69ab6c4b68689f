"""Appointment schemas for request/response validation."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from clinic_scheduler.schemas.specialties import SpecialtyResponse
from clinic_scheduler.schemas.statuses import StatusResponse
from clinic_scheduler.schemas.users import DoctorSummary


def _as_utc(v: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC."""
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v


class AppointmentCreate(BaseModel):
    """Schema for creating a new appointment. Status is never client supplied."""

    patient_name: str = Field(..., min_length=3, max_length=100)
    doctor_id: UUID
    specialty_id: int
    scheduled_at: datetime
    notes: str | None = Field(None, max_length=1000)

    @field_validator("patient_name")
    @classmethod
    def validate_patient_name(cls, v: str) -> str:
        """Reject names that are blank once trimmed."""
        if len(v.strip()) < 3:
            raise ValueError("Patient name must have between 3 and 100 characters")
        return v.strip()

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: datetime) -> datetime:
        return _as_utc(v)


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment; every call carries the target status."""

    status_code: str = Field(..., min_length=1, max_length=50)
    doctor_id: UUID | None = None
    specialty_id: int | None = None
    scheduled_at: datetime | None = None
    notes: str | None = Field(None, max_length=1000)

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Status code is required")
        return v.strip().upper()

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class AppointmentResponse(BaseModel):
    """Projection returned to callers; never the raw persisted row."""

    id: UUID
    patient_name: str
    doctor: DoctorSummary
    specialty: SpecialtyResponse
    status: StatusResponse
    scheduled_at: datetime
    notes: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    doctor_id: UUID | None = None
    status: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    patient: str | None = Field(None, min_length=1, max_length=100)
    created_by: str | None = None

    @field_validator("from_date", "to_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)
