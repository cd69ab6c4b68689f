"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Uuid,
)

from clinic_scheduler.models.base import (
    UTCDateTime,
    audit_columns,
    metadata,
    soft_delete_columns,
)

appointments = Table(
    "appointments",
    metadata,
    # Assigned by the application at creation, never changed
    Column("id", Uuid, primary_key=True),
    Column("patient_name", String(100), nullable=False),
    # References
    Column(
        "doctor_id",
        Uuid,
        ForeignKey("users.id", name="fk_appointment_doctor"),
        nullable=False,
    ),
    Column(
        "specialty_id",
        Integer,
        ForeignKey("medical_specialties.id", name="fk_appointment_specialty"),
        nullable=False,
    ),
    Column(
        "status_id",
        Integer,
        ForeignKey("appointment_statuses.id", name="fk_appointment_status"),
        nullable=False,
    ),
    # Appointment details
    Column("scheduled_at", UTCDateTime, nullable=False),
    Column("notes", Text, nullable=True),
    *audit_columns(),
    *soft_delete_columns("appointments"),
    CheckConstraint("length(notes) <= 1000", name="appointments_notes_length_check"),
    Index("idx_appointment_doctor", "doctor_id"),
    Index("idx_appointment_status", "status_id"),
    Index("idx_appointment_scheduled_at", "scheduled_at"),
)
