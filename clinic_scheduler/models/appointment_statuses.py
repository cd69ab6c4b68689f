"""Appointment status catalog table model using SQLAlchemy Core."""

from sqlalchemy import Column, Integer, String, Table

from clinic_scheduler.models.base import audit_columns, metadata, soft_delete_columns

appointment_statuses = Table(
    "appointment_statuses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(50), nullable=False, unique=True),
    Column("description", String(100), nullable=False),
    *audit_columns(),
    *soft_delete_columns("appointment_statuses"),
)
