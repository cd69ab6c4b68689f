"""Medical specialties table model using SQLAlchemy Core."""

from sqlalchemy import Column, Integer, String, Table, Text

from clinic_scheduler.models.base import audit_columns, metadata, soft_delete_columns

medical_specialties = Table(
    "medical_specialties",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(50), nullable=False, unique=True),
    Column("name", String(100), nullable=False),
    Column("description", Text, nullable=True),
    *audit_columns(),
    *soft_delete_columns("medical_specialties"),
)
