"""User model definition using SQLAlchemy Core."""

from sqlalchemy import Boolean, Column, String, Table, Uuid, text

from clinic_scheduler.models.base import audit_columns, metadata, soft_delete_columns

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True),
    # Profile
    Column("name", String(100), nullable=False),
    Column("email", String(100), nullable=False, unique=True, index=True),
    # Role drives every authorization decision in the lifecycle engine
    Column("role", String(20), nullable=False),
    # Account state
    Column("is_active", Boolean, nullable=False, server_default=text("true"), default=True),
    *audit_columns(),
    *soft_delete_columns("users"),
)
