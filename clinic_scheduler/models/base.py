"""Shared metadata and column factories for audited, soft-deletable tables."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    String,
    text,
)
from sqlalchemy.types import TypeDecorator

# Metadata for all tables
metadata = MetaData()


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp that always comes back as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        # SQLite drops the offset on the way out
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def audit_columns() -> list[Column]:
    """Columns populated by the persistence layer on every write."""
    return [
        Column("created_at", UTCDateTime, nullable=False),
        Column("created_by", String(100), nullable=True),
        Column("updated_at", UTCDateTime, nullable=True),
        Column("updated_by", String(100), nullable=True),
    ]


def soft_delete_columns(table_name: str) -> list[Any]:
    """Soft-delete columns plus the constraint tying them together."""
    return [
        Column("deleted", Boolean, nullable=False, server_default=text("false"), default=False),
        Column("deleted_at", UTCDateTime, nullable=True),
        Column("deleted_by", String(100), nullable=True),
        CheckConstraint(
            "(deleted = false AND deleted_at IS NULL AND deleted_by IS NULL)"
            " OR (deleted = true AND deleted_at IS NOT NULL AND deleted_by IS NOT NULL)",
            name=f"{table_name}_soft_delete_check",
        ),
    ]
