"""
Audit and soft-delete helpers shared by every persisted table.

Every table built with ``audit_columns()`` and ``soft_delete_columns()`` is
wrapped in a :class:`SoftDeleteTable`. Reads go through :meth:`SoftDeleteTable.select`,
which always carries the ``deleted = false`` predicate; the only way to see a
deleted row is the explicitly named :meth:`SoftDeleteTable.select_including_deleted`.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import ColumnElement, FromClause, Select, Table, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.actor import Actor, audit_name


def utcnow() -> datetime:
    return datetime.now(UTC)


def creation_values(actor: Actor | None, now: datetime) -> dict[str, Any]:
    """Audit and soft-delete values for a freshly inserted row."""
    who = audit_name(actor)
    return {
        "created_at": now,
        "created_by": who,
        "updated_at": now,
        "updated_by": who,
        "deleted": False,
        "deleted_at": None,
        "deleted_by": None,
    }


def modification_values(actor: Actor | None, now: datetime) -> dict[str, Any]:
    """Audit values refreshed on every update."""
    return {"updated_at": now, "updated_by": audit_name(actor)}


def soft_delete_values(actor: Actor | None, now: datetime) -> dict[str, Any]:
    """Mark a row as logically removed."""
    return {"deleted": True, "deleted_at": now, "deleted_by": audit_name(actor)}


def restore_values() -> dict[str, Any]:
    """Reverse :func:`soft_delete_values`."""
    return {"deleted": False, "deleted_at": None, "deleted_by": None}


class SoftDeleteTable:
    """Query gateway that applies the soft-delete filter by construction."""

    def __init__(self, table: Table, pk: str = "id"):
        """Wrap a table carrying audit and soft-delete columns."""
        self.table = table
        self.pk = table.c[pk]

    @property
    def c(self) -> Any:
        return self.table.c

    @property
    def not_deleted(self) -> ColumnElement[bool]:
        return self.table.c.deleted.is_(False)

    def select(self, *columns: Any, from_: FromClause | None = None) -> Select:
        """
        Build a SELECT over non-deleted rows.

        Args:
            columns: Columns to select, defaults to the whole table
            from_: Optional join rooted at this table

        Returns:
            Select statement already filtered on ``deleted = false``
        """
        return self.select_including_deleted(*columns, from_=from_).where(self.not_deleted)

    def select_including_deleted(self, *columns: Any, from_: FromClause | None = None) -> Select:
        """Build a SELECT that also returns soft-deleted rows."""
        stmt = select(*(columns or (self.table,)))
        return stmt.select_from(from_ if from_ is not None else self.table)

    async def insert(
        self,
        db: AsyncSession,
        values: dict[str, Any],
        actor: Actor | None,
        now: datetime | None = None,
    ) -> Any:
        """
        Insert a row with audit fields populated from the actor.

        Returns:
            Primary key of the inserted row
        """
        row = {**values, **creation_values(actor, now or utcnow())}
        result = await db.execute(insert(self.table).values(**row))
        if self.pk.name in values:
            return values[self.pk.name]
        return result.inserted_primary_key[0]

    async def update(
        self,
        db: AsyncSession,
        record_id: Any,
        values: dict[str, Any],
        actor: Actor | None,
        now: datetime | None = None,
    ) -> int:
        """Update a non-deleted row, refreshing its audit fields."""
        stmt = (
            update(self.table)
            .where(self.pk == record_id, self.not_deleted)
            .values(**values, **modification_values(actor, now or utcnow()))
        )
        result = await db.execute(stmt)
        return result.rowcount

    async def soft_delete(
        self,
        db: AsyncSession,
        record_id: Any,
        actor: Actor | None,
        now: datetime | None = None,
    ) -> int:
        """Soft delete a row; the row itself is never removed."""
        now = now or utcnow()
        stmt = (
            update(self.table)
            .where(self.pk == record_id, self.not_deleted)
            .values(**soft_delete_values(actor, now), **modification_values(actor, now))
        )
        result = await db.execute(stmt)
        return result.rowcount

    async def restore(
        self,
        db: AsyncSession,
        record_id: Any,
        actor: Actor | None,
        now: datetime | None = None,
    ) -> int:
        """Bring a soft-deleted row back into default reads."""
        stmt = (
            update(self.table)
            .where(self.pk == record_id, self.table.c.deleted.is_(True))
            .values(**restore_values(), **modification_values(actor, now or utcnow()))
        )
        result = await db.execute(stmt)
        return result.rowcount
