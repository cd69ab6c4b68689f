"""Create scheduling schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SOFT_DELETE_CHECK = (
    "(deleted = false AND deleted_at IS NULL AND deleted_by IS NULL)"
    " OR (deleted = true AND deleted_at IS NOT NULL AND deleted_by IS NOT NULL)"
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("updated_by", sa.String(100), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(100), nullable=True),
    ]


def upgrade() -> None:
    """Create users, catalogs and appointments tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_audit_columns(),
        sa.CheckConstraint(SOFT_DELETE_CHECK, name="users_soft_delete_check"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "medical_specialties",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint(SOFT_DELETE_CHECK, name="medical_specialties_soft_delete_check"),
    )

    op.create_table(
        "appointment_statuses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.String(100), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint(SOFT_DELETE_CHECK, name="appointment_statuses_soft_delete_check"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("patient_name", sa.String(100), nullable=False),
        sa.Column(
            "doctor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", name="fk_appointment_doctor"),
            nullable=False,
        ),
        sa.Column(
            "specialty_id",
            sa.Integer(),
            sa.ForeignKey("medical_specialties.id", name="fk_appointment_specialty"),
            nullable=False,
        ),
        sa.Column(
            "status_id",
            sa.Integer(),
            sa.ForeignKey("appointment_statuses.id", name="fk_appointment_status"),
            nullable=False,
        ),
        sa.Column("scheduled_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint(SOFT_DELETE_CHECK, name="appointments_soft_delete_check"),
        sa.CheckConstraint("length(notes) <= 1000", name="appointments_notes_length_check"),
    )
    op.create_index("idx_appointment_doctor", "appointments", ["doctor_id"])
    op.create_index("idx_appointment_status", "appointments", ["status_id"])
    op.create_index("idx_appointment_scheduled_at", "appointments", ["scheduled_at"])


def downgrade() -> None:
    """Drop scheduling schema."""
    op.drop_index("idx_appointment_scheduled_at", table_name="appointments")
    op.drop_index("idx_appointment_status", table_name="appointments")
    op.drop_index("idx_appointment_doctor", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("appointment_statuses")
    op.drop_table("medical_specialties")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
