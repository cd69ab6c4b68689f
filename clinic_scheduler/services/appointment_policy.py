"""Rules the lifecycle engine enforces before touching the store."""

from datetime import datetime
from uuid import UUID

from clinic_scheduler.core.actor import Actor, UserRole
from clinic_scheduler.core.exceptions import BusinessRuleViolation
from clinic_scheduler.schemas.statuses import StatusCode


def ensure_future(scheduled_at: datetime, now: datetime) -> None:
    """Scheduled time must be strictly after ``now``."""
    if scheduled_at <= now:
        raise BusinessRuleViolation("Scheduled date must be in the future")


def ensure_doctor(user: dict) -> None:
    """Only users holding the DOCTOR role can be assigned to an appointment."""
    if user["role"] != UserRole.DOCTOR.value:
        raise BusinessRuleViolation(f"User {user['id']} is not a doctor")


def ensure_mutable(status_code: str) -> None:
    if status_code == StatusCode.TERMINAL:
        raise BusinessRuleViolation("Completed appointments are immutable and cannot be changed")


def ensure_removable(status_code: str) -> None:
    if status_code == StatusCode.TERMINAL:
        raise BusinessRuleViolation("Completed appointments cannot be deleted")


def authorize_status_change(actor: Actor, assigned_doctor_id: UUID, target_code: str) -> None:
    """
    Gate a status transition on the actor's role.

    IN_PROGRESS and COMPLETED need a DOCTOR or an ADMIN. A DOCTOR may only touch
    appointments assigned to them, whatever the target status. ADMIN is never
    restricted; any other code is open to RECEPTIONIST.

    Raises:
        BusinessRuleViolation: If the actor may not perform the transition
    """
    if target_code in StatusCode.CLINICAL and actor.role not in (UserRole.DOCTOR, UserRole.ADMIN):
        raise BusinessRuleViolation(f"Only doctors can set status to {target_code}")

    if actor.is_doctor and actor.id != assigned_doctor_id:
        raise BusinessRuleViolation("Doctors can only update own appointments")


def authorize_deletion(actor: Actor) -> None:
    if not actor.is_admin:
        raise BusinessRuleViolation("Only administrators can delete appointments")
