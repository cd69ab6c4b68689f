"""Database models."""

from clinic_scheduler.models.appointment_statuses import appointment_statuses
from clinic_scheduler.models.appointments import appointments
from clinic_scheduler.models.base import metadata
from clinic_scheduler.models.specialties import medical_specialties
from clinic_scheduler.models.users import users

__all__ = [
    "appointment_statuses",
    "appointments",
    "medical_specialties",
    "metadata",
    "users",
]
