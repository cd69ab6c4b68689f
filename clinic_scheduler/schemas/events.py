"""Lifecycle event payloads published to downstream consumers."""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Lifecycle event type enumeration."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class AppointmentEvent(BaseModel):
    """Transport-agnostic lifecycle event."""

    event_type: EventType
    appointment_id: UUID
    patient_name: str
    doctor_name: str
    specialty_name: str
    status_code: str
    scheduled_at: datetime
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    performed_by: str

    @property
    def routing_key(self) -> str:
        """All events of one appointment share this key."""
        return str(self.appointment_id)
