"""Tests for lifecycle event publishing and routing."""

import zlib
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from prometheus_client import REGISTRY

from clinic_scheduler.core.actor import Actor, UserRole
from clinic_scheduler.core.event_transport import (
    RedisStreamTransport,
    decode_event,
    encode_event,
    partition_for,
    stream_for,
)
from clinic_scheduler.schemas.appointments import AppointmentResponse
from clinic_scheduler.schemas.events import EventType
from clinic_scheduler.schemas.specialties import SpecialtyResponse
from clinic_scheduler.schemas.statuses import StatusResponse
from clinic_scheduler.schemas.users import DoctorSummary
from clinic_scheduler.services.event_publisher import AppointmentEventPublisher, build_event

ACTOR = Actor(id=uuid4(), name="Rita Desk", email="rita@clinic.com", role=UserRole.RECEPTIONIST)


def _snapshot(**overrides) -> AppointmentResponse:
    now = datetime.now(UTC)
    data = {
        "id": uuid4(),
        "patient_name": "John Patient",
        "doctor": DoctorSummary(id=uuid4(), name="Dr. Gregory House", email="house@clinic.com"),
        "specialty": SpecialtyResponse(id=1, code="CARDIOLOGY", name="Cardiology"),
        "status": StatusResponse(id=1, code="SCHEDULED", description="Appointment scheduled"),
        "scheduled_at": now + timedelta(days=1),
        "created_at": now,
    }
    data.update(overrides)
    return AppointmentResponse(**data)


def _sample(metric: str, event_type: EventType) -> float:
    return REGISTRY.get_sample_value(metric, {"event_type": event_type.value}) or 0.0


def test_partition_is_stable() -> None:
    key = "9f1c2e4a-1111-4222-8333-444455556666"

    assert partition_for(key, 8) == zlib.crc32(key.encode("utf-8")) % 8
    assert stream_for("appointment-events", key, 8) == f"appointment-events:{partition_for(key, 8)}"
    assert all(0 <= partition_for(str(uuid4()), 3) < 3 for _ in range(50))


def test_build_event_from_snapshot() -> None:
    snapshot = _snapshot()

    event = build_event(EventType.CREATED, snapshot, ACTOR)

    assert event.appointment_id == snapshot.id
    assert event.routing_key == str(snapshot.id)
    assert event.doctor_name == "Dr. Gregory House"
    assert event.specialty_name == "Cardiology"
    assert event.status_code == "SCHEDULED"
    assert event.performed_by == "Rita Desk"
    assert decode_event(encode_event(event)) == event

    raw_fields = {key.encode(): value.encode() for key, value in encode_event(event).items()}
    assert decode_event(raw_fields) == event

    with pytest.raises(KeyError):
        decode_event({"key": event.routing_key})


@pytest.mark.asyncio
async def test_disabled_publisher_sends_nothing(transport) -> None:
    publisher = AppointmentEventPublisher(transport, enabled=False)
    publisher.start()

    publisher.publish(EventType.CREATED, _snapshot(), ACTOR)
    await publisher.stop()

    assert transport.sent == []


@pytest.mark.asyncio
async def test_events_of_one_appointment_share_a_stream(transport) -> None:
    publisher = AppointmentEventPublisher(transport, stream_prefix="events", partitions=16)
    publisher.start()
    snapshot = _snapshot()

    for event_type in (EventType.CREATED, EventType.UPDATED, EventType.DELETED):
        publisher.publish(event_type, snapshot, ACTOR)
    await publisher.stop()

    assert [event.event_type for _, event in transport.sent] == [
        EventType.CREATED,
        EventType.UPDATED,
        EventType.DELETED,
    ]
    assert {stream for stream, _ in transport.sent} == {
        stream_for("events", str(snapshot.id), 16),
    }


@pytest.mark.asyncio
async def test_full_queue_drops_event(transport) -> None:
    publisher = AppointmentEventPublisher(transport, queue_size=1)
    before = _sample("appointment_events_dropped_total", EventType.UPDATED)

    # Worker not started: the single slot fills up
    publisher.publish(EventType.UPDATED, _snapshot(), ACTOR)
    publisher.publish(EventType.UPDATED, _snapshot(), ACTOR)

    assert _sample("appointment_events_dropped_total", EventType.UPDATED) == before + 1

    publisher.start()
    await publisher.stop()
    assert len(transport.sent) == 1


@pytest.mark.asyncio
async def test_transport_error_is_swallowed(transport) -> None:
    transport.fail = True
    publisher = AppointmentEventPublisher(transport)
    publisher.start()
    before = _sample("appointment_events_failed_total", EventType.DELETED)

    publisher.publish(EventType.DELETED, _snapshot(), ACTOR)
    await publisher.flush()

    assert _sample("appointment_events_failed_total", EventType.DELETED) == before + 1
    assert publisher.running

    # The worker keeps delivering once the transport recovers
    transport.fail = False
    publisher.publish(EventType.CREATED, _snapshot(), ACTOR)
    await publisher.stop()

    assert [event.event_type for _, event in transport.sent] == [EventType.CREATED]
    assert not publisher.running


@pytest.mark.asyncio
async def test_redis_stream_transport_appends_entry() -> None:
    redis_client = AsyncMock()
    redis_client.xadd.return_value = "1700000000000-0"
    transport = RedisStreamTransport(redis_client, maxlen=500)
    event = build_event(EventType.CREATED, _snapshot(), ACTOR)

    entry_id = await transport.send("appointment-events:3", event)

    assert entry_id == "1700000000000-0"
    redis_client.xadd.assert_awaited_once_with(
        "appointment-events:3",
        encode_event(event),
        maxlen=500,
        approximate=True,
    )
