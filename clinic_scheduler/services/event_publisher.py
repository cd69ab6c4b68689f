"""Fire-and-forget publisher for appointment lifecycle events."""

import asyncio
import contextlib

import structlog
from prometheus_client import Counter

from clinic_scheduler.config import settings
from clinic_scheduler.core.actor import Actor
from clinic_scheduler.core.event_transport import (
    EventTransport,
    RedisStreamTransport,
    stream_for,
)
from clinic_scheduler.core.redis_client import get_redis_client
from clinic_scheduler.schemas.appointments import AppointmentResponse
from clinic_scheduler.schemas.events import AppointmentEvent, EventType

logger = structlog.get_logger(__name__)

EVENTS_PUBLISHED = Counter(
    "appointment_events_published_total",
    "Lifecycle events written to the transport",
    ["event_type"],
)
EVENTS_FAILED = Counter(
    "appointment_events_failed_total",
    "Lifecycle events the transport rejected",
    ["event_type"],
)
EVENTS_DROPPED = Counter(
    "appointment_events_dropped_total",
    "Lifecycle events dropped before reaching the transport",
    ["event_type"],
)


def build_event(
    event_type: EventType,
    snapshot: AppointmentResponse,
    actor: Actor,
) -> AppointmentEvent:
    """Build the event payload from an appointment projection."""
    return AppointmentEvent(
        event_type=event_type,
        appointment_id=snapshot.id,
        patient_name=snapshot.patient_name,
        doctor_name=snapshot.doctor.name,
        specialty_name=snapshot.specialty.name,
        status_code=snapshot.status.code,
        scheduled_at=snapshot.scheduled_at,
        performed_by=actor.name,
    )


class AppointmentEventPublisher:
    """
    Publishes lifecycle events without ever blocking or failing the caller.

    ``publish`` only enqueues onto a bounded queue. A single worker task drains
    the queue in FIFO order, so events for one appointment reach their partition
    stream in the order they were published. Transport errors and overflow are
    logged and counted, never raised.
    """

    def __init__(
        self,
        transport: EventTransport,
        *,
        enabled: bool = True,
        stream_prefix: str = "appointment-events",
        partitions: int = 8,
        queue_size: int = 1000,
    ):
        """Initialize publisher with a transport and routing settings."""
        self.transport = transport
        self.enabled = enabled
        self.stream_prefix = stream_prefix
        self.partitions = partitions
        self._queue: asyncio.Queue[AppointmentEvent] = asyncio.Queue(maxsize=queue_size)
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def publish(self, event_type: EventType, snapshot: AppointmentResponse, actor: Actor) -> None:
        """
        Schedule a lifecycle event for delivery.

        Args:
            event_type: CREATED, UPDATED or DELETED
            snapshot: Appointment projection the event describes
            actor: Actor who performed the operation
        """
        if not self.enabled:
            logger.debug(
                "event_publishing_disabled",
                event_type=event_type.value,
                appointment_id=str(snapshot.id),
            )
            return

        try:
            event = build_event(event_type, snapshot, actor)
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            EVENTS_DROPPED.labels(event_type=event_type.value).inc()
            logger.error(
                "event_queue_full",
                event_type=event_type.value,
                appointment_id=str(snapshot.id),
                queue_size=self._queue.maxsize,
            )
        except Exception as e:
            EVENTS_DROPPED.labels(event_type=event_type.value).inc()
            logger.error(
                "event_build_failed",
                event_type=event_type.value,
                appointment_id=str(snapshot.id),
                error=str(e),
            )

    def stream_for(self, event: AppointmentEvent) -> str:
        """Partition stream for an event's routing key."""
        return stream_for(self.stream_prefix, event.routing_key, self.partitions)

    async def _deliver(self, event: AppointmentEvent) -> None:
        stream = self.stream_for(event)
        try:
            entry_id = await self.transport.send(stream, event)
        except Exception as e:
            EVENTS_FAILED.labels(event_type=event.event_type.value).inc()
            logger.error(
                "event_publish_failed",
                stream=stream,
                event_type=event.event_type.value,
                appointment_id=event.routing_key,
                error=str(e),
            )
            return

        EVENTS_PUBLISHED.labels(event_type=event.event_type.value).inc()
        logger.info(
            "event_published",
            stream=stream,
            entry_id=entry_id,
            event_type=event.event_type.value,
            appointment_id=event.routing_key,
        )

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start the delivery worker on the running event loop."""
        if not self.running:
            self._worker = asyncio.create_task(self._run(), name="appointment-event-publisher")
            logger.info("event_publisher_started", enabled=self.enabled)

    async def flush(self) -> None:
        """Wait until every queued event has been handed to the transport."""
        if self.running:
            await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        """Drain pending events, then stop the worker."""
        if self._worker is None:
            return

        try:
            await asyncio.wait_for(self.flush(), timeout=timeout)
        except TimeoutError:
            logger.warning("event_publisher_stop_timeout", pending=self._queue.qsize())

        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        logger.info("event_publisher_stopped")


# Global publisher instance
_publisher: AppointmentEventPublisher | None = None


def get_event_publisher() -> AppointmentEventPublisher:
    """
    Get or create the process-wide event publisher.

    Returns:
        Publisher writing to Redis streams
    """
    global _publisher

    if _publisher is None:
        _publisher = AppointmentEventPublisher(
            RedisStreamTransport(get_redis_client(), maxlen=settings.events_stream_maxlen),
            enabled=settings.events_enabled,
            stream_prefix=settings.events_stream_prefix,
            partitions=settings.events_partitions,
            queue_size=settings.events_queue_size,
        )

    return _publisher
