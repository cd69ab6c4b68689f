"""Consumer for appointment lifecycle streams."""

import redis.asyncio as aioredis
import structlog
from redis.exceptions import ResponseError

from clinic_scheduler.core.event_transport import decode_event
from clinic_scheduler.schemas.events import AppointmentEvent, EventType

logger = structlog.get_logger(__name__)


class AppointmentEventConsumer:
    """
    Reads every partition stream through a Redis consumer group.

    Entries are acknowledged only after :meth:`handle` returns. Until then they
    stay in this consumer's pending list, which is replayed (id ``0``) on the
    first poll after start and after any handler failure, before new entries
    (id ``>``) are read. Delivery is at-least-once; handlers must tolerate
    duplicates.
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        *,
        stream_prefix: str,
        partitions: int,
        group: str,
        consumer_name: str = "consumer-1",
    ):
        """Initialize consumer with Redis client and stream layout."""
        self.redis = redis_client
        self.group = group
        self.consumer_name = consumer_name
        self.streams = [f"{stream_prefix}:{partition}" for partition in range(partitions)]
        # Entries delivered to a previous run may still be unacknowledged
        self._replay_pending = True

    @property
    def replaying(self) -> bool:
        """True while unacknowledged entries are being redelivered."""
        return self._replay_pending

    async def ensure_groups(self) -> None:
        """Create the consumer group on every partition stream if missing."""
        for stream in self.streams:
            try:
                await self.redis.xgroup_create(stream, self.group, id="0", mkstream=True)
                logger.info("consumer_group_created", stream=stream, group=self.group)
            except ResponseError as e:
                if "BUSYGROUP" not in str(e):
                    raise

    async def handle(self, event: AppointmentEvent) -> None:
        """React to a single lifecycle event."""
        if event.event_type == EventType.CREATED:
            logger.info(
                "appointment_event_received",
                event_type=event.event_type.value,
                appointment_id=event.routing_key,
                patient_name=event.patient_name,
                doctor_name=event.doctor_name,
                specialty_name=event.specialty_name,
                scheduled_at=event.scheduled_at.isoformat(),
                performed_by=event.performed_by,
            )
        elif event.event_type == EventType.UPDATED:
            logger.info(
                "appointment_event_received",
                event_type=event.event_type.value,
                appointment_id=event.routing_key,
                status_code=event.status_code,
                performed_by=event.performed_by,
            )
        else:
            logger.info(
                "appointment_event_received",
                event_type=event.event_type.value,
                appointment_id=event.routing_key,
                patient_name=event.patient_name,
                performed_by=event.performed_by,
            )

    async def _read(self, start_id: str, count: int, block_ms: int | None) -> list:
        response = await self.redis.xreadgroup(
            self.group,
            self.consumer_name,
            {stream: start_id for stream in self.streams},
            count=count,
            block=block_ms,
        )
        return response or []

    async def poll(self, count: int = 100, block_ms: int | None = 5000) -> int:
        """
        Read, handle and acknowledge one batch.

        While pending entries remain they are replayed instead of reading new
        ones. A failing handler leaves its entry unacknowledged for the next
        replay.

        Returns:
            Number of entries handled
        """
        response: list = []
        if self._replay_pending:
            response = await self._read("0", count, None)
            if not any(entries for _, entries in response):
                self._replay_pending = False

        if not self._replay_pending:
            response = await self._read(">", count, block_ms)

        handled = 0
        for stream, entries in response:
            for entry_id, fields in entries:
                if not fields:
                    # Trimmed from the stream by MAXLEN while still pending
                    await self.redis.xack(stream, self.group, entry_id)
                    continue

                try:
                    event = decode_event(fields)
                except Exception as e:
                    # Unparseable entries would be redelivered forever
                    logger.error("event_decode_failed", stream=stream, entry_id=entry_id, error=str(e))
                    await self.redis.xack(stream, self.group, entry_id)
                    continue

                try:
                    await self.handle(event)
                except Exception as e:
                    self._replay_pending = True
                    logger.error(
                        "event_handling_failed",
                        stream=stream,
                        entry_id=entry_id,
                        event_type=event.event_type.value,
                        appointment_id=event.routing_key,
                        error=str(e),
                    )
                    continue

                await self.redis.xack(stream, self.group, entry_id)
                handled += 1

        return handled
