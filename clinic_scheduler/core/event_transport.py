"""Stream transport for lifecycle events."""

import zlib
from collections.abc import Mapping
from typing import Protocol

import redis.asyncio as aioredis

from clinic_scheduler.schemas.events import AppointmentEvent


class EventTransport(Protocol):
    """Anything able to append an event to a named, ordered stream."""

    async def send(self, stream: str, event: AppointmentEvent) -> str | None: ...


def partition_for(key: str, partitions: int) -> int:
    """Stable partition for a routing key; identical across processes."""
    return zlib.crc32(key.encode("utf-8")) % partitions


def stream_for(prefix: str, key: str, partitions: int) -> str:
    """Name of the partition stream a routing key is delivered to."""
    return f"{prefix}:{partition_for(key, partitions)}"


def encode_event(event: AppointmentEvent) -> dict[str, str]:
    """Flatten an event into Redis stream fields."""
    return {
        "key": event.routing_key,
        "event_type": event.event_type.value,
        "payload": event.model_dump_json(),
    }


def decode_event(fields: Mapping[str | bytes, str | bytes]) -> AppointmentEvent:
    """
    Inverse of :func:`encode_event`.

    Accepts the raw bytes fields a client returns when responses are not
    decoded.
    """
    payload = fields.get("payload", fields.get(b"payload"))
    if payload is None:
        raise KeyError("payload")
    return AppointmentEvent.model_validate_json(payload)


class RedisStreamTransport:
    """Appends events to Redis streams, one stream per partition."""

    def __init__(self, redis_client: aioredis.Redis, maxlen: int | None = None):
        """Initialize transport with Redis client."""
        self.redis = redis_client
        self.maxlen = maxlen

    async def send(self, stream: str, event: AppointmentEvent) -> str | None:
        """
        Append an event to a stream.

        Args:
            stream: Partition stream name
            event: Event to append

        Returns:
            Redis stream entry id
        """
        return await self.redis.xadd(
            stream,
            encode_event(event),
            maxlen=self.maxlen,
            approximate=True,
        )
