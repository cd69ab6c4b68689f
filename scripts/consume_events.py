"""Script to tail appointment lifecycle streams and log every event."""

import asyncio
import sys

import structlog

from clinic_scheduler.config import settings
from clinic_scheduler.core.redis_client import close_redis_connection, get_redis_client
from clinic_scheduler.middleware.logging import configure_logging
from clinic_scheduler.services.event_consumer import AppointmentEventConsumer


async def consume(consumer_name: str) -> None:
    """Poll every partition stream until interrupted."""
    configure_logging()
    logger = structlog.get_logger()

    consumer = AppointmentEventConsumer(
        get_redis_client(),
        stream_prefix=settings.events_stream_prefix,
        partitions=settings.events_partitions,
        group=settings.events_consumer_group,
        consumer_name=consumer_name,
    )
    await consumer.ensure_groups()
    logger.info("consumer_started", consumer=consumer_name, streams=consumer.streams)

    try:
        while True:
            handled = await consumer.poll()
            if consumer.replaying and not handled:
                # Pending entries keep failing; back off instead of spinning
                await asyncio.sleep(1)
    finally:
        await close_redis_connection()


if __name__ == "__main__":
    name = sys.argv[1] if len(sys.argv) > 1 else "consumer-1"
    try:
        asyncio.run(consume(name))
    except KeyboardInterrupt:
        print("Stopped")
