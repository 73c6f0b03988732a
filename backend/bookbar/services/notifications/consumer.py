"""
Notification queue consumer.

Pops booking events from events:notifications and delivers them through
NotificationSender. Started as an asyncio task in the app lifespan; the
blocking Redis pop and the database work run in worker threads.

Each event is delivered once. A failed event is logged and moved to the
dead-letter list, never re-queued. Nothing here ever propagates into
request handling.
"""

import asyncio
import json
import logging

from ...database import SessionLocal
from ..business import load_business_config
from ..events import EventQueue, event_queue
from .base import SendResult
from .sender import NotificationSender, deliver_booking_event

logger = logging.getLogger(__name__)

POP_TIMEOUT = 5  # seconds


async def notification_consumer_loop(
    queue: EventQueue | None = None,
    sender: NotificationSender | None = None,
    session_factory=SessionLocal,
) -> None:
    queue = queue or event_queue
    sender = sender or NotificationSender.from_settings()
    logger.info("notification_consumer_loop started")

    try:
        while True:
            try:
                raw = await asyncio.to_thread(queue.pop, POP_TIMEOUT)
                if raw is None:
                    continue
                await asyncio.to_thread(process_event, queue, raw, sender, session_factory)

            except asyncio.CancelledError:
                logger.info("notification_consumer_loop cancelled")
                raise
            except Exception:
                logger.exception("notification_consumer_loop error, retrying in 2s")
                await asyncio.sleep(2)
    except asyncio.CancelledError:
        pass


def process_event(
    queue: EventQueue,
    raw: str,
    sender: NotificationSender,
    session_factory=SessionLocal,
) -> SendResult:
    """Deliver one raw queue entry; dead-letter it on failure."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in event queue: {raw[:200]}")
        queue.dead_letter(raw)
        return SendResult.failure("Invalid event payload")

    event_type = data.get("type")
    booking_id = data.get("booking_id")

    db = session_factory()
    try:
        business = load_business_config(db)
        result = deliver_booking_event(db, sender, business, event_type, booking_id)
    except Exception as e:
        logger.exception(f"Failed to process event type={event_type} booking={booking_id}")
        result = SendResult.failure(str(e))
    finally:
        db.close()

    if result.ok:
        return result

    queue.dead_letter(raw)
    logger.warning(
        f"Event moved to dead-letter queue {queue.dead_letter_queue}: "
        f"type={event_type} booking={booking_id} error={result.error}"
    )
    return result
