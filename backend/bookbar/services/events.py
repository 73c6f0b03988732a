"""
backend/bookbar/services/events.py

Event emitter: pushes booking notification events to a Redis list for the
notification consumer (services/notifications/consumer.py).

Emitting is fire-and-forget: a queue failure is logged and never rolls back
or fails the operation that produced the event.
"""

import json
import logging
import time

from redis import Redis

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

NOTIFICATIONS_QUEUE = "events:notifications"


class EventQueue:
    def __init__(self, redis: Redis, queue: str = NOTIFICATIONS_QUEUE):
        self.redis = redis
        self.queue = queue

    @property
    def dead_letter_queue(self) -> str:
        return f"{self.queue}:dead"

    def emit(self, event_type: str, payload: dict) -> bool:
        """Push an event. Returns False (and logs) when the queue is unreachable."""
        event = {
            "type": event_type,
            **payload,
            "ts": int(time.time()),
        }
        try:
            self.redis.rpush(self.queue, json.dumps(event))
        except Exception as e:
            logger.error(f"Failed to emit event {event_type}: {e}")
            return False
        logger.info(f"Event emitted: {event_type} → {self.queue}")
        return True

    def pop(self, timeout: int = 5) -> str | None:
        """Blocking FIFO pop; None when nothing arrived within `timeout` seconds."""
        result = self.redis.blpop(self.queue, timeout=timeout)
        if result is None:
            return None
        _, raw = result
        return raw

    def dead_letter(self, raw: str) -> None:
        self.redis.rpush(self.dead_letter_queue, raw)


event_queue = EventQueue(redis_client)
