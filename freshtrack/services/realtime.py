"""Real-time notification delivery using Redis pub/sub."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import redis
import redis.asyncio as aioredis

from freshtrack.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)
settings = get_settings()


class NotificationEventType(StrEnum):
    """Event types pushed to a user's notification channel."""

    NOTIFICATION_CREATED = "notification_created"
    NOTIFICATION_READ = "notification_read"
    NOTIFICATIONS_CLEARED = "notifications_cleared"


# Synchronous Redis client for use in API endpoints and Celery tasks
_sync_redis: redis.Redis | None = None


def user_channel(user_id: int) -> str:
    """Redis channel carrying a user's notification events."""
    return f"user:{user_id}:notifications"


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_user_event(
    user_id: int, event_type: NotificationEventType, data: dict | None = None
) -> None:
    """Publish an event to a user's notification channel.

    Delivery is best effort: a Redis failure is logged and never fails the
    caller, since the notification is already stored.
    """
    try:
        redis_client = get_sync_redis()
        channel = user_channel(user_id)
        message = {
            "type": event_type,
            "user_id": user_id,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": data or {},
        }
        redis_client.publish(channel, json.dumps(message, default=str))
        logger.debug(f"Published {event_type} to {channel}")
    except Exception as e:
        logger.error(f"Failed to publish notification event: {e}")


class NotificationSubscriber:
    """Streams one user's notification events from their Redis channel.

    Each WebSocket connection owns one subscriber and closes it on disconnect.
    """

    def __init__(self, user_id: int, redis_url: str | None = None) -> None:
        self.user_id = user_id
        self.channel = user_channel(user_id)
        self._redis_url = redis_url or settings.redis_url
        self._redis: aioredis.Redis | None = None
        self._pubsub: "PubSub | None" = None

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url)
        return self._redis

    def _decode(self, raw: bytes | str) -> dict | None:
        """Parse an event, dropping malformed ones and ones for another user."""
        try:
            event = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON on {self.channel}: {raw!r}")
            return None
        if not isinstance(event, dict) or event.get("user_id") != self.user_id:
            logger.warning(f"Dropped event not addressed to user {self.user_id}")
            return None
        return event

    async def events(self) -> AsyncIterator[dict]:
        """Yield the user's events as they are published."""
        redis_conn = await self._get_redis()
        self._pubsub = redis_conn.pubsub()
        await self._pubsub.subscribe(self.channel)

        try:
            async for message in self._pubsub.listen():
                if message["type"] != "message":
                    continue
                event = self._decode(message["data"])
                if event is not None:
                    yield event
        finally:
            await self._pubsub.unsubscribe(self.channel)

    async def close(self) -> None:
        """Release the pub/sub subscription and the connection."""
        if self._pubsub:
            await self._pubsub.close()
        if self._redis:
            await self._redis.close()
