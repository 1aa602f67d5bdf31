"""Tests for real-time notification delivery."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.websockets import WebSocketDisconnect

import freshtrack.services.realtime as realtime_module
from freshtrack.services.realtime import (
    NotificationEventType,
    NotificationSubscriber,
    get_sync_redis,
    publish_user_event,
    user_channel,
)


class TestNotificationEventType:
    """Tests for NotificationEventType enum."""

    def test_events_exist(self):
        assert NotificationEventType.NOTIFICATION_CREATED == "notification_created"
        assert NotificationEventType.NOTIFICATION_READ == "notification_read"
        assert NotificationEventType.NOTIFICATIONS_CLEARED == "notifications_cleared"


class TestGetSyncRedis:
    """Tests for get_sync_redis function."""

    def test_creates_redis_client(self, monkeypatch):
        monkeypatch.setattr(realtime_module, "_sync_redis", None)

        with patch("freshtrack.services.realtime.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_from_url.return_value = mock_client

            assert get_sync_redis() == mock_client
            mock_from_url.assert_called_once()

    def test_reuses_existing_client(self, mock_redis):
        with patch("freshtrack.services.realtime.redis.from_url") as mock_from_url:
            assert get_sync_redis() == mock_redis
            mock_from_url.assert_not_called()


class TestPublishUserEvent:
    """Tests for publish_user_event function."""

    def test_publishes_to_user_channel(self, mock_redis):
        publish_user_event(7, NotificationEventType.NOTIFICATION_CREATED, {"id": 456})

        mock_redis.publish.assert_called_once()
        channel, payload = mock_redis.publish.call_args[0]
        assert channel == user_channel(7) == "user:7:notifications"

        message = json.loads(payload)
        assert message["type"] == "notification_created"
        assert message["user_id"] == 7
        assert message["data"] == {"id": 456}
        assert "timestamp" in message

    def test_publishes_event_without_data(self, mock_redis):
        publish_user_event(7, NotificationEventType.NOTIFICATIONS_CLEARED)

        message = json.loads(mock_redis.publish.call_args[0][1])
        assert message["data"] == {}

    def test_handles_redis_error_gracefully(self, mock_redis):
        mock_redis.publish.side_effect = Exception("Redis connection failed")

        # Should not raise
        publish_user_event(7, NotificationEventType.NOTIFICATION_CREATED, {"id": 456})


class TestNotificationSubscriber:
    """Tests for NotificationSubscriber class."""

    def test_init_resolves_user_channel(self):
        subscriber = NotificationSubscriber(7)
        assert subscriber.channel == "user:7:notifications"
        assert subscriber._redis is None
        assert subscriber._pubsub is None

    @pytest.mark.asyncio
    async def test_get_redis_creates_connection(self):
        subscriber = NotificationSubscriber(7, redis_url="redis://cache:6379/1")

        with patch("freshtrack.services.realtime.aioredis.from_url") as mock_from_url:
            mock_redis = AsyncMock()
            mock_from_url.return_value = mock_redis

            assert await subscriber._get_redis() == mock_redis
            mock_from_url.assert_called_once_with("redis://cache:6379/1")

    @pytest.mark.asyncio
    async def test_close_releases_connections(self):
        subscriber = NotificationSubscriber(7)
        subscriber._redis = AsyncMock()
        subscriber._pubsub = AsyncMock()

        await subscriber.close()

        subscriber._pubsub.close.assert_called_once()
        subscriber._redis.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_without_connections(self):
        # Should not raise
        await NotificationSubscriber(7).close()

    @pytest.mark.asyncio
    async def test_events_skip_control_invalid_and_foreign_messages(self):
        """Only well-formed events addressed to the subscriber's user come through."""
        subscriber = NotificationSubscriber(7)
        mock_redis = MagicMock()
        mock_pubsub = MagicMock()
        event = {"type": "notification_created", "user_id": 7}

        async def mock_listen():
            yield {"type": "subscribe", "data": 1}
            yield {"type": "message", "data": "not valid json"}
            yield {"type": "message", "data": json.dumps({"type": "ping", "user_id": 8})}
            yield {"type": "message", "data": json.dumps(event)}

        mock_pubsub.listen = mock_listen
        mock_pubsub.subscribe = AsyncMock()
        mock_pubsub.unsubscribe = AsyncMock()
        mock_redis.pubsub.return_value = mock_pubsub
        subscriber._redis = mock_redis

        messages = []
        async for msg in subscriber.events():
            messages.append(msg)
            break

        assert messages == [event]
        mock_pubsub.subscribe.assert_called_once_with("user:7:notifications")


class TestNotificationWebSocket:
    """Tests for the notification WebSocket endpoint."""

    def test_rejects_invalid_token(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/api/v1/ws/notifications?token=bad") as ws:
                ws.receive_json()

        assert exc_info.value.code == 4001
