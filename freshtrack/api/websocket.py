"""WebSocket endpoint for real-time notification delivery."""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from freshtrack.database import SessionLocal
from freshtrack.models.user import User
from freshtrack.services.auth import decode_access_token
from freshtrack.services.realtime import NotificationSubscriber

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])


def _authenticate(token: str) -> int | None:
    """Resolve a token to an active user id."""
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == int(payload["sub"])).first()
        if not user or not user.is_active:
            return None
        return user.id
    finally:
        db.close()


@router.websocket("/notifications")
async def websocket_notifications(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    """Stream the user's notification events as they are stored.

    Authentication via token query parameter (WebSocket doesn't support headers).
    """
    user_id = _authenticate(token)
    if user_id is None:
        await websocket.close(code=4001, reason="Invalid token")
        return

    subscriber = NotificationSubscriber(user_id)
    await websocket.accept()
    logger.info(f"WebSocket connected: user={user_id}")

    async def handle_messages() -> None:
        """Receive events from Redis and forward to the WebSocket."""
        async for message in subscriber.events():
            try:
                await websocket.send_json(message)
            except WebSocketDisconnect:
                break
            except Exception as e:
                logger.error(f"Error sending WebSocket message: {e}")
                break

    async def handle_ping() -> None:
        """Send periodic pings to keep connection alive."""
        while True:
            await asyncio.sleep(30)
            await websocket.send_json({"type": "ping"})

    async def handle_client() -> None:
        """Drain client messages (pong responses) until it disconnects."""
        while True:
            await websocket.receive_json()

    tasks = [
        asyncio.create_task(handle_messages()),
        asyncio.create_task(handle_ping()),
        asyncio.create_task(handle_client()),
    ]
    try:
        # The first handler to finish means the connection is gone
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if task.exception() and not isinstance(task.exception(), WebSocketDisconnect):
                logger.error(f"WebSocket error: {task.exception()}")
    finally:
        logger.info(f"WebSocket disconnected: user={user_id}")
        await subscriber.close()
