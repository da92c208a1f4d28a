# Socket Manager - Owns the Socket.IO server instance
# This module has NO dependencies on main.py to avoid circular imports

import logging
from typing import Any, Optional

import socketio

from app.core.config import settings

logger = logging.getLogger(__name__)

# This is THE source of truth for the sio object
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.cors_origins
)


class Broadcaster:
    """Fire-and-forget publisher used by request handlers."""

    def __init__(self, server: socketio.AsyncServer):
        self.server = server

    async def emit(self, event: str, data: Any, room: Optional[str] = None, skip_sid: Optional[str] = None):
        """Emit an event to connected clients. Delivery failures are only logged."""
        try:
            await self.server.emit(event, data, room=room, skip_sid=skip_sid)
        except Exception as e:
            logger.error(f"Socket emit error ({event}): {e}")
