# Socket.IO Event Handlers
# Imports sio from socket_manager (no circular import)

import asyncio
import logging

from pydantic import ValidationError

from app.core.database import safe_session
from app.core.socket_manager import sio
from app.models import AgentStatusUpdate
from app.services.agent_service import upsert_agent_status

logger = logging.getLogger(__name__)

# Status writes run off the event loop, one at a time, in arrival order
_status_lock = asyncio.Lock()


def _store_status(update: AgentStatusUpdate):
    with safe_session() as session:
        upsert_agent_status(session, update)


def agent_room(agent_id) -> str:
    return f"agent_{agent_id}"


@sio.event
async def connect(sid, environ):
    logger.info(f"Client connected: {sid}")

@sio.event
async def disconnect(sid):
    logger.info(f"Client disconnected: {sid}")

@sio.on("joinAgent")
async def join_agent(sid, agent_id):
    """
    Put the client in its agent's room.
    Nothing routes by room yet: every broadcast still reaches all clients.
    """
    await sio.enter_room(sid, agent_room(agent_id))
    logger.info(f"Agent {agent_id} joined room ({sid})")

@sio.on("agentStatus")
async def agent_status(sid, data):
    """
    Presence ping: {'agentId': 'THEO-5001', 'status': 'online', ...}
    Upserts the agent, then relays the raw payload to every other client.
    """
    try:
        update = AgentStatusUpdate.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Dropped invalid agentStatus from {sid}: {e.errors()}")
        return

    try:
        async with _status_lock:
            await asyncio.to_thread(_store_status, update)
    except Exception as e:
        logger.error(f"Agent status update error ({update.agent_id}): {e}")
        return

    await sio.emit("agentStatusUpdate", data, skip_sid=sid)
