# Agent messaging relay - append to / query the directory's message log

import random
import string
import time

from app.core.directory import AgentDirectory, DirectoryResult, Ok
from app.models import MessageCreate, iso_now

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def new_message_id() -> str:
    """msg_<epoch millis>_<9 base36 chars>"""
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=9))
    return f"msg_{int(time.time() * 1000)}_{suffix}"


async def send_message(directory: AgentDirectory, payload: MessageCreate) -> DirectoryResult:
    """
    Append a message to the log. On success returns Ok(event) where event is
    the payload broadcast as `newMessage`.
    """
    message_id = new_message_id()
    timestamp = iso_now()

    result = await directory.append_message(
        message_id,
        payload.message,
        {
            "fromAgent": payload.from_agent,
            "toAgent": payload.to_agent,
            "messageType": payload.message_type,
            "priority": payload.priority,
            "timestamp": timestamp,
            "status": "delivered",
        },
    )
    if not isinstance(result, Ok):
        return result

    return Ok({
        "id": message_id,
        "fromAgent": payload.from_agent,
        "toAgent": payload.to_agent,
        "message": payload.message,
        "messageType": payload.message_type,
        "priority": payload.priority,
        "timestamp": timestamp,
    })


async def fetch_messages(directory: AgentDirectory, agent_id: str, limit: int) -> DirectoryResult:
    # Loose text match on the agent id; ordering is whatever the store returns
    return await directory.query_messages(agent_id or "", limit)
