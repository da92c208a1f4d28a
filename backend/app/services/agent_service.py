# Agent persistence and directory registration

import asyncio
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.directory import AgentDirectory, DirectoryResult, Ok
from app.models import (
    Agent,
    AgentCreate,
    AgentRead,
    AgentStatusUpdate,
    AgentUpdate,
    column_values,
    iso_now,
    utcnow,
)

logger = logging.getLogger(__name__)


class DuplicateAgentError(ValueError):
    """An agent with the same agentId already exists."""


def list_agents(session: Session) -> List[Agent]:
    return list(session.exec(select(Agent).order_by(Agent.agent_id)).all())


def get_agent_by_agent_id(session: Session, agent_id: str) -> Optional[Agent]:
    return session.exec(select(Agent).where(Agent.agent_id == agent_id)).first()


def resolve_agent(session: Session, key: str) -> Optional[Agent]:
    """Look an agent up by record id, then by agentId."""
    return session.get(Agent, key) or get_agent_by_agent_id(session, key)


def create_agent(session: Session, payload: AgentCreate) -> Agent:
    if get_agent_by_agent_id(session, payload.agent_id) is not None:
        raise DuplicateAgentError(f"Agent {payload.agent_id} already exists")

    agent = Agent(**column_values(payload))
    session.add(agent)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateAgentError(f"Agent {payload.agent_id} already exists") from e
    session.refresh(agent)
    logger.info(f"Agent registered: {agent.agent_id}")
    return agent


def update_agent(session: Session, key: str, payload: AgentUpdate) -> Optional[Agent]:
    """Apply the supplied fields and stamp lastSeen. None if the agent does not exist."""
    agent = resolve_agent(session, key)
    if agent is None:
        return None

    values = column_values(payload, exclude_unset=True)
    new_agent_id = values.get("agent_id")
    if new_agent_id and new_agent_id != agent.agent_id and get_agent_by_agent_id(session, new_agent_id):
        raise DuplicateAgentError(f"Agent {new_agent_id} already exists")

    for field, value in values.items():
        setattr(agent, field, value)
    agent.last_seen = utcnow()
    agent.updated_at = agent.last_seen

    session.add(agent)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DuplicateAgentError(f"Agent {new_agent_id} already exists") from e
    session.refresh(agent)
    return agent


def delete_agent(session: Session, key: str) -> Optional[Tuple[str, str]]:
    """
    Remove the local record, returning its (id, agentId). The directory entry
    is left untouched.
    """
    agent = resolve_agent(session, key)
    if agent is None:
        return None
    deleted = (agent.id, agent.agent_id)
    session.delete(agent)
    session.commit()
    logger.info(f"Agent deleted: {deleted[1]}")
    return deleted


def upsert_agent_status(session: Session, update: AgentStatusUpdate) -> Agent:
    """
    Overwrite an agent's status (and any other supplied fields), creating the
    record when the agentId is unknown. Last write wins.
    """
    agent = get_agent_by_agent_id(session, update.agent_id)
    if agent is None:
        agent = Agent(agent_id=update.agent_id, name=update.name or update.agent_id)
        logger.info(f"Agent {update.agent_id} created from status ping")

    for field, value in column_values(update, exclude_unset=True).items():
        setattr(agent, field, value)
    agent.last_seen = utcnow()
    agent.updated_at = agent.last_seen

    session.add(agent)
    session.commit()
    session.refresh(agent)
    return agent


# ========================= DIRECTORY =========================

async def register_in_directory(directory: AgentDirectory, agent: Agent) -> DirectoryResult:
    """Best-effort mirror of a new agent into the directory, keyed by agentId."""
    result = await directory.register_agent(
        agent.agent_id,
        f"Agent {agent.name} - {agent.type}",
        {
            "agentId": agent.agent_id,
            "name": agent.name,
            "type": agent.type,
            "status": agent.status,
            "timestamp": iso_now(),
        },
    )
    if not isinstance(result, Ok):
        logger.warning(f"Directory registration skipped for {agent.agent_id}: {result}")
    return result


async def list_agents_with_presence(session: Session, directory: AgentDirectory) -> List[AgentRead]:
    """Local agents merged with directory presence; an unreachable directory marks all inactive."""
    agents = await asyncio.to_thread(list_agents, session)

    registered = set()
    result = await directory.registered_agent_ids()
    if isinstance(result, Ok):
        registered = result.value
    else:
        logger.info(f"Agent directory lookup unavailable: {result}")

    merged = []
    for agent in agents:
        record = AgentRead.model_validate(agent)
        record.directory_status = "active" if agent.agent_id in registered else "inactive"
        merged.append(record)
    return merged
