# Health and statistics snapshots. Fresh counts on every call, nothing cached.

import asyncio
import logging
import time
from typing import Any, Dict, get_args

import psutil
from sqlalchemy import func
from sqlmodel import Session, select

from app.core.database import is_connected
from app.core.directory import AgentDirectory, Ok, Unavailable
from app.models import Agent, AgentStatus, Project, ProjectStatus, iso_now

logger = logging.getLogger(__name__)


def _count_by_status(session: Session, model, statuses) -> Dict[str, int]:
    rows = session.exec(select(model.status, func.count()).group_by(model.status)).all()
    counts = {status: 0 for status in statuses}
    for status, count in rows:
        counts[status] = count
    return counts


def _status_counts(session: Session):
    return (
        _count_by_status(session, Project, get_args(ProjectStatus)),
        _count_by_status(session, Agent, get_args(AgentStatus)),
    )


def process_info() -> Dict[str, Any]:
    process = psutil.Process()
    memory = process.memory_info()
    return {
        "uptime": round(time.time() - process.create_time(), 3),
        "memory": {"rss": memory.rss, "vms": memory.vms},
        "timestamp": iso_now(),
    }


async def health_snapshot(session: Session, directory: AgentDirectory) -> Dict[str, Any]:
    database = "connected" if await asyncio.to_thread(is_connected, session) else "disconnected"

    result = await directory.heartbeat()
    if isinstance(result, Ok):
        directory_status = "connected"
    elif isinstance(result, Unavailable):
        directory_status = "disconnected"
    else:
        directory_status = "error"

    return {
        "status": "healthy",
        "timestamp": iso_now(),
        "services": {
            "database": database,
            "directory": directory_status,
            "socketio": "running",
        },
    }


async def collect_stats(session: Session, directory: AgentDirectory) -> Dict[str, Any]:
    projects, agents = await asyncio.to_thread(_status_counts, session)

    collections = 0
    result = await directory.count_collections()
    if isinstance(result, Ok):
        collections = result.value
    else:
        logger.info(f"Directory collection count unavailable: {result}")

    return {
        "projects": {
            "total": sum(projects.values()),
            "active": projects.get("active", 0),
            "byStatus": projects,
        },
        "agents": {
            "total": sum(agents.values()),
            "online": agents.get("online", 0),
            "byStatus": agents,
        },
        "directory": {
            "collections": collections,
            "status": "connected" if directory.available else "disconnected",
        },
        "system": process_info(),
    }
