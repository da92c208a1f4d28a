from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlmodel import Session
from typing import List, Optional
import asyncio
import logging

from app.api.deps import get_broadcaster, get_directory, get_session
from app.core.config import settings
from app.core.directory import AgentDirectory, Ok, Unavailable
from app.core.socket_manager import Broadcaster
from app.models import (
    AgentCreate,
    AgentRead,
    AgentUpdate,
    MessageCreate,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)
from app.services import agent_service, messaging, project_service, stats_service
from app.services.agent_service import DuplicateAgentError

logger = logging.getLogger(__name__)

router = APIRouter()

# Routes that only touch the database are plain `def` and run in the threadpool;
# their events go out as background tasks once the response is sent.


def _project_event(project) -> dict:
    return ProjectRead.model_validate(project).model_dump(mode="json", by_alias=True)


def _agent_event(agent) -> dict:
    return AgentRead.model_validate(agent).model_dump(mode="json", by_alias=True, exclude={"directory_status"})


def _directory_failure(result, action: str) -> HTTPException:
    if isinstance(result, Unavailable):
        return HTTPException(503, "Agent directory not available")
    detail = f"{action} failed"
    if settings.is_development:
        detail = f"{detail}: {result.message}"
    return HTTPException(500, detail)


# ========================= HEALTH / STATS =========================

@router.get("/health")
async def health(
    session: Session = Depends(get_session),
    directory: AgentDirectory = Depends(get_directory),
):
    return await stats_service.health_snapshot(session, directory)


@router.get("/stats")
async def stats(
    session: Session = Depends(get_session),
    directory: AgentDirectory = Depends(get_directory),
):
    return await stats_service.collect_stats(session, directory)


# ========================= PROJECTS =========================

@router.get("/projects", response_model=List[ProjectRead])
def list_projects(session: Session = Depends(get_session)):
    return project_service.list_projects(session)


@router.post("/projects", response_model=ProjectRead, status_code=201)
def create_project(
    payload: ProjectCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    project = project_service.create_project(session, payload)
    background_tasks.add_task(broadcaster.emit, "projectCreated", _project_event(project))
    return project


@router.get("/projects/{project_id}", response_model=ProjectRead)
def get_project(project_id: str, session: Session = Depends(get_session)):
    project = project_service.get_project(session, project_id)
    if project is None:
        raise HTTPException(404, "Project not found")
    return project


@router.put("/projects/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    project = project_service.update_project(session, project_id, payload)
    if project is None:
        raise HTTPException(404, "Project not found")
    background_tasks.add_task(broadcaster.emit, "projectUpdated", _project_event(project))
    return project


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    if not project_service.delete_project(session, project_id):
        raise HTTPException(404, "Project not found")
    background_tasks.add_task(broadcaster.emit, "projectDeleted", {"id": project_id})
    return {"message": "Project deleted successfully"}


# ========================= AGENT MESSAGING =========================
# Registered before /agents/{agent_id} so the literal paths win

@router.post("/agents/message")
async def send_message(
    payload: MessageCreate,
    directory: AgentDirectory = Depends(get_directory),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    result = await messaging.send_message(directory, payload)
    if not isinstance(result, Ok):
        raise _directory_failure(result, "Message log write")

    await broadcaster.emit("newMessage", result.value)
    return {"success": True, "messageId": result.value["id"]}


@router.get("/agents/messages")
async def get_messages(
    agent_id: Optional[str] = Query(default=None, alias="agentId"),
    limit: int = Query(default=settings.DEFAULT_MESSAGE_LIMIT, ge=1),
    directory: AgentDirectory = Depends(get_directory),
):
    result = await messaging.fetch_messages(directory, agent_id, limit)
    if not isinstance(result, Ok):
        raise _directory_failure(result, "Message log query")
    return result.value


# ========================= AGENTS =========================

@router.get("/agents", response_model=List[AgentRead])
async def list_agents(
    session: Session = Depends(get_session),
    directory: AgentDirectory = Depends(get_directory),
):
    return await agent_service.list_agents_with_presence(session, directory)


@router.post("/agents", response_model=AgentRead, status_code=201)
async def create_agent(
    payload: AgentCreate,
    session: Session = Depends(get_session),
    directory: AgentDirectory = Depends(get_directory),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    try:
        agent = await asyncio.to_thread(agent_service.create_agent, session, payload)
    except DuplicateAgentError as e:
        raise HTTPException(400, str(e))

    # Local write is the source of truth; the directory copy is best-effort
    await agent_service.register_in_directory(directory, agent)

    await broadcaster.emit("agentRegistered", _agent_event(agent))
    return agent


@router.put("/agents/{agent_id}", response_model=AgentRead)
def update_agent(
    agent_id: str,
    payload: AgentUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    try:
        agent = agent_service.update_agent(session, agent_id, payload)
    except DuplicateAgentError as e:
        raise HTTPException(400, str(e))
    if agent is None:
        raise HTTPException(404, "Agent not found")

    background_tasks.add_task(broadcaster.emit, "agentUpdated", _agent_event(agent))
    return agent


@router.delete("/agents/{agent_id}")
def delete_agent(
    agent_id: str,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    deleted = agent_service.delete_agent(session, agent_id)
    if deleted is None:
        raise HTTPException(404, "Agent not found")

    record_id, deleted_agent_id = deleted
    background_tasks.add_task(broadcaster.emit, "agentDeleted", {"id": record_id, "agentId": deleted_agent_id})
    return {"message": "Agent deleted successfully"}
