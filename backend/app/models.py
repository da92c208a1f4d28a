from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime, timezone
import uuid


ProjectStatus = Literal["planning", "active", "on-hold", "completed", "cancelled"]
Priority = Literal["low", "medium", "high", "critical"]
TaskStatus = Literal["pending", "active", "completed", "blocked"]
AgentType = Literal["frontend", "backend", "fullstack", "devops", "qa", "design", "orchestration"]
AgentStatus = Literal["online", "offline", "busy", "error"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Millisecond ISO-8601 UTC timestamp, `Z` suffixed."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return uuid.uuid4().hex


def default_performance() -> Dict[str, Any]:
    return {"tasks_completed": 0, "average_response_time": 0, "success_rate": 100}


# ========================= TABLES =========================

class Project(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None
    status: str = Field(default="planning", index=True)
    priority: str = "medium"
    progress: float = 0
    assigned_agents: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    tasks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    created_by: Optional[str] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    files: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


class Agent(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    agent_id: str = Field(index=True, unique=True)
    name: str
    # Nullable: status pings may create an agent before it registers
    type: Optional[str] = None
    status: str = Field(default="offline", index=True)
    port: Optional[int] = None
    endpoint: Optional[str] = None
    current_project: Optional[str] = None
    capabilities: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    last_seen: datetime = Field(default_factory=utcnow)
    performance: Dict[str, Any] = Field(default_factory=default_performance, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ========================= API SCHEMAS =========================

class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


class AssignedAgent(CamelModel):
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    assigned_date: datetime = PydanticField(default_factory=utcnow)


class ProjectTask(CamelModel):
    id: str = PydanticField(default_factory=new_id)
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_agent: Optional[str] = None
    status: TaskStatus = "pending"
    priority: Priority = "medium"
    progress: float = 0
    due_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None


class ProjectFile(CamelModel):
    filename: Optional[str] = None
    original_name: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    upload_date: datetime = PydanticField(default_factory=utcnow)


class ProjectCreate(CamelModel):
    name: str = PydanticField(min_length=1)
    description: Optional[str] = None
    status: ProjectStatus = "planning"
    priority: Priority = "medium"
    progress: float = PydanticField(default=0, ge=0, le=100)
    assigned_agents: List[AssignedAgent] = []
    tasks: List[ProjectTask] = []
    created_by: Optional[str] = None
    tags: List[str] = []
    files: List[ProjectFile] = []

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class ProjectUpdate(CamelModel):
    """Partial update; only the supplied fields are written."""
    name: Optional[str] = PydanticField(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    progress: Optional[float] = PydanticField(default=None, ge=0, le=100)
    assigned_agents: Optional[List[AssignedAgent]] = None
    tasks: Optional[List[ProjectTask]] = None
    created_by: Optional[str] = None
    tags: Optional[List[str]] = None
    files: Optional[List[ProjectFile]] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("name", "status", "priority", "progress")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class ProjectRead(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    progress: float
    assigned_agents: List[AssignedAgent] = []
    tasks: List[ProjectTask] = []
    created_by: Optional[str] = None
    tags: List[str] = []
    files: List[ProjectFile] = []
    created_at: datetime
    updated_at: datetime


class AgentPerformance(CamelModel):
    tasks_completed: int = 0
    average_response_time: float = 0
    success_rate: float = 100


class AgentCreate(CamelModel):
    agent_id: str = PydanticField(min_length=1)
    name: str = PydanticField(min_length=1)
    type: AgentType
    status: AgentStatus = "offline"
    port: Optional[int] = None
    endpoint: Optional[str] = None
    current_project: Optional[str] = None
    capabilities: List[str] = []
    performance: AgentPerformance = PydanticField(default_factory=AgentPerformance)

    @field_validator("agent_id", "name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class AgentUpdate(CamelModel):
    agent_id: Optional[str] = PydanticField(default=None, min_length=1)
    name: Optional[str] = PydanticField(default=None, min_length=1)
    type: Optional[AgentType] = None
    status: Optional[AgentStatus] = None
    port: Optional[int] = None
    endpoint: Optional[str] = None
    current_project: Optional[str] = None
    capabilities: Optional[List[str]] = None
    performance: Optional[AgentPerformance] = None

    @field_validator("agent_id", "name", "type", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class AgentStatusUpdate(AgentUpdate):
    """Payload of the `agentStatus` socket event."""
    agent_id: str = PydanticField(min_length=1)
    status: AgentStatus


class AgentRead(CamelModel):
    id: str
    agent_id: str
    name: str
    type: Optional[str] = None
    status: str
    port: Optional[int] = None
    endpoint: Optional[str] = None
    current_project: Optional[str] = None
    capabilities: List[str] = []
    last_seen: datetime
    performance: AgentPerformance = PydanticField(default_factory=AgentPerformance)
    created_at: datetime
    updated_at: datetime
    # "active" when registered in the agent directory
    directory_status: Optional[str] = None


class MessageCreate(CamelModel):
    from_agent: str = PydanticField(min_length=1)
    to_agent: str = PydanticField(min_length=1)
    message: str = PydanticField(min_length=1)
    message_type: str = "message"
    priority: str = "medium"


def column_values(payload: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    """
    Flatten a request payload into column values. exclude_unset only drops
    top-level fields; nested sub-documents are always stored whole, as JSON.
    """
    keys = payload.model_fields_set if exclude_unset else type(payload).model_fields.keys()
    values = {}
    for key in keys:
        value = getattr(payload, key)
        if isinstance(value, (list, dict, BaseModel)):
            value = to_jsonable_python(value, by_alias=False)
        values[key] = value
    return values
