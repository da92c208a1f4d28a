import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app.api.deps import get_broadcaster, get_directory, get_session
from app.core.database import create_db_and_tables
from app.core.directory import Error, Ok, Unavailable
from app.main import app


class RecordingBroadcaster:
    """Collects emitted events instead of sending them."""

    def __init__(self):
        self.events = []

    async def emit(self, event, data, room=None, skip_sid=None):
        self.events.append((event, data))

    def names(self):
        return [event for event, _ in self.events]

    def last(self, name):
        return [data for event, data in self.events if event == name][-1]


class FakeDirectory:
    """In-memory stand-in for AgentDirectory with a switchable outage."""

    def __init__(self, available=True):
        self.available = available
        self.failure = None  # set to a message to answer with Error
        self.agents = {}
        self.messages = []
        self.queries = []

    def _result(self, value):
        if not self.available:
            return Unavailable()
        if self.failure:
            return Error(self.failure)
        return Ok(value)

    async def heartbeat(self):
        return self._result(1)

    async def count_collections(self):
        return self._result(2)

    async def registered_agent_ids(self):
        return self._result(set(self.agents))

    async def register_agent(self, agent_id, document, metadata):
        result = self._result(agent_id)
        if isinstance(result, Ok):
            self.agents[agent_id] = {"document": document, "metadata": metadata}
        return result

    async def append_message(self, message_id, text, metadata):
        result = self._result(message_id)
        if isinstance(result, Ok):
            self.messages.append({"id": message_id, "message": text, "metadata": metadata})
        return result

    async def query_messages(self, query_text, limit):
        self.queries.append((query_text, limit))
        return self._result(self.messages[:limit])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def overrides(engine, directory, broadcaster):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    # Not used as a context manager: the lifespan (seeding, Chroma connect) stays off
    return TestClient(overrides)
