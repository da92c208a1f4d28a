"""Common FastAPI dependencies.

The directory client and the broadcaster are built once in `app.main` and
kept on `app.state`; handlers receive them through these dependencies so tests
can swap them with `app.dependency_overrides`.
"""

from fastapi import Request

from app.core.database import get_session  # noqa: F401  (re-exported)
from app.core.directory import AgentDirectory
from app.core.socket_manager import Broadcaster


def get_directory(request: Request) -> AgentDirectory:
    return request.app.state.directory


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster
