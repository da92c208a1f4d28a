from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import socketio
import logging
import time
import uuid
import os

from app.core.config import settings
from app.core.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

from app.api.endpoints import router
from app.core.database import create_db_and_tables, safe_session
from app.core.directory import AgentDirectory
from app.core.errors import register_exception_handlers
from app.core.socket_manager import Broadcaster, sio
from app.services.seed import seed_default_agents

# Registers the socket event handlers on sio
from app import event_handlers  # noqa: F401,E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: tables, default roster, directory client
    create_db_and_tables()

    if settings.SEED_DEFAULT_AGENTS:
        with safe_session() as session:
            seed_default_agents(session)

    await app.state.directory.connect()

    logger.info(f"{settings.PROJECT_NAME} backend ready on port {settings.PORT}")
    logger.info(f"Dashboard API: http://localhost:{settings.PORT}{settings.API_PREFIX}")
    logger.info(f"Agent directory: {settings.CHROMA_URL}")
    yield
    logger.info(f"{settings.PROJECT_NAME} backend shutting down")


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Project and agent dashboard backend with real-time relay",
    version=settings.VERSION,
    lifespan=lifespan
)

# Explicitly constructed collaborators, handed to routes via app.api.deps
app.state.directory = AgentDirectory(settings.CHROMA_URL)
app.state.broadcaster = Broadcaster(sio)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    response.headers["X-Request-ID"] = req_id
    return response


register_exception_handlers(app)
app.include_router(router, prefix=settings.API_PREFIX)

# Serve uploaded files
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} backend online", "status": "active"}


socket_app = socketio.ASGIApp(sio, app)

# To run: uvicorn app.main:socket_app --reload
