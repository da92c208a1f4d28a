# Command Center - Configuration

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    PROJECT_NAME: str = "Command Center"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # "development" echoes unexpected error messages back to clients
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Dashboard frontend (CORS + Socket.IO origin)
    FRONTEND_URL: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.FRONTEND_URL.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    # Primary store
    DATABASE_URL: str = "sqlite:///./command_center.db"
    SEED_DEFAULT_AGENTS: bool = True

    # Agent directory / message log (Chroma)
    CHROMA_URL: str = "http://localhost:8000"
    DEFAULT_MESSAGE_LIMIT: int = 50

    # Static uploads
    UPLOAD_DIR: str = "uploads"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "command_center.log"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        case_sensitive = True


settings = Settings()
