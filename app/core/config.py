"""Application configuration settings."""

import os
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Basic settings
    PROJECT_NAME: str = "Railway Solar EPC Tracker"
    DEBUG: bool = False
    API_STR: str = "/api"

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    RELOAD: bool = False

    # Security
    ALLOWED_HOSTS: List[str] = ["*"]

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Dashboard dev server
        "http://localhost:5173",  # Vite dev server
    ]

    @field_validator("BACKEND_CORS_ORIGINS", "ALLOWED_HOSTS", mode="before")
    @classmethod
    def assemble_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse comma separated or JSON array lists."""
        if isinstance(v, str):
            if not v.startswith("["):
                return [i.strip() for i in v.split(",") if i.strip()]
            else:
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    raise ValueError(f"Invalid JSON list: {v}")
        elif isinstance(v, list):
            return v
        raise ValueError(f"Expected string or list, got {type(v)}")

    # Storage backend: "sql", "appwrite" or "auto"
    STORAGE_BACKEND: str = "auto"

    # Database (primary document store)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True
    DB_POOL_RECYCLE: int = 300

    # Appwrite (backend-as-a-service document store)
    APPWRITE_ENDPOINT: Optional[str] = None
    APPWRITE_PROJECT_ID: Optional[str] = None
    APPWRITE_DATABASE_ID: Optional[str] = None
    APPWRITE_API_KEY: Optional[str] = None
    APPWRITE_TIMEOUT: float = 30.0

    # Business rules
    ENFORCE_SITE_STATUS_TRANSITIONS: bool = False

    # Testing
    TESTING: bool = os.getenv("TESTING", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("sql", "appwrite", "auto"):
            raise ValueError(f"Unknown storage backend: {v}")
        return v

    @property
    def appwrite_configured(self) -> bool:
        """Whether endpoint, project and database ids are all present."""
        return bool(self.APPWRITE_ENDPOINT and self.APPWRITE_PROJECT_ID and self.APPWRITE_DATABASE_ID)

    @property
    def database_configured(self) -> bool:
        return self.TESTING or bool(self.DATABASE_URL)

    @property
    def storage_backend(self) -> Optional[str]:
        """Resolve the active storage backend, None when nothing is configured."""
        if self.STORAGE_BACKEND == "sql":
            return "sql" if self.database_configured else None
        if self.STORAGE_BACKEND == "appwrite":
            return "appwrite" if self.appwrite_configured else None
        if self.database_configured:
            return "sql"
        if self.appwrite_configured:
            return "appwrite"
        return None

    @property
    def database_url_async(self) -> str:
        """Get asynchronous database URL for SQLAlchemy."""
        # Use SQLite for testing
        if self.TESTING and not self.DATABASE_URL:
            return "sqlite+aiosqlite:///:memory:"

        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL is not configured")

        url = str(self.DATABASE_URL)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
