"""Main FastAPI application."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from app.api.router import api_router
from app.core.config import get_settings
from app.core.database import close_db, init_db
from app.core.exceptions import add_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import add_middleware
from app.storage.factory import check_storage

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting up application", storage_backend=settings.storage_backend)

    # Tables are only created for the SQL backend
    if settings.storage_backend == "sql":
        await init_db()
    elif settings.storage_backend is None:
        logger.warning("No storage backend configured, data endpoints will report unavailable")

    yield

    if settings.storage_backend == "sql":
        await close_db()
    logger.info("Shutting down application")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Skip lifespan during testing
    lifespan_context = None if os.getenv("TESTING", "false").lower() == "true" else lifespan

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Railway solar site and EPC project tracking API",
        version=VERSION,
        openapi_url=f"{settings.API_STR}/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan_context,
        redirect_slashes=False,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    add_middleware(app)

    if settings.ALLOWED_HOSTS:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.ALLOWED_HOSTS,
        )

    add_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_STR)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": settings.PROJECT_NAME, "version": VERSION, "status": "healthy"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint with storage connectivity test."""
        backend = get_settings().storage_backend
        if backend is None:
            return {"status": "degraded", "storage": None, "database": "not configured"}

        try:
            await check_storage()
            return {"status": "healthy", "storage": backend, "database": "connected"}
        except Exception as e:
            logger.error("Health check failed", storage=backend, error=str(e))
            return {"status": "unhealthy", "storage": backend, "database": "error", "error": str(e)}

    return app


# Create the app instance
app = create_application()
