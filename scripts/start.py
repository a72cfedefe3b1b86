#!/usr/bin/env python3
"""Run the Railway Solar EPC Tracker API.

The storage backend comes from STORAGE_BACKEND (sql, appwrite or auto) and
can be overridden on the command line:

    python scripts/start.py                      # auto: DATABASE_URL, else Appwrite
    python scripts/start.py --storage appwrite   # force the Appwrite document store
    python scripts/start.py --reload --port 8080

With neither a database nor Appwrite configured the API still starts; the
dashboards then report "Database connection not available".
"""

import argparse
import os
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

import structlog
import uvicorn

from app.core.config import get_settings
from app.core.logging import configure_logging

logger = structlog.get_logger()


def parse_args():
    parser = argparse.ArgumentParser(description="Run the Railway Solar EPC Tracker API")
    parser.add_argument("--storage", choices=["sql", "appwrite", "auto"], help="Storage backend override")
    parser.add_argument("--host", help="Bind address (default: HOST setting)")
    parser.add_argument("--port", type=int, help="Port (default: PORT setting)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser.parse_args()


def main():
    args = parse_args()
    # uvicorn imports the app by path, so the override has to live in the environment
    if args.storage:
        os.environ["STORAGE_BACKEND"] = args.storage

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    host = args.host or settings.HOST
    port = args.port or settings.PORT
    reload = args.reload or settings.RELOAD
    if settings.storage_backend is None:
        logger.warning("Starting without storage", requested=settings.STORAGE_BACKEND)

    logger.info(
        "Starting Railway Solar EPC Tracker",
        host=host,
        port=port,
        reload=reload,
        storage_backend=settings.storage_backend,
    )

    uvicorn.run("app.main:app", host=host, port=port, reload=reload, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
