"""
Forkflow API

FastAPI application exposing the forking endpoint. The host process
supplies the collaborators (persistence, deep-copy engine, projector)
when creating the app.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from forkflow.config import get_settings
from forkflow.core.background import wait_for_pending
from forkflow.core.database import close_db
from forkflow.routers import forking_router
from forkflow.services.forking.collaborators import ForkingCollaborators

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Suppress noisy third-party loggers
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Seconds to let in-flight forks finish on shutdown
SHUTDOWN_GRACE_SECONDS = 60


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    On shutdown, waits for detached forks before closing the database.
    """
    logger.info("Starting Forkflow API...")
    yield
    logger.info("Shutting down Forkflow API...")
    await wait_for_pending(timeout=SHUTDOWN_GRACE_SECONDS)
    await close_db()


def create_app(collaborators: ForkingCollaborators | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        collaborators: Collaborators used by the forking workflow. The fork
            endpoint answers 503 until they are registered on app.state.forking.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title="Forkflow API",
        description="Application forking service",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.forking = collaborators

    app.include_router(forking_router)

    return app
