import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bigha.core.config import settings
from bigha.core.database import (
    close_database_connection,
    create_database_engine,
    create_session_factory,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine creation and storage in app.state
    - Session factory creation (request sessions and dashboard fan-out)
    - Resource cleanup on shutdown

    All database state lives on ``app.state``; nothing is kept at module level.
    """
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    engine = create_database_engine()
    app.state.engine = engine
    app.state.sessionmaker = create_session_factory(engine)

    logger.info("Sessionmaker created successfully")

    yield

    logger.info("Shutting down application")
    await close_database_connection(engine)
    app.state.sessionmaker = None
    app.state.engine = None
