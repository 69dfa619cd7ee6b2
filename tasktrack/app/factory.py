"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tasktrack import __version__
from tasktrack.api.routes.health import router as health_router
from tasktrack.api.routes.tasks import router as tasks_router
from tasktrack.dependencies.services import get_services
from tasktrack.exceptions.handlers import setup_exception_handlers
from tasktrack.middleware.logging_setup import setup_logging
from tasktrack.middleware.setup import setup_middleware


@asynccontextmanager
async def lifespan(app):
    """Manage application lifespan."""
    logger = logging.getLogger(__name__)
    logger.info("Application starting up...")

    # Opening the database creates the schema if needed
    services = get_services()
    logger.info(f"Task store ready at {services.db.db_path}")

    yield

    logger.info("Shutdown complete")


def create_app(configure_logging: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        configure_logging: Install the root log handler. Tests that manage
            logging themselves pass False.

    Returns:
        Configured FastAPI app instance ready to run.
    """
    if configure_logging:
        setup_logging()

    app = FastAPI(
        title="Task Tracker Service",
        description="Create, read, update, delete and list tasks",
        version=__version__,
        lifespan=lifespan
    )

    setup_middleware(app)
    setup_exception_handlers(app)

    app.include_router(tasks_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        """Service name and version."""
        return {"service": "tasktrack", "version": __version__}

    return app
