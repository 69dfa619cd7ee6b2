"""
Service container for dependency injection.
Centralizes service initialization and provides access to all services.
"""
import os
import logging
from typing import Optional

from tasktrack.database import TaskDatabase
from tasktrack.services.task_service import TaskService
from tasktrack.storage.repositories import TaskRepository

logger = logging.getLogger(__name__)

# Global service instance
_service_instance: Optional['ServiceContainer'] = None


class ServiceContainer:
    """Container for all application services."""

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = os.getenv("TASKTRACK_DB_PATH", "/app/data/tasks.db")
        self.db = TaskDatabase(db_path)
        self.task_repository = TaskRepository(self.db)
        self.task_service = TaskService(self.task_repository)
        logger.info(f"Services initialized (database: {db_path})")


def get_services() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ServiceContainer()
    return _service_instance


def reset_services() -> None:
    """Drop the global service container so the next call rebuilds it."""
    global _service_instance
    _service_instance = None


def get_db() -> TaskDatabase:
    """Get the database instance from the service container."""
    return get_services().db


def get_task_service() -> TaskService:
    """Get the task service from the service container."""
    return get_services().task_service
