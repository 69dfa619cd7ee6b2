"""
Service layer - business logic with no HTTP framework dependencies.
"""
from .task_service import TaskService

__all__ = ['TaskService']
