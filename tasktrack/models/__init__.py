"""
Pydantic models for request/response validation.
"""
from .task_models import TaskCreate, TaskUpdate, TaskResponse, DeleteTaskResponse

__all__ = [
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "DeleteTaskResponse",
]
