"""
Task-related API routes.
Thin HTTP layer that delegates to service layer.

Not-found is a normal outcome here: get and update answer ``null`` and
delete answers ``{"success": false}``.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Path, Depends, HTTPException

from tasktrack.dependencies.services import get_task_service
from tasktrack.models.task_models import TaskCreate, TaskUpdate, TaskResponse, DeleteTaskResponse
from tasktrack.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task: TaskCreate,
    task_service: TaskService = Depends(get_task_service)
):
    """Create a new task."""
    try:
        created_task = task_service.create_task(task)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TaskResponse(**created_task)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    task_service: TaskService = Depends(get_task_service)
):
    """List all tasks, most recently created first."""
    return [TaskResponse(**task) for task in task_service.list_tasks()]


@router.get("/{task_id}", response_model=Optional[TaskResponse])
async def get_task(
    task_id: int = Path(..., gt=0, description="Task ID"),
    task_service: TaskService = Depends(get_task_service)
):
    """Get a task by ID, or null if it does not exist."""
    task = task_service.get_task(task_id)
    return TaskResponse(**task) if task else None


@router.patch("/{task_id}", response_model=Optional[TaskResponse])
async def update_task(
    updates: TaskUpdate,
    task_id: int = Path(..., gt=0, description="Task ID"),
    task_service: TaskService = Depends(get_task_service)
):
    """Apply a partial update; fields left out of the body are unchanged."""
    try:
        task = task_service.update_task(task_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TaskResponse(**task) if task else None


@router.delete("/{task_id}", response_model=DeleteTaskResponse)
async def delete_task(
    task_id: int = Path(..., gt=0, description="Task ID"),
    task_service: TaskService = Depends(get_task_service)
):
    """Delete a task."""
    return DeleteTaskResponse(success=task_service.delete_task(task_id))
