"""
Task service - business logic for task operations.
This layer contains no HTTP framework dependencies.
Handles validation, partial-update semantics and not-found signalling.
"""
import logging
from typing import Optional, Dict, Any, List

from tasktrack.adapters.metrics import record_operation
from tasktrack.models.task_models import TaskCreate, TaskUpdate
from tasktrack.storage.repositories import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task business logic."""

    def __init__(self, repository: TaskRepository):
        """Initialize task service with repository dependency."""
        self.repository = repository

    def create_task(self, task_data: TaskCreate) -> Dict[str, Any]:
        """
        Create a new task.

        Args:
            task_data: Task creation data

        Returns:
            Created task data as dictionary

        Raises:
            ValueError: If the title is empty or whitespace
            sqlite3.Error: If the write fails (propagated unmodified)
        """
        title = (task_data.title or "").strip()
        if not title:
            record_operation("create", "invalid")
            raise ValueError("Task title cannot be empty or whitespace")

        try:
            task_id = self.repository.create(
                title=title,
                description=task_data.description,
                completed=task_data.completed,
            )
            created_task = self.repository.get_by_id(task_id)
        except Exception as e:
            record_operation("create", "error")
            logger.error(f"Failed to create task: {str(e)}", exc_info=True)
            raise

        if not created_task:
            record_operation("create", "error")
            logger.error(f"Task {task_id} was created but could not be retrieved")
            raise RuntimeError("Task was created but could not be retrieved. Please check task status.")

        record_operation("create", "ok")
        return dict(created_task)

    def get_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a task by ID.

        Returns:
            Task data as dictionary, or None if not found
        """
        try:
            task = self.repository.get_by_id(task_id)
        except Exception as e:
            record_operation("get", "error")
            logger.error(f"Failed to get task {task_id}: {str(e)}", exc_info=True)
            raise
        record_operation("get", "ok" if task else "not_found")
        return dict(task) if task else None

    def list_tasks(self) -> List[Dict[str, Any]]:
        """
        List all tasks, most recently created first.

        Returns:
            List of task dictionaries (empty when there are none)
        """
        try:
            tasks = self.repository.list()
        except Exception as e:
            record_operation("list", "error")
            logger.error(f"Failed to list tasks: {str(e)}", exc_info=True)
            raise
        record_operation("list", "ok")
        return [dict(task) for task in tasks]

    def update_task(self, task_id: int, updates: TaskUpdate) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to a task.

        Only fields present in ``updates`` are changed. ``updated_at`` is
        bumped even when the supplied values equal the stored ones.

        Args:
            task_id: Task ID
            updates: Partial update; absent fields are left unchanged

        Returns:
            Updated task data as dictionary, or None if not found

        Raises:
            ValueError: If a supplied title is empty or a non-nullable
                field is set to null
            sqlite3.Error: If the write fails (propagated unmodified)
        """
        changes = updates.changes()

        if updates.is_set("title"):
            title = changes["title"]
            if title is None or not title.strip():
                record_operation("update", "invalid")
                raise ValueError("Task title cannot be empty or whitespace")
            changes["title"] = title.strip()
        if updates.is_set("completed") and changes["completed"] is None:
            record_operation("update", "invalid")
            raise ValueError("Task completed flag cannot be null")

        try:
            task = self.repository.update(task_id, changes)
        except Exception as e:
            record_operation("update", "error")
            logger.error(f"Failed to update task {task_id}: {str(e)}", exc_info=True)
            raise

        if not task:
            record_operation("update", "not_found")
            logger.info(f"Update skipped, task {task_id} not found")
            return None

        record_operation("update", "ok")
        return dict(task)

    def delete_task(self, task_id: int) -> bool:
        """
        Delete a task.

        Returns:
            True if the task was removed, False if it did not exist
        """
        try:
            deleted = self.repository.delete(task_id)
        except Exception as e:
            record_operation("delete", "error")
            logger.error(f"Failed to delete task {task_id}: {str(e)}", exc_info=True)
            raise
        record_operation("delete", "ok" if deleted else "not_found")
        return deleted
