"""
Repository pattern implementation for the tasktrack data access layer.

Repositories wrap TaskDatabase methods and give services a narrow interface
to depend on, which keeps the service layer testable with a mocked
repository.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from tasktrack.database import TaskDatabase


class TaskRepository:
    """Repository for task operations."""

    def __init__(self, db: "TaskDatabase"):
        """Initialize repository with TaskDatabase instance.

        Args:
            db: TaskDatabase instance for database access
        """
        self.db = db

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        completed: bool = False,
    ) -> int:
        """Create a new task.

        Args:
            title: Task title (already validated and trimmed)
            description: Optional description
            completed: Initial completion flag

        Returns:
            Created task ID
        """
        return self.db.create_task(
            title=title,
            description=description,
            completed=completed,
        )

    def get_by_id(self, task_id: int) -> Optional[Dict[str, Any]]:
        """Get task by ID.

        Returns:
            Task dictionary if found, None otherwise
        """
        return self.db.get_task(task_id)

    def list(self) -> List[Dict[str, Any]]:
        """List all tasks, newest first."""
        return self.db.list_tasks()

    def update(self, task_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update.

        Args:
            task_id: Task ID to update
            fields: Only the fields the caller supplied

        Returns:
            Updated task dictionary, or None if the task does not exist
        """
        return self.db.update_task(task_id, fields)

    def delete(self, task_id: int) -> bool:
        """Delete a task.

        Returns:
            True if a task was removed, False if it did not exist
        """
        return self.db.delete_task(task_id)
