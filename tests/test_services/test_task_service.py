"""
Unit tests for TaskService.
Tests business logic in isolation without HTTP framework dependencies.
"""
import pytest
import sqlite3
from datetime import datetime, UTC
from unittest.mock import MagicMock, patch

from tasktrack.database import TaskDatabase
from tasktrack.models.task_models import TaskCreate, TaskUpdate
from tasktrack.services.task_service import TaskService
from tasktrack.storage.repositories import TaskRepository

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_task(**overrides):
    task = {
        "id": 1,
        "title": "Buy milk",
        "description": None,
        "completed": False,
        "created_at": NOW,
        "updated_at": NOW,
    }
    task.update(overrides)
    return task


@pytest.fixture
def mock_repository():
    """Create a mock repository."""
    return MagicMock(spec=TaskRepository)


@pytest.fixture
def task_service(mock_repository):
    """Create a TaskService instance with mocked repository."""
    return TaskService(mock_repository)


@pytest.fixture
def real_service(tmp_path):
    """Create a TaskService backed by a real temporary database."""
    db = TaskDatabase(str(tmp_path / "tasks.db"))
    return TaskService(TaskRepository(db))


class TestCreateTask:
    """Tests for create_task method."""

    def test_create_task_success(self, task_service, mock_repository):
        mock_repository.create.return_value = 1
        mock_repository.get_by_id.return_value = make_task()

        result = task_service.create_task(TaskCreate(title="Buy milk"))

        assert result["id"] == 1
        assert result["completed"] is False
        mock_repository.create.assert_called_once_with(
            title="Buy milk", description=None, completed=False
        )
        mock_repository.get_by_id.assert_called_once_with(1)

    def test_create_task_blank_title_raises_value_error(self, task_service, mock_repository):
        # model_construct skips pydantic validation, as a caller bypassing the model would
        task_data = TaskCreate.model_construct(title="   ", description=None, completed=False)

        with pytest.raises(ValueError, match="cannot be empty"):
            task_service.create_task(task_data)

        mock_repository.create.assert_not_called()

    def test_create_task_storage_error_propagates(self, task_service, mock_repository):
        mock_repository.create.side_effect = sqlite3.OperationalError("disk I/O error")

        with pytest.raises(sqlite3.OperationalError, match="disk I/O error"):
            task_service.create_task(TaskCreate(title="Buy milk"))

    def test_create_task_retrieval_failure(self, task_service, mock_repository):
        mock_repository.create.return_value = 1
        mock_repository.get_by_id.return_value = None

        with pytest.raises(RuntimeError, match="could not be retrieved"):
            task_service.create_task(TaskCreate(title="Buy milk"))


class TestGetAndList:
    """Tests for get_task and list_tasks methods."""

    def test_get_task_found(self, task_service, mock_repository):
        mock_repository.get_by_id.return_value = make_task(id=3)
        assert task_service.get_task(3)["id"] == 3

    def test_get_task_not_found(self, task_service, mock_repository):
        mock_repository.get_by_id.return_value = None
        assert task_service.get_task(3) is None

    def test_list_tasks_empty(self, task_service, mock_repository):
        mock_repository.list.return_value = []
        assert task_service.list_tasks() == []

    def test_list_tasks_storage_error_propagates(self, task_service, mock_repository):
        mock_repository.list.side_effect = sqlite3.DatabaseError("database disk image is malformed")
        with pytest.raises(sqlite3.DatabaseError):
            task_service.list_tasks()


class TestUpdateTask:
    """Tests for update_task method."""

    def test_update_passes_only_present_fields(self, task_service, mock_repository):
        mock_repository.update.return_value = make_task(completed=True)

        result = task_service.update_task(1, TaskUpdate(completed=True))

        assert result["completed"] is True
        mock_repository.update.assert_called_once_with(1, {"completed": True})

    def test_update_passes_explicit_null_description(self, task_service, mock_repository):
        mock_repository.update.return_value = make_task()

        task_service.update_task(1, TaskUpdate(description=None))

        mock_repository.update.assert_called_once_with(1, {"description": None})

    def test_update_not_found(self, task_service, mock_repository):
        mock_repository.update.return_value = None
        assert task_service.update_task(42, TaskUpdate(title="X")) is None

    def test_update_blank_title_raises_value_error(self, task_service, mock_repository):
        updates = TaskUpdate.model_construct(_fields_set={"title"}, title="  ")

        with pytest.raises(ValueError, match="cannot be empty"):
            task_service.update_task(1, updates)

        mock_repository.update.assert_not_called()

    def test_update_null_completed_raises_value_error(self, task_service, mock_repository):
        updates = TaskUpdate.model_construct(_fields_set={"completed"}, completed=None)

        with pytest.raises(ValueError, match="cannot be null"):
            task_service.update_task(1, updates)

        mock_repository.update.assert_not_called()

    def test_update_storage_error_propagates(self, task_service, mock_repository):
        mock_repository.update.side_effect = sqlite3.OperationalError("database is locked")
        with pytest.raises(sqlite3.OperationalError, match="database is locked"):
            task_service.update_task(1, TaskUpdate(title="X"))


class TestDeleteTask:
    """Tests for delete_task method."""

    def test_delete_existing(self, task_service, mock_repository):
        mock_repository.delete.return_value = True
        assert task_service.delete_task(1) is True
        mock_repository.delete.assert_called_once_with(1)

    def test_delete_missing(self, task_service, mock_repository):
        mock_repository.delete.return_value = False
        assert task_service.delete_task(1) is False


class TestTaskLifecycle:
    """Behavioral tests against a real database."""

    def test_create_returns_fresh_pending_task(self, real_service):
        first = real_service.create_task(TaskCreate(title="First", description="desc"))
        second = real_service.create_task(TaskCreate(title="Second"))

        assert first["completed"] is False
        assert first["created_at"] == first["updated_at"]
        assert second["id"] != first["id"]
        assert second["description"] is None

    def test_get_equals_created(self, real_service):
        created = real_service.create_task(TaskCreate(title="Equal"))
        assert real_service.get_task(created["id"]) == created

    def test_list_newest_first(self, real_service):
        a = real_service.create_task(TaskCreate(title="A"))
        b = real_service.create_task(TaskCreate(title="B"))
        c = real_service.create_task(TaskCreate(title="C"))
        assert [t["id"] for t in real_service.list_tasks()] == [c["id"], b["id"], a["id"]]

    def test_title_update_changes_only_title_and_updated_at(self, real_service):
        created = real_service.create_task(TaskCreate(title="Old", description="Keep"))

        updated = real_service.update_task(created["id"], TaskUpdate(title="X"))

        assert updated["title"] == "X"
        assert updated["description"] == "Keep"
        assert updated["completed"] is False
        assert updated["created_at"] == created["created_at"]
        assert updated["updated_at"] > created["updated_at"]

    def test_clear_description(self, real_service):
        created = real_service.create_task(TaskCreate(title="T", description="gone soon"))

        updated = real_service.update_task(created["id"], TaskUpdate(description=None))

        assert updated["description"] is None
        assert updated["title"] == "T"
        assert updated["completed"] is False

    def test_update_missing_changes_nothing(self, real_service):
        created = real_service.create_task(TaskCreate(title="Only"))

        assert real_service.update_task(created["id"] + 100, TaskUpdate(title="X")) is None
        assert real_service.list_tasks() == [created]

    def test_delete_then_get(self, real_service):
        created = real_service.create_task(TaskCreate(title="Temp"))

        assert real_service.delete_task(created["id"]) is True
        assert real_service.get_task(created["id"]) is None
        assert real_service.delete_task(created["id"]) is False

    def test_delete_one_of_two(self, real_service):
        keep = real_service.create_task(TaskCreate(title="Keep"))
        drop = real_service.create_task(TaskCreate(title="Drop"))

        real_service.delete_task(drop["id"])

        assert real_service.get_task(keep["id"]) == keep

    def test_failed_update_keeps_previous_record(self, real_service):
        """A write that fails after the UPDATE statement leaves the old record."""
        created = real_service.create_task(TaskCreate(title="Before", description="old"))
        execute = TaskDatabase._execute_with_logging

        def fail_after_update(db, cursor, query, params=None):
            result = execute(db, cursor, query, params)
            if query.lstrip().startswith("UPDATE"):
                raise sqlite3.OperationalError("disk I/O error")
            return result

        with patch.object(TaskDatabase, "_execute_with_logging", fail_after_update):
            with pytest.raises(sqlite3.OperationalError):
                real_service.update_task(
                    created["id"], TaskUpdate(title="After", description=None, completed=True)
                )

        assert real_service.get_task(created["id"]) == created

    def test_back_to_back_updates_last_writer_wins(self, real_service):
        created = real_service.create_task(TaskCreate(title="Start"))

        first = real_service.update_task(created["id"], TaskUpdate(title="One", completed=True))
        second = real_service.update_task(created["id"], TaskUpdate(title="Two", completed=False))

        stored = real_service.get_task(created["id"])
        assert stored == second
        assert stored["title"] == "Two"
        assert stored["completed"] is False
        assert second["updated_at"] > first["updated_at"] > created["updated_at"]
