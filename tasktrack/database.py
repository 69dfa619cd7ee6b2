"""
Database schema and management for the task tracker service.
"""
import sqlite3
import os
import time
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timedelta, UTC
import logging

logger = logging.getLogger(__name__)

# Query performance threshold (seconds) - queries slower than this will be logged
QUERY_SLOW_THRESHOLD = float(os.getenv("DB_QUERY_SLOW_THRESHOLD", "0.1"))
# Enable query logging (can be set via environment variable)
ENABLE_QUERY_LOGGING = os.getenv("DB_ENABLE_QUERY_LOGGING", "true").lower() == "true"

# Columns a partial update is allowed to touch
UPDATABLE_FIELDS = ("title", "description", "completed")

# SQLite INTEGER is a signed 64-bit value; no stored id can fall outside it
MAX_TASK_ID = 2 ** 63 - 1


def is_storable_id(task_id: int) -> bool:
    """Whether ``task_id`` fits in the id column at all."""
    return -MAX_TASK_ID - 1 <= task_id <= MAX_TASK_ID


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """
    Format a datetime for storage.

    Always emits microseconds and a UTC offset so that text ordering in
    SQLite matches chronological ordering.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp back into a UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        # CURRENT_TIMESTAMP defaults use a space separator and no offset
        parsed = datetime.fromisoformat(str(value).replace(" ", "T"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class TaskDatabase:
    """SQLite-backed storage for task records."""

    def __init__(self, db_path: str = None):
        """
        Initialize database connection and create schema if needed.

        Args:
            db_path: SQLite database file path. If None, uses TASKTRACK_DB_PATH.
        """
        if db_path is None:
            db_path = os.getenv("TASKTRACK_DB_PATH", "/app/data/tasks.db")
        self.db_path = db_path
        self.db_type = "sqlite"

        self._ensure_db_directory()
        self._init_schema()

    def _ensure_db_directory(self):
        """Ensure database directory exists."""
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Open a new connection; callers close it when done."""
        conn = sqlite3.connect(self.db_path, timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.OperationalError:
            # In-memory and some network filesystems refuse WAL
            logger.debug("WAL journal mode unavailable for %s", self.db_path)
        return conn

    def _log_query(self, query: str, params: Tuple, duration: float, rows_returned: int = None):
        """
        Log query performance information.

        Args:
            query: SQL query string
            params: Query parameters
            duration: Query duration in seconds
            rows_returned: Number of rows returned (if known)
        """
        if not ENABLE_QUERY_LOGGING:
            return

        # Log slow queries at WARNING level, others at DEBUG
        log_level = logging.WARNING if duration >= QUERY_SLOW_THRESHOLD else logging.DEBUG

        # Truncate very long queries for readability
        query_preview = " ".join(query.split())
        if len(query_preview) > 200:
            query_preview = query_preview[:200] + "..."

        message = f"Query executed in {duration:.4f}s"
        if rows_returned is not None:
            message += f" ({rows_returned} rows)"

        logger.log(log_level, message, extra={
            "query": query_preview,
            "duration": duration,
            "rows": rows_returned
        })

        if duration >= QUERY_SLOW_THRESHOLD * 2:
            logger.warning(
                f"Slow query detected ({duration:.4f}s): {query_preview}",
                extra={"params": params[:10] if params else None}
            )

    def _execute_with_logging(self, cursor: sqlite3.Cursor, query: str, params: Tuple = None) -> sqlite3.Cursor:
        """
        Execute a query with performance logging.

        Args:
            cursor: Database cursor
            query: SQL query string
            params: Query parameters

        Returns:
            Cursor after execution
        """
        start_time = time.time()
        result = cursor.execute(query, params or ())
        duration = time.time() - start_time
        rows = cursor.rowcount if cursor.rowcount >= 0 else None
        self._log_query(query, params, duration, rows)
        return result

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL CHECK(length(trim(title)) > 0),
                    description TEXT,
                    completed INTEGER NOT NULL DEFAULT 0 CHECK(completed IN (0, 1)),
                    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            self._execute_with_logging(cursor, """
                CREATE INDEX IF NOT EXISTS idx_tasks_created_at
                ON tasks (created_at DESC, id DESC)
            """)
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Dict[str, Any]:
        """Convert a stored row into a task dictionary with Python types."""
        task = dict(row)
        task["completed"] = bool(task["completed"])
        task["created_at"] = parse_timestamp(task["created_at"])
        task["updated_at"] = parse_timestamp(task["updated_at"])
        return task

    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        completed: bool = False
    ) -> int:
        """Create a new task and return its ID."""
        now = format_timestamp(utc_now())
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, """
                INSERT INTO tasks (title, description, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
            """, (title, description, int(completed), now, now))
            task_id = cursor.lastrowid
            logger.info(f"Created task {task_id}: {title}")
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        """Get a task by ID."""
        if not is_storable_id(task_id):
            return None
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cursor.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_tasks(self) -> List[Dict[str, Any]]:
        """List every task, newest first (ties broken by descending id)."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(
                cursor,
                "SELECT * FROM tasks ORDER BY created_at DESC, id DESC"
            )
            return [self._row_to_task(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_task(self, task_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to a task.

        Only keys present in ``fields`` are written; a key mapped to None
        writes NULL. ``updated_at`` is always bumped and is guaranteed to be
        strictly greater than its previous value.

        Args:
            task_id: Task ID
            fields: Mapping of column name to new value, containing only the
                columns the caller supplied

        Returns:
            Updated task dictionary, or None if the task does not exist
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        if not is_storable_id(task_id):
            return None

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                self._execute_with_logging(
                    cursor, "SELECT updated_at FROM tasks WHERE id = ?", (task_id,)
                )
                row = cursor.fetchone()
                if row is None:
                    cursor.execute("ROLLBACK")
                    return None

                now = utc_now()
                previous = parse_timestamp(row["updated_at"])
                if now <= previous:
                    now = previous + timedelta(microseconds=1)

                assignments = []
                params: List[Any] = []
                for column in UPDATABLE_FIELDS:
                    if column in fields:
                        value = fields[column]
                        if column == "completed":
                            value = int(value)
                        assignments.append(f"{column} = ?")
                        params.append(value)
                assignments.append("updated_at = ?")
                params.append(format_timestamp(now))
                params.append(task_id)

                self._execute_with_logging(
                    cursor,
                    f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                    tuple(params)
                )
                self._execute_with_logging(cursor, "SELECT * FROM tasks WHERE id = ?", (task_id,))
                updated = cursor.fetchone()
                cursor.execute("COMMIT")
            except Exception:
                cursor.execute("ROLLBACK")
                raise

            logger.info(f"Updated task {task_id}: {', '.join(sorted(fields)) or 'no fields'}")
            return self._row_to_task(updated)
        finally:
            conn.close()

    def get_stats(self) -> Dict[str, Any]:
        """Task counts and connection settings, used by the health check."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, """
                SELECT COUNT(*) AS total, COALESCE(SUM(completed), 0) AS completed
                FROM tasks
            """)
            row = cursor.fetchone()
            journal_mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
            return {
                "total_tasks": row["total"],
                "completed_tasks": row["completed"],
                "pending_tasks": row["total"] - row["completed"],
                "journal_mode": journal_mode,
            }
        finally:
            conn.close()

    def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns True if a row was removed."""
        if not is_storable_id(task_id):
            return False
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info(f"Deleted task {task_id}")
            return deleted
        finally:
            conn.close()
