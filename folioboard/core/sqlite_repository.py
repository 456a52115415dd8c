"""
FILE: folioboard/core/sqlite_repository.py
PURPOSE: SQLite implementation of the BoardRepository port
EXPORTS:
  - SQLiteBoardRepository
  - DB_DIR, DB_PATH, SCHEMA_PATH
DEPENDENCIES:
  - sqlite3, asyncio (stdlib)
  - pathlib (stdlib)
  - json (stdlib)
  - folioboard.core.repository (BoardRepository)
  - folioboard.core.models (Task, Project)
  - folioboard.core.exceptions (ProjectNotFoundError, RepositoryError, ValidationError)
NOTES:
  - Database stored at ~/.folioboard/folioboard.db unless a path is given
  - Auto-creates directory and initializes schema on first connection
  - One short-lived connection per call; commit on success, rollback on error
  - Blocking sqlite3 work runs in asyncio.to_thread so the event loop keeps going
  - sqlite3.Error is wrapped in RepositoryError("<operation>", message)
  - Returns domain objects (Task, Project), never raw rows
"""

import asyncio
import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .constants import ProjectStatus
from .exceptions import ProjectNotFoundError, RepositoryError, ValidationError
from .models import Task, Project
from .repository import BoardRepository


# Database file location (cross-platform)
DB_DIR = Path.home() / ".folioboard"
DB_PATH = DB_DIR / "folioboard.db"

# Schema file location (ships inside the package)
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Project fields that map onto columns of the projects table
_PROJECT_COLUMNS = {
    "title": "title",
    "description": "description",
    "url": "url",
    "status": "status",
    "technologies": "technologies",
    "tags": "tags",
    "order": "position",
    "start_date": "start_date",
    "end_date": "end_date",
    "created_at": "created_at",
    "updated_at": "updated_at",
}


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='tasks'"
    )
    if cursor.fetchone() is None:
        with open(SCHEMA_PATH, "r") as f:
            conn.executescript(f.read())
        conn.commit()


def _project_value(field: str, value: Any) -> Any:
    if field in ("technologies", "tags"):
        return json.dumps(list(value or []))
    if field == "status":
        return ProjectStatus(value).value
    return value


class SQLiteBoardRepository(BoardRepository):
    """BoardRepository backed by a local SQLite file."""

    def __init__(self, db_path: Optional[Path] = None):
        self._db_path = Path(db_path) if db_path else None

    @property
    def db_path(self) -> Path:
        # Resolved lazily so tests can monkeypatch DB_PATH
        return self._db_path or DB_PATH

    def get_connection(self) -> sqlite3.Connection:
        """
        Open a connection to the board database.

        Creates the parent directory if needed, enables row_factory for
        named column access and foreign keys (for ON DELETE CASCADE),
        and initializes the schema on first use.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        init_database(conn)
        return conn

    @contextmanager
    def _connection(self, operation: str):
        try:
            conn = self.get_connection()
        except (sqlite3.Error, OSError) as e:
            raise RepositoryError(operation, str(e)) from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RepositoryError(operation, str(e)) from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- Blocking task operations (run in a worker thread) ---

    def _fetch_tasks_for_project(self, project_id: Optional[str]) -> List[Task]:
        with self._connection("fetch tasks for project") as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE project_id IS ? ORDER BY column_id, position",
                (project_id,),
            ).fetchall()

        return [Task.from_row(row) for row in rows]

    def _save_tasks(
        self, project_id: Optional[str], columns: Mapping[str, List[Task]]
    ) -> None:
        all_ids = [task.id for tasks in columns.values() for task in tasks]

        with self._connection("save tasks") as conn:
            # Drop rows that left the keyed columns without landing in another one
            for column_id in columns:
                if all_ids:
                    placeholders = ", ".join("?" for _ in all_ids)
                    conn.execute(
                        f"""
                        DELETE FROM tasks
                        WHERE project_id IS ? AND column_id = ? AND id NOT IN ({placeholders})
                        """,
                        (project_id, column_id, *all_ids),
                    )
                else:
                    conn.execute(
                        "DELETE FROM tasks WHERE project_id IS ? AND column_id = ?",
                        (project_id, column_id),
                    )

            for column_id, tasks in columns.items():
                for task in tasks:
                    conn.execute(
                        """
                        INSERT INTO tasks
                            (id, project_id, column_id, title, description, status,
                             position, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(id) DO UPDATE SET
                            project_id = excluded.project_id,
                            column_id = excluded.column_id,
                            title = excluded.title,
                            description = excluded.description,
                            status = excluded.status,
                            position = excluded.position,
                            updated_at = excluded.updated_at
                        """,
                        (
                            task.id,
                            project_id,
                            column_id,
                            task.title,
                            task.description,
                            task.status.value,
                            task.order,
                            task.created_at,
                            task.updated_at,
                        ),
                    )

    # --- Blocking project operations (run in a worker thread) ---

    def _fetch_projects(self) -> List[Project]:
        with self._connection("fetch projects") as conn:
            project_rows = conn.execute(
                "SELECT * FROM projects ORDER BY position, created_at"
            ).fetchall()
            task_rows = conn.execute(
                "SELECT * FROM tasks WHERE project_id IS NOT NULL ORDER BY column_id, position"
            ).fetchall()

        tasks_by_project: Dict[str, List[Task]] = {}
        for row in task_rows:
            tasks_by_project.setdefault(row["project_id"], []).append(Task.from_row(row))

        return [
            Project.from_row(row, tasks_by_project.get(row["id"], []))
            for row in project_rows
        ]

    def _fetch_project_by_id(self, project_id: str) -> Optional[Project]:
        with self._connection("fetch project") as conn:
            row = conn.execute(
                "SELECT * FROM projects WHERE id = ?", (project_id,)
            ).fetchone()
            if row is None:
                return None
            task_rows = conn.execute(
                "SELECT * FROM tasks WHERE project_id = ? ORDER BY column_id, position",
                (project_id,),
            ).fetchall()

        return Project.from_row(row, [Task.from_row(r) for r in task_rows])

    def _add_project(self, project: Project) -> None:
        with self._connection("add project") as conn:
            conn.execute(
                """
                INSERT INTO projects
                    (id, title, description, url, status, technologies, tags,
                     position, start_date, end_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.id,
                    project.title,
                    project.description,
                    project.url,
                    project.status.value,
                    json.dumps(project.technologies),
                    json.dumps(project.tags),
                    project.order,
                    project.start_date,
                    project.end_date,
                    project.created_at,
                    project.updated_at,
                ),
            )

    def _update_project(self, project_id: str, changes: Dict[str, Any]) -> None:
        unknown = [key for key in changes if key not in _PROJECT_COLUMNS]
        if unknown:
            raise ValidationError(
                f"Cannot update project field(s): {', '.join(sorted(unknown))}"
            )

        with self._connection("update project") as conn:
            exists = conn.execute(
                "SELECT 1 FROM projects WHERE id = ?", (project_id,)
            ).fetchone()
            if not exists:
                raise ProjectNotFoundError(project_id)

            if not changes:
                return

            assignments = ", ".join(f"{_PROJECT_COLUMNS[key]} = ?" for key in changes)
            values = [_project_value(key, value) for key, value in changes.items()]
            conn.execute(
                f"UPDATE projects SET {assignments} WHERE id = ?",
                (*values, project_id),
            )

    def _delete_project(self, project_id: str) -> None:
        with self._connection("delete project") as conn:
            exists = conn.execute(
                "SELECT 1 FROM projects WHERE id = ?", (project_id,)
            ).fetchone()
            if not exists:
                raise ProjectNotFoundError(project_id)

            # Owned tasks go with it (ON DELETE CASCADE)
            conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))

    def _exists_by_title(self, title: str, exclude_id: Optional[str] = None) -> bool:
        wanted = title.strip().casefold()
        with self._connection("check title existence") as conn:
            rows = conn.execute("SELECT id, title FROM projects").fetchall()

        return any(
            row["title"].strip().casefold() == wanted and row["id"] != exclude_id
            for row in rows
        )

    # --- BoardRepository (async) ---

    async def fetch_tasks_for_project(self, project_id: Optional[str]) -> List[Task]:
        return await asyncio.to_thread(self._fetch_tasks_for_project, project_id)

    async def save_tasks(
        self, project_id: Optional[str], columns: Mapping[str, List[Task]]
    ) -> None:
        await asyncio.to_thread(self._save_tasks, project_id, columns)

    async def fetch_projects(self) -> List[Project]:
        return await asyncio.to_thread(self._fetch_projects)

    async def fetch_project_by_id(self, project_id: str) -> Optional[Project]:
        return await asyncio.to_thread(self._fetch_project_by_id, project_id)

    async def add_project(self, project: Project) -> None:
        await asyncio.to_thread(self._add_project, project)

    async def update_project(self, project_id: str, changes: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._update_project, project_id, changes)

    async def delete_project(self, project_id: str) -> None:
        await asyncio.to_thread(self._delete_project, project_id)

    async def exists_by_title(self, title: str, exclude_id: Optional[str] = None) -> bool:
        return await asyncio.to_thread(self._exists_by_title, title, exclude_id)
