"""Shared pytest configuration, fakes and fixtures for tests."""

import itertools
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from folioboard.core import sqlite_repository
from folioboard.core.board import Board
from folioboard.core.exceptions import ProjectNotFoundError
from folioboard.core.locking import BoardLocks
from folioboard.core.models import Project, Task
from folioboard.core.repository import BoardRepository
from folioboard.core.service import ProjectService, TaskService


# --- Fake repositories ---

class InMemoryBoardRepository(BoardRepository):
    """BoardRepository keeping everything in dicts; records every call."""

    def __init__(self):
        self.tasks: Dict[str, Task] = {}
        self.projects: Dict[str, Project] = {}
        self.calls: List[str] = []

    @property
    def writes(self) -> List[str]:
        return [c for c in self.calls if not c.startswith(("fetch", "exists"))]

    def seed_tasks(self, *tasks: Task, project_id: Optional[str] = None) -> None:
        """Store tasks directly, bypassing the service."""
        for task in tasks:
            self.tasks[task.id] = replace(task, project_id=project_id)

    def board(self, project_id: Optional[str] = None) -> Dict[str, List[str]]:
        """Stored task ids per column, in order."""
        columns: Dict[str, List[Task]] = {}
        for task in self.tasks.values():
            if task.project_id == project_id:
                columns.setdefault(task.column_id, []).append(task)
        return {
            column_id: [t.id for t in sorted(tasks, key=lambda t: t.order)]
            for column_id, tasks in columns.items()
        }

    async def fetch_tasks_for_project(self, project_id: Optional[str]) -> List[Task]:
        self.calls.append("fetch_tasks_for_project")
        # Reverse insertion order: callers must not rely on storage order
        return [t for t in reversed(list(self.tasks.values())) if t.project_id == project_id]

    async def save_tasks(self, project_id: Optional[str], columns: Mapping[str, List[Task]]) -> None:
        self.calls.append("save_tasks")
        keep = {task.id for tasks in columns.values() for task in tasks}
        for task_id, task in list(self.tasks.items()):
            if task.project_id == project_id and task.column_id in columns and task_id not in keep:
                del self.tasks[task_id]
        for column_id, tasks in columns.items():
            for task in tasks:
                self.tasks[task.id] = replace(task, column_id=column_id, project_id=project_id)

    async def fetch_projects(self) -> List[Project]:
        self.calls.append("fetch_projects")
        return [
            replace(p, tasks=[t for t in self.tasks.values() if t.project_id == p.id])
            for p in sorted(self.projects.values(), key=lambda p: (p.order, p.created_at or ""))
        ]

    async def fetch_project_by_id(self, project_id: str) -> Optional[Project]:
        self.calls.append("fetch_project_by_id")
        project = self.projects.get(project_id)
        if project is None:
            return None
        return replace(project, tasks=[t for t in self.tasks.values() if t.project_id == project_id])

    async def add_project(self, project: Project) -> None:
        self.calls.append("add_project")
        self.projects[project.id] = project

    async def update_project(self, project_id: str, changes: Dict[str, Any]) -> None:
        self.calls.append("update_project")
        if project_id not in self.projects:
            raise ProjectNotFoundError(project_id)
        self.projects[project_id] = replace(self.projects[project_id], **changes)

    async def delete_project(self, project_id: str) -> None:
        self.calls.append("delete_project")
        if project_id not in self.projects:
            raise ProjectNotFoundError(project_id)
        del self.projects[project_id]
        self.tasks = {k: t for k, t in self.tasks.items() if t.project_id != project_id}

    async def exists_by_title(self, title: str, exclude_id: Optional[str] = None) -> bool:
        self.calls.append("exists_by_title")
        wanted = title.strip().casefold()
        return any(
            p.title.strip().casefold() == wanted and p.id != exclude_id
            for p in self.projects.values()
        )


class PartialBoardRepository(InMemoryBoardRepository):
    """Adapter that never got around to implementing writes."""

    async def save_tasks(self, project_id, columns):
        raise NotImplementedError("save_tasks is not implemented")


class UnreachableBoardRepository(InMemoryBoardRepository):
    """Adapter whose store is down."""

    async def fetch_tasks_for_project(self, project_id):
        raise ConnectionError("store unreachable")

    async def fetch_projects(self):
        raise ConnectionError("store unreachable")


# --- Helpers ---

def make_task(task_id: str, column_id: str = "ideas", order: int = 0, **fields) -> Task:
    fields.setdefault("created_at", f"2026-01-01T00:00:{order:02d}")
    fields.setdefault("updated_at", fields["created_at"])
    return Task(id=task_id, title=fields.pop("title", task_id.upper()), column_id=column_id, order=order, **fields)


def ids(tasks) -> List[str]:
    return [t.id for t in tasks]


def orders(tasks) -> List[int]:
    return [t.order for t in tasks]


# --- Fixtures ---

@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Use temporary database for all tests."""
    db_path = tmp_path / "test_folioboard.db"
    monkeypatch.setattr(sqlite_repository, "DB_PATH", db_path)
    monkeypatch.setattr(sqlite_repository, "DB_DIR", tmp_path)
    for name in ("FOLIOBOARD_DB", "FOLIOBOARD_LOG_LEVEL", "FOLIOBOARD_COLUMNS"):
        monkeypatch.delenv(name, raising=False)
    yield db_path


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handler and propagation changes made by configure_logging."""
    logger = logging.getLogger("folioboard")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def clock():
    """Strictly increasing timestamps."""
    counter = itertools.count(1)
    return lambda: f"2026-06-01T12:00:{next(counter):02d}"


@pytest.fixture
def repo():
    return InMemoryBoardRepository()


@pytest.fixture
def locks():
    return BoardLocks()


@pytest.fixture
def task_service(repo, locks, id_factory, clock):
    return TaskService(repo, locks=locks, id_factory=id_factory, clock=clock)


@pytest.fixture
def project_service(repo, locks, id_factory, clock):
    return ProjectService(repo, locks=locks, id_factory=id_factory, clock=clock)


@pytest.fixture
def board(repo, locks, id_factory, clock):
    return Board.from_repository(repo, locks=locks, id_factory=id_factory, clock=clock)
