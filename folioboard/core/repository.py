"""
FILE: folioboard/core/repository.py
PURPOSE: Persistence contract the board services depend on
EXPORTS:
  - BoardRepository (abstract base class)
DEPENDENCIES:
  - abc (stdlib)
  - folioboard.core.models (Task, Project)
NOTES:
  - Storage technology is up to the adapter (see sqlite_repository.py)
  - All operations are coroutines
  - Adapters raise RepositoryError for storage failures and
    ProjectNotFoundError for unknown ids on update/delete
  - project_id=None addresses the standalone board (tasks with no project)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from .models import Task, Project


class BoardRepository(ABC):
    """Abstract store for tasks (grouped by board) and projects."""

    # --- Task Operations ---

    @abstractmethod
    async def fetch_tasks_for_project(self, project_id: Optional[str]) -> List[Task]:
        """
        Return every task on one board, in no guaranteed order.

        Callers re-sort by order.
        """

    @abstractmethod
    async def save_tasks(
        self, project_id: Optional[str], columns: Mapping[str, List[Task]]
    ) -> None:
        """
        Replace the stored state of every column key present in columns.

        Listed tasks are upserted with column_id set to their key and
        project_id set to the board. Stored tasks of the board that sit
        in one of the keyed columns but appear in none of the lists are
        deleted. Columns not in the mapping are left untouched. Must be
        atomic per call.
        """

    # --- Project Operations ---

    @abstractmethod
    async def fetch_projects(self) -> List[Project]:
        """Return all projects with their tasks populated."""

    @abstractmethod
    async def fetch_project_by_id(self, project_id: str) -> Optional[Project]:
        """Return one project, or None if it doesn't exist."""

    @abstractmethod
    async def add_project(self, project: Project) -> None:
        """Insert a new project."""

    @abstractmethod
    async def update_project(self, project_id: str, changes: Dict[str, Any]) -> None:
        """
        Apply a partial update.

        Raises:
            ProjectNotFoundError: If project_id doesn't exist
        """

    @abstractmethod
    async def delete_project(self, project_id: str) -> None:
        """
        Delete a project and the tasks it owns.

        Raises:
            ProjectNotFoundError: If project_id doesn't exist
        """

    @abstractmethod
    async def exists_by_title(self, title: str, exclude_id: Optional[str] = None) -> bool:
        """
        Whether a committed project already uses this title.

        Comparison is case-insensitive on the trimmed title.
        exclude_id skips one project (the one being renamed).
        """
