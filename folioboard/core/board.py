"""
FILE: folioboard/core/board.py
PURPOSE: Single call surface over the task and project services
EXPORTS:
  - Board
DEPENDENCIES:
  - folioboard.core.service (TaskService, ProjectService)
  - folioboard.core.locking (BoardLocks)
NOTES:
  - Pure delegation; no rules live here
  - Route handlers and UI state stores depend on Board only
  - Boards derived with for_project() share repository, locks and logger
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .constants import DEFAULT_COLUMNS
from .locking import BoardLocks
from .models import Project, Task
from .ordering import Columns
from .repository import BoardRepository
from .service import ProjectService, TaskService


class Board:
    """Facade composing a TaskService (one board) and a ProjectService."""

    def __init__(self, tasks: TaskService, projects: ProjectService):
        self.tasks = tasks
        self.projects = projects

    @classmethod
    def from_repository(
        cls,
        repository: BoardRepository,
        project_id: Optional[str] = None,
        columns: Sequence[str] = DEFAULT_COLUMNS,
        locks: Optional[BoardLocks] = None,
        logger: Optional[logging.Logger] = None,
        id_factory=None,
        clock=None,
    ) -> "Board":
        """Wire both services around one repository and one lock registry."""
        locks = locks or BoardLocks()
        tasks = TaskService(
            repository,
            project_id=project_id,
            columns=columns,
            locks=locks,
            logger=logger,
            id_factory=id_factory,
            clock=clock,
        )
        projects = ProjectService(
            repository, locks=locks, logger=logger, id_factory=id_factory, clock=clock
        )
        return cls(tasks, projects)

    @property
    def project_id(self) -> Optional[str]:
        return self.tasks.project_id

    async def for_project(self, project_id: str) -> "Board":
        """
        Board scoped to one project's task board.

        Raises:
            ProjectNotFoundError: If project_id doesn't exist
        """
        await self.projects.require_project(project_id)
        return Board(self.tasks.for_board(project_id), self.projects)

    # --- Projects ---

    async def create_project(self, title: str, description: Optional[str] = None, **fields) -> Project:
        return await self.projects.create_project(title, description, **fields)

    async def get_projects(self) -> List[Project]:
        return await self.projects.get_projects()

    async def update_project(self, project_id: str, changes: Mapping[str, Any]) -> Project:
        return await self.projects.update_project(project_id, changes)

    async def move_project(
        self, project_id: str, to_column: str, to_index: Optional[int] = None
    ) -> Project:
        return await self.projects.move_project(project_id, to_column, to_index)

    async def delete_project(self, project_id: str) -> None:
        await self.projects.delete_project(project_id)

    # --- Tasks ---

    async def get_tasks(self) -> Columns:
        return await self.tasks.get_tasks()

    async def add_task(self, column_id: str, title: str, description: Optional[str] = None) -> Task:
        return await self.tasks.add_task(column_id, title, description)

    async def move_task(self, from_col: str, to_col: str, from_index: int, to_index: int) -> Task:
        return await self.tasks.move_task(from_col, to_col, from_index, to_index)

    async def update_task(self, task_id: str, column_id: str, updates: Mapping[str, Any]) -> Task:
        return await self.tasks.update_task(task_id, column_id, updates)

    async def delete_task(self, task_id: str, column_id: str) -> None:
        await self.tasks.delete_task(task_id, column_id)

    async def reorder_column(self, column_id: str, ordered_ids: Sequence[str]) -> None:
        await self.tasks.reorder_column(column_id, ordered_ids)
