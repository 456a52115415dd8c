"""
FILE: folioboard/core/service.py
PURPOSE: Business logic layer for board tasks and projects
EXPORTS:
  - TaskService
      add_task, move_task, update_task, delete_task, reorder_column,
      get_tasks, get_tasks_by_column
  - ProjectService
      create_project, get_projects, get_project, get_projects_by_status,
      update_project, move_project, delete_project, move_project_to_status,
      start_project, complete_project, pause_project, archive_project,
      unarchive_project, add_technology, remove_technology
DEPENDENCIES:
  - folioboard.core.repository (BoardRepository port, injected)
  - folioboard.core.ordering (pure column primitives)
  - folioboard.core.locking (BoardLocks)
  - folioboard.core.models, constants, exceptions
  - logging, uuid (stdlib)
NOTES:
  - Repository is injected; services never reach for global state
  - Every mutation: lock board -> read -> compute (pure) -> write
  - Validation happens before any repository call
  - Non-domain failures from the repository are re-raised as
    RepositoryError with the original message; no retries
  - Returns domain objects, never dicts or raw rows
"""

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .constants import (
    DEFAULT_COLUMNS,
    DEFAULT_PROJECT_STATUS,
    PROJECT_EDITABLE_FIELDS,
    PROJECTS_LOCK_KEY,
    TASK_EDITABLE_FIELDS,
    ProjectStatus,
)
from .exceptions import (
    ConflictError,
    FolioboardError,
    ProjectNotFoundError,
    RepositoryError,
    TaskNotFoundError,
    UnknownColumnError,
    ValidationError,
)
from .locking import BoardLocks
from .models import Project, Task, now_iso
from .ordering import (
    Columns,
    add_to_column,
    apply_order,
    group_by_column,
    move_between_columns,
    project_status_for_column,
    reindex,
    status_for_column,
)
from .repository import BoardRepository


def _generate_id() -> str:
    return uuid.uuid4().hex


async def _call_repository(operation: str, method, *args):
    """Await a repository call, normalizing foreign failures to RepositoryError."""
    try:
        return await method(*args)
    except FolioboardError:
        raise
    except Exception as e:
        raise RepositoryError(operation, str(e) or type(e).__name__) from e


def _clean_title(title: Optional[str], entity: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError(f"{entity} title cannot be empty", field="title")
    return title


def _clean_text(value: Optional[str]) -> Optional[str]:
    value = value.strip() if value else None
    return value or None


def _clean_labels(values: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop blanks and duplicates (first spelling wins)."""
    cleaned = []
    seen = set()
    for value in values or []:
        value = str(value).strip()
        if value and value.casefold() not in seen:
            seen.add(value.casefold())
            cleaned.append(value)
    return cleaned


def _coerce_project_status(status) -> ProjectStatus:
    try:
        return ProjectStatus(status)
    except ValueError:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(ProjectStatus.values())}",
            field="status",
        ) from None


class TaskService:
    """
    Orchestrates task operations on one board.

    A board is the standalone task board (project_id=None) or the task
    board owned by one project. Columns are fixed for the service's
    lifetime; task status always follows the column.
    """

    def __init__(
        self,
        repository: BoardRepository,
        project_id: Optional[str] = None,
        columns: Sequence[str] = DEFAULT_COLUMNS,
        locks: Optional[BoardLocks] = None,
        logger: Optional[logging.Logger] = None,
        id_factory=None,
        clock=None,
    ):
        self.repository = repository
        self.project_id = project_id
        self.columns = tuple(columns)
        self.locks = locks or BoardLocks()
        self.logger = logger or logging.getLogger(__name__)
        self._new_id = id_factory or _generate_id
        self._now = clock or now_iso

    def for_board(self, project_id: Optional[str]) -> "TaskService":
        """Service for another board sharing repository, locks and logger."""
        return TaskService(
            self.repository,
            project_id=project_id,
            columns=self.columns,
            locks=self.locks,
            logger=self.logger,
            id_factory=self._new_id,
            clock=self._now,
        )

    # --- Internal helpers ---

    async def _load_columns(self) -> Columns:
        tasks = await _call_repository(
            "fetch tasks for project",
            self.repository.fetch_tasks_for_project,
            self.project_id,
        )
        columns = group_by_column(tasks, self.columns)

        for column_id, bucket in columns.items():
            if column_id not in self.columns:
                self.logger.warning(
                    "Board %s has %d task(s) in unknown column '%s'; keeping them in place",
                    self.project_id or "<standalone>",
                    len(bucket),
                    column_id,
                )
        return columns

    async def _save(self, changed: Dict[str, List[Task]]) -> None:
        await _call_repository(
            "save tasks", self.repository.save_tasks, self.project_id, changed
        )
        self.logger.debug(
            "Saved columns %s on board %s",
            ", ".join(changed),
            self.project_id or "<standalone>",
        )

    def _require_column(self, column_id: str) -> None:
        if column_id not in self.columns:
            raise UnknownColumnError(column_id, self.columns)

    @staticmethod
    def _locate(columns: Columns, task_id: str, hint: Optional[str] = None) -> str:
        """Find the column holding task_id, looking in hint first."""
        search = ([hint] if hint in columns else []) + [c for c in columns if c != hint]
        for column_id in search:
            if any(task.id == task_id for task in columns[column_id]):
                return column_id
        raise TaskNotFoundError(task_id)

    # --- Reads ---

    async def get_tasks(self) -> Columns:
        """
        Get the whole board as column id -> tasks sorted by order.

        Every known column is present, empty or not.
        """
        return await self._load_columns()

    async def get_tasks_by_column(self, column_id: str) -> List[Task]:
        """
        Get the tasks of one column, sorted by order.

        Raises:
            UnknownColumnError: If column_id isn't on this board
        """
        columns = await self._load_columns()
        if column_id not in columns:
            raise UnknownColumnError(column_id, self.columns)
        return columns[column_id]

    # --- Mutations ---

    async def add_task(
        self, column_id: str, title: str, description: Optional[str] = None
    ) -> Task:
        """
        Create a task at the end of a column.

        Args:
            column_id: Column to place the task in
            title: Task title (required, must not be empty)
            description: Optional task description

        Returns:
            Newly created Task with id, status and order assigned

        Raises:
            ValidationError: If title is empty or whitespace-only
            UnknownColumnError: If column_id isn't on this board
            RepositoryError: If the store fails

        Notes:
            - Trims whitespace from title and description
            - Status derives from the column
            - Nothing is read or written when validation fails
        """
        title = _clean_title(title, "Task")
        self._require_column(column_id)

        async with self.locks.hold(self.project_id):
            columns = await self._load_columns()
            now = self._now()

            task = Task(
                id=self._new_id(),
                title=title,
                description=_clean_text(description),
                column_id=column_id,
                status=status_for_column(column_id, self.logger),
                project_id=self.project_id,
                created_at=now,
                updated_at=now,
            )
            columns = add_to_column(columns, column_id, task)
            column = reindex(columns[column_id], now)

            await self._save({column_id: column})

        created = column[-1]
        self.logger.debug("Added task %s to column '%s'", created.id, column_id)
        return created

    async def move_task(
        self, from_col: str, to_col: str, from_index: int, to_index: int
    ) -> Task:
        """
        Move a task between (or within) columns.

        Args:
            from_col: Column the task is in now
            to_col: Destination column
            from_index: Current position of the task in from_col
            to_index: Target position in to_col (clamped to the column)

        Returns:
            The moved Task with its new column, status and order

        Raises:
            UnknownColumnError: If either column isn't on this board
            IndexOutOfRangeError: If from_index doesn't point at a task
            RepositoryError: If the store fails

        Notes:
            - Both affected columns are reindexed to 0..N-1
            - Status is recomputed only when the column changes
            - Indices must come from the current state; the board lock
              serializes writers but there is no stale-view check
        """
        self._require_column(to_col)

        async with self.locks.hold(self.project_id):
            columns = await self._load_columns()
            moved_columns = move_between_columns(
                columns, from_col, to_col, from_index, to_index
            )
            moved_id = columns[from_col][from_index].id
            now = self._now()

            destination = moved_columns[to_col]
            if from_col != to_col:
                status = status_for_column(to_col, self.logger)
                destination = [
                    replace(task, column_id=to_col, status=status, updated_at=now)
                    if task.id == moved_id
                    else task
                    for task in destination
                ]

            changed = {from_col: reindex(moved_columns[from_col], now)}
            changed[to_col] = reindex(destination, now)

            await self._save(changed)

        self.logger.debug(
            "Moved task %s from '%s'[%d] to '%s'[%d]",
            moved_id, from_col, from_index, to_col, to_index,
        )
        return next(task for task in changed[to_col] if task.id == moved_id)

    async def update_task(
        self, task_id: str, column_id: str, updates: Mapping[str, Any]
    ) -> Task:
        """
        Update a task's title and/or description.

        Args:
            task_id: ID of task to update
            column_id: Column the caller believes the task is in (searched first)
            updates: Mapping with 'title' and/or 'description'

        Returns:
            Updated Task object

        Raises:
            ValidationError: If a field other than title/description is
                given (id, status, column and order only change through
                add/move) or the new title is empty
            TaskNotFoundError: If no column holds task_id
        """
        forbidden = sorted(key for key in updates if key not in TASK_EDITABLE_FIELDS)
        if forbidden:
            raise ValidationError(
                f"Task field(s) cannot be updated: {', '.join(forbidden)}",
                field=forbidden[0],
            )

        changes = {}
        if "title" in updates:
            changes["title"] = _clean_title(updates["title"], "Task")
        if "description" in updates:
            changes["description"] = _clean_text(updates["description"])

        async with self.locks.hold(self.project_id):
            columns = await self._load_columns()
            found_column = self._locate(columns, task_id, column_id)
            now = self._now()

            column = [
                replace(task, **changes, updated_at=now) if task.id == task_id else task
                for task in columns[found_column]
            ]
            column = reindex(column, now)

            await self._save({found_column: column})

        return next(task for task in column if task.id == task_id)

    async def delete_task(self, task_id: str, column_id: str) -> None:
        """
        Delete a task and close the gap it leaves.

        Args:
            task_id: ID of task to delete
            column_id: Column the caller believes the task is in (searched first)

        Raises:
            TaskNotFoundError: If no column holds task_id

        Notes:
            - Remaining tasks of the column are reindexed to 0..N-1
        """
        async with self.locks.hold(self.project_id):
            columns = await self._load_columns()
            found_column = self._locate(columns, task_id, column_id)
            now = self._now()

            remaining = reindex(
                [task for task in columns[found_column] if task.id != task_id], now
            )
            await self._save({found_column: remaining})

        self.logger.debug("Deleted task %s from column '%s'", task_id, found_column)

    async def reorder_column(self, column_id: str, ordered_ids: Sequence[str]) -> None:
        """
        Rewrite a column's order to follow ordered_ids.

        Args:
            column_id: Column to reorder
            ordered_ids: Task IDs in the desired order

        Raises:
            UnknownColumnError: If column_id isn't on this board

        Notes:
            - IDs not in the column are dropped and logged as a warning
            - Repeated IDs keep their first position
            - Tasks left out of ordered_ids are kept, after the listed
              ones, in their previous relative order
        """
        async with self.locks.hold(self.project_id):
            columns = await self._load_columns()
            if column_id not in columns:
                raise UnknownColumnError(column_id, self.columns)

            arranged, dropped = apply_order(columns[column_id], ordered_ids)
            if dropped:
                self.logger.warning(
                    "Reorder of column '%s' ignored %d unknown task id(s): %s",
                    column_id,
                    len(dropped),
                    ", ".join(dropped),
                )

            await self._save({column_id: reindex(arranged, self._now())})


class ProjectService:
    """
    Orchestrates project CRUD and placement on the project board.

    Projects are bucketed by status; order is a project's position
    inside its status bucket.
    """

    def __init__(
        self,
        repository: BoardRepository,
        locks: Optional[BoardLocks] = None,
        logger: Optional[logging.Logger] = None,
        id_factory=None,
        clock=None,
    ):
        self.repository = repository
        self.locks = locks or BoardLocks()
        self.logger = logger or logging.getLogger(__name__)
        self._new_id = id_factory or _generate_id
        self._now = clock or now_iso

    # --- Internal helpers ---

    async def _fetch_projects(self) -> List[Project]:
        return await _call_repository("fetch projects", self.repository.fetch_projects)

    async def require_project(self, project_id: str) -> Project:
        """Fetch a project or raise ProjectNotFoundError."""
        if not project_id:
            raise ValidationError("Project ID is required", field="id")
        project = await _call_repository(
            "fetch project", self.repository.fetch_project_by_id, project_id
        )
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _check_title_free(self, title: str, exclude_id: Optional[str] = None) -> None:
        taken = await _call_repository(
            "check title existence", self.repository.exists_by_title, title, exclude_id
        )
        if taken:
            raise ConflictError(f'Project with title "{title}" already exists')

    async def _write(self, project_id: str, changes: Dict[str, Any]) -> None:
        await _call_repository(
            "update project", self.repository.update_project, project_id, changes
        )

    async def _relocate(
        self,
        project_id: str,
        status: ProjectStatus,
        to_index: Optional[int] = None,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Project:
        """
        Place a project in a status bucket and reindex affected buckets.

        Caller holds the projects lock. Extra changes are written with
        the moved project.
        """
        projects = await self._fetch_projects()
        project = next((p for p in projects if p.id == project_id), None)
        if project is None:
            raise ProjectNotFoundError(project_id)

        buckets = group_by_column(
            projects, ProjectStatus.values(), column_of=lambda p: p.status.value
        )
        from_col = project.status.value
        to_col = status.value
        from_index = [p.id for p in buckets[from_col]].index(project_id)
        if to_index is None:
            to_index = len(buckets[to_col])

        moved = move_between_columns(buckets, from_col, to_col, from_index, to_index)
        now = self._now()
        relocated = None

        for column_id in dict.fromkeys((from_col, to_col)):
            for position, item in enumerate(moved[column_id]):
                item_changes: Dict[str, Any] = {}
                if item.order != position:
                    item_changes["order"] = position
                if item.id == project_id:
                    item_changes.update(changes or {})
                    item_changes["status"] = status
                if item_changes:
                    item_changes["updated_at"] = now
                    await self._write(item.id, item_changes)
                if item.id == project_id:
                    relocated = replace(item, **item_changes)

        return relocated

    # --- Reads ---

    async def get_projects(self) -> List[Project]:
        """
        List all projects.

        Returns:
            All projects with their tasks, as ordered by the repository
        """
        return await self._fetch_projects()

    async def get_project(self, project_id: str) -> Optional[Project]:
        """
        Get a single project by ID.

        Returns None rather than raising when it doesn't exist.
        """
        if not project_id:
            raise ValidationError("Project ID is required", field="id")
        return await _call_repository(
            "fetch project", self.repository.fetch_project_by_id, project_id
        )

    async def get_projects_by_status(self, status) -> List[Project]:
        """List projects in one status, in board order."""
        status = _coerce_project_status(status)
        projects = [p for p in await self._fetch_projects() if p.status == status]
        projects.sort(key=lambda p: (p.order, p.created_at or ""))
        return projects

    # --- Mutations ---

    async def create_project(
        self,
        title: str,
        description: Optional[str] = None,
        status=DEFAULT_PROJECT_STATUS,
        technologies: Optional[Iterable[str]] = None,
        tags: Optional[Iterable[str]] = None,
        url: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Project:
        """
        Create a new project with validation.

        Args:
            title: Project title (required, must not be empty)
            description: Optional description
            status: Initial status (defaults to 'idea')
            technologies: Technology labels
            tags: Free-form tags
            url: Optional link
            start_date, end_date: Optional ISO dates

        Returns:
            Newly created Project, placed at the end of its status bucket

        Raises:
            ValidationError: If title is empty or status invalid
            ConflictError: If another project already uses the title
        """
        title = _clean_title(title, "Project")
        status = _coerce_project_status(status)

        async with self.locks.hold(PROJECTS_LOCK_KEY):
            await self._check_title_free(title)

            projects = await self._fetch_projects()
            now = self._now()
            project = Project(
                id=self._new_id(),
                title=title,
                description=_clean_text(description),
                url=_clean_text(url),
                status=status,
                technologies=_clean_labels(technologies),
                tags=_clean_labels(tags),
                order=sum(1 for p in projects if p.status == status),
                start_date=start_date,
                end_date=end_date,
                created_at=now,
                updated_at=now,
            )
            await _call_repository("add project", self.repository.add_project, project)

        self.logger.debug("Created project %s (%s)", project.id, project.title)
        return project

    async def update_project(self, project_id: str, changes: Mapping[str, Any]) -> Project:
        """
        Update project fields.

        Args:
            project_id: ID of project to update
            changes: Mapping of editable fields (title, description, url,
                status, technologies, tags, start_date, end_date)

        Returns:
            Updated Project object

        Raises:
            ValidationError: If a non-editable field is given, the title
                is empty or the status invalid
            ProjectNotFoundError: If project_id doesn't exist
            ConflictError: If the new title belongs to another project

        Notes:
            - Title uniqueness is only re-checked when the title changes
            - A status change moves the project to the end of its new bucket
        """
        forbidden = sorted(key for key in changes if key not in PROJECT_EDITABLE_FIELDS)
        if forbidden:
            raise ValidationError(
                f"Project field(s) cannot be updated: {', '.join(forbidden)}",
                field=forbidden[0],
            )

        cleaned: Dict[str, Any] = dict(changes)
        if "title" in cleaned:
            cleaned["title"] = _clean_title(cleaned["title"], "Project")
        if "status" in cleaned:
            cleaned["status"] = _coerce_project_status(cleaned["status"])
        for key in ("description", "url"):
            if key in cleaned:
                cleaned[key] = _clean_text(cleaned[key])
        for key in ("technologies", "tags"):
            if key in cleaned:
                cleaned[key] = _clean_labels(cleaned[key])

        async with self.locks.hold(PROJECTS_LOCK_KEY):
            existing = await self.require_project(project_id)

            title = cleaned.get("title")
            if title and title.casefold() != existing.title.casefold():
                await self._check_title_free(title, exclude_id=project_id)

            new_status = cleaned.pop("status", existing.status)
            if new_status != existing.status:
                return await self._relocate(project_id, new_status, changes=cleaned)

            cleaned["updated_at"] = self._now()
            await self._write(project_id, cleaned)

        return replace(existing, **cleaned)

    async def move_project(
        self, project_id: str, to_column: str, to_index: Optional[int] = None
    ) -> Project:
        """
        Move a project to another column of the project board.

        Args:
            project_id: ID of project to move
            to_column: Board column (ideas, in-progress, completed) or a
                project status value
            to_index: Position in the destination bucket (default: end)

        Returns:
            Updated Project with new status and order

        Raises:
            UnknownColumnError: If to_column maps to no project status
            ProjectNotFoundError: If project_id doesn't exist
        """
        if not project_id:
            raise ValidationError("Project ID is required", field="id")
        status = project_status_for_column(to_column)

        async with self.locks.hold(PROJECTS_LOCK_KEY):
            project = await self._relocate(project_id, status, to_index)

        self.logger.debug("Moved project %s to '%s'", project_id, status.value)
        return project

    async def delete_project(self, project_id: str) -> None:
        """
        Delete project permanently.

        Raises:
            ProjectNotFoundError: If project_id doesn't exist

        Notes:
            - The project's tasks are deleted with it
            - The rest of its status bucket is reindexed
        """
        async with self.locks.hold(PROJECTS_LOCK_KEY):
            existing = await self.require_project(project_id)
            await _call_repository(
                "delete project", self.repository.delete_project, project_id
            )

            remaining = await self.get_projects_by_status(existing.status)
            now = self._now()
            for position, project in enumerate(remaining):
                if project.order != position:
                    await self._write(project.id, {"order": position, "updated_at": now})

        self.logger.debug("Deleted project %s", project_id)

    # --- Status shortcuts ---

    async def move_project_to_status(self, project_id: str, status) -> Project:
        return await self.move_project(project_id, _coerce_project_status(status).value)

    async def start_project(self, project_id: str) -> Project:
        return await self.move_project_to_status(project_id, ProjectStatus.IN_PROGRESS)

    async def complete_project(self, project_id: str) -> Project:
        return await self.move_project_to_status(project_id, ProjectStatus.COMPLETED)

    async def pause_project(self, project_id: str) -> Project:
        return await self.move_project_to_status(project_id, ProjectStatus.ON_HOLD)

    async def archive_project(self, project_id: str) -> Project:
        """Archiving parks a project as completed."""
        return await self.move_project_to_status(project_id, ProjectStatus.COMPLETED)

    async def unarchive_project(self, project_id: str) -> Project:
        return await self.move_project_to_status(project_id, ProjectStatus.PLANNING)

    # --- Technologies ---

    async def add_technology(self, project_id: str, technology: str) -> Project:
        """Append a technology label (no-op if already present, case-insensitive)."""
        technology = (technology or "").strip()
        if not technology:
            raise ValidationError("Technology cannot be empty", field="technologies")

        async with self.locks.hold(PROJECTS_LOCK_KEY):
            project = await self.require_project(project_id)
            technologies = _clean_labels(project.technologies + [technology])
            changes = {"technologies": technologies, "updated_at": self._now()}
            await self._write(project_id, changes)

        return replace(project, **changes)

    async def remove_technology(self, project_id: str, technology: str) -> Project:
        """Remove a technology label (case-insensitive)."""
        wanted = (technology or "").strip().casefold()

        async with self.locks.hold(PROJECTS_LOCK_KEY):
            project = await self.require_project(project_id)
            technologies = [t for t in project.technologies if t.casefold() != wanted]
            changes = {"technologies": technologies, "updated_at": self._now()}
            await self._write(project_id, changes)

        return replace(project, **changes)
