"""
FILE: folioboard/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - TaskStatus, ProjectStatus (str enums)
  - COLUMN_IDEAS, COLUMN_IN_PROGRESS, COLUMN_COMPLETED
  - DEFAULT_COLUMNS: Ordered board columns
  - COLUMN_STATUS_MAP: Column -> task status table
  - PROJECT_COLUMN_STATUS_MAP: Column -> project status table
  - DEFAULT_TASK_STATUS, DEFAULT_PROJECT_STATUS
  - PROJECTS_LOCK_KEY
DEPENDENCIES:
  - enum (stdlib)
NOTES:
  - Centralized constants to avoid magic strings
  - Columns are not persisted; they are fixed identifiers
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle of a task, derived from the column it sits in."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class ProjectStatus(str, Enum):
    """Independent lifecycle of a project."""

    IDEA = "idea"
    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"

    @classmethod
    def values(cls):
        return [s.value for s in cls]


# Board columns
COLUMN_IDEAS = "ideas"
COLUMN_IN_PROGRESS = "in-progress"
COLUMN_COMPLETED = "completed"
DEFAULT_COLUMNS = (COLUMN_IDEAS, COLUMN_IN_PROGRESS, COLUMN_COMPLETED)

COLUMN_STATUS_MAP = {
    COLUMN_IDEAS: TaskStatus.TODO,
    COLUMN_IN_PROGRESS: TaskStatus.IN_PROGRESS,
    COLUMN_COMPLETED: TaskStatus.DONE,
}

# Projects can be dropped on a board column or addressed by status directly
PROJECT_COLUMN_STATUS_MAP = {
    COLUMN_IDEAS: ProjectStatus.IDEA,
    COLUMN_IN_PROGRESS: ProjectStatus.IN_PROGRESS,
    COLUMN_COMPLETED: ProjectStatus.COMPLETED,
}

# Default values
DEFAULT_TASK_STATUS = TaskStatus.TODO
DEFAULT_PROJECT_STATUS = ProjectStatus.IDEA

# Lock registry key for the project list (task boards use their project id)
PROJECTS_LOCK_KEY = "__projects__"

# Fields a caller may change through update_task()
TASK_EDITABLE_FIELDS = ("title", "description")

# Fields a caller may change through update_project()
PROJECT_EDITABLE_FIELDS = (
    "title",
    "description",
    "url",
    "status",
    "technologies",
    "tags",
    "start_date",
    "end_date",
)
