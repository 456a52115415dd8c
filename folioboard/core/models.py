"""
FILE: folioboard/core/models.py
PURPOSE: Domain models for tasks (work items) and projects
EXPORTS:
  - Task (dataclass)
  - Project (dataclass)
  - now_iso() -> str
DEPENDENCIES:
  - dataclasses (stdlib)
  - json (stdlib)
  - typing (stdlib)
  - folioboard.core.constants (TaskStatus, ProjectStatus)
NOTES:
  - All models have from_row() for SQLite row conversion
  - All models have to_dict() / to_json() for serialization
  - Optional fields use None as default
  - Timestamps stored as ISO-8601 strings
  - Status fields hold str enums; serialized as their plain value
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Optional
import json

from .constants import TaskStatus, ProjectStatus, DEFAULT_PROJECT_STATUS


def now_iso() -> str:
    """Current local time as an ISO-8601 string."""
    return datetime.now().isoformat()


@dataclass
class Task:
    """A unit of work on a board, positioned by column and order."""

    id: str
    title: str
    column_id: str
    status: TaskStatus = TaskStatus.TODO
    order: int = 0
    description: Optional[str] = None
    project_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.status = TaskStatus(self.status)

    @classmethod
    def from_row(cls, row) -> "Task":
        """Convert SQLite row to Task object."""
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            column_id=row["column_id"],
            status=row["status"],
            order=row["position"],
            project_id=row["project_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class Project:
    """A portfolio project that owns its own task board."""

    id: str
    title: str
    status: ProjectStatus = DEFAULT_PROJECT_STATUS
    description: Optional[str] = None
    url: Optional[str] = None
    technologies: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    order: int = 0
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.status = ProjectStatus(self.status)

    @classmethod
    def from_row(cls, row, tasks: Optional[List[Task]] = None) -> "Project":
        """Convert SQLite row to Project object."""
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            url=row["url"],
            status=row["status"],
            technologies=json.loads(row["technologies"] or "[]"),
            tags=json.loads(row["tags"] or "[]"),
            tasks=list(tasks or []),
            order=row["position"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["tasks"] = [t.to_dict() for t in self.tasks]
        return data

    def to_json(self) -> str:
        """Serialize project to JSON string."""
        return json.dumps(self.to_dict(), indent=2)
