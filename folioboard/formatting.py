"""
FILE: folioboard/formatting.py
PURPOSE: Shared formatting utilities for CLI output
EXPORTS:
  - BoardFormatter: Board (columns of tasks) display and serialization
  - ProjectFormatter: Project list display and serialization
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - folioboard.core.models (Task, Project)
NOTES:
  - Centralized formatting logic for consistency across commands
  - JSON output uses the models' to_dict() so field names match storage
"""

import json
from itertools import zip_longest
from typing import Dict, List

from rich.markup import escape
from rich.table import Table

from .core.models import Task, Project


STATUS_STYLES = {
    "todo": "dim",
    "in-progress": "blue",
    "done": "green",
    "idea": "dim",
    "planning": "cyan",
    "completed": "green",
    "on-hold": "yellow",
}


def styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


class BoardFormatter:
    """Board display formatting."""

    @staticmethod
    def create_table(columns: Dict[str, List[Task]], title: str = "Board") -> Table:
        """
        Create a Rich table with one table column per board column.

        Each cell shows "<order>. <title>" followed by a short id.
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for column_id, tasks in columns.items():
            table.add_column(f"{column_id} ({len(tasks)})", style="white")

        for row in zip_longest(*columns.values()):
            table.add_row(
                *[
                    f"{task.order}. {escape(task.title)} [dim]{task.id[:8]}[/dim]" if task else ""
                    for task in row
                ]
            )

        return table

    @staticmethod
    def to_json(columns: Dict[str, List[Task]]) -> str:
        """Convert a board to a JSON object of column -> task list."""
        return json.dumps(
            {column_id: [t.to_dict() for t in tasks] for column_id, tasks in columns.items()},
            indent=2,
        )

    @staticmethod
    def to_raw_lines(columns: Dict[str, List[Task]]) -> List[str]:
        """One line per task: column, order, id, title."""
        lines = []
        for column_id, tasks in columns.items():
            for task in tasks:
                lines.append(f"{column_id}\t{task.order}\t{task.id}\t{task.title}")
        return lines


class ProjectFormatter:
    """Project list display formatting."""

    @staticmethod
    def create_table(projects: List[Project], title: str = "Projects") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Status", width=12)
        table.add_column("#", justify="right", width=3)
        table.add_column("Tech", style="magenta")
        table.add_column("Tasks", justify="right", style="dim")

        for project in projects:
            table.add_row(
                project.id[:8],
                escape(project.title),
                styled_status(project.status.value),
                str(project.order),
                escape(", ".join(project.technologies)) or "-",
                str(len(project.tasks)),
            )

        return table

    @staticmethod
    def to_json_array(projects: List[Project]) -> str:
        return json.dumps([p.to_dict() for p in projects], indent=2)

    @staticmethod
    def to_raw_lines(projects: List[Project]) -> List[str]:
        return [f"{p.id}: [{p.status.value}] {p.title}" for p in projects]
