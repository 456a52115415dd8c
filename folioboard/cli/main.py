"""
FILE: folioboard/cli/main.py
PURPOSE: Typer-based CLI for one-shot board commands
EXPORTS:
  - app (Typer application)
  - project_app (project sub-commands)
  - console, error_console (rich consoles)
  - run(coro) - drive an async board operation
  - open_board(project_ref) - Board for the standalone or a project board
  - find_project(projects, ref), find_task(columns, ref)
  - main() (entry point)
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - folioboard.core (Board, SQLiteBoardRepository)
  - folioboard.config (Settings)
  - folioboard.logging_setup (configure_logging)
NOTES:
  - All listing/mutating commands support --json and --raw flags
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - Calls the Board facade only; never touches the repository directly
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console

from .. import __version__
from ..config import Settings
from ..core import Board, SQLiteBoardRepository
from ..core.exceptions import ProjectNotFoundError, TaskNotFoundError, ValidationError
from ..core.models import Project, Task
from ..logging_setup import configure_logging

# Typer app setup
app = typer.Typer(
    name="folioboard",
    help="Portfolio Kanban board: tasks and projects in ordered columns",
    add_completion=False,
)

# Project sub-command group
project_app = typer.Typer(
    name="project",
    help="Project management commands",
)
app.add_typer(project_app, name="project")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Settings resolved by the callback for the current invocation
_state = {"settings": None}


@app.callback()
def configure(
    db: Optional[Path] = typer.Option(None, "--db", envvar="FOLIOBOARD_DB", help="Database file"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", envvar="FOLIOBOARD_LOG_LEVEL", help="DEBUG, INFO, WARNING or ERROR"
    ),
):
    """Resolve settings and logging before any command runs."""
    settings = Settings.load(db_path=db, log_level=log_level)
    _state["settings"] = settings
    configure_logging(settings.log_level_value)


def get_settings() -> Settings:
    if _state["settings"] is None:
        _state["settings"] = Settings.load()
    return _state["settings"]


def run(coro):
    """Run one async board operation to completion."""
    return asyncio.run(coro)


def find_project(projects: List[Project], ref: str) -> Project:
    """
    Resolve a project by id, unique id prefix or title (case-insensitive).

    Raises:
        ProjectNotFoundError: If nothing matches
        ValidationError: If an id prefix matches several projects
    """
    ref = ref.strip()
    for project in projects:
        if project.id == ref:
            return project

    by_title = [p for p in projects if p.title.casefold() == ref.casefold()]
    if by_title:
        return by_title[0]

    by_prefix = [p for p in projects if p.id.startswith(ref)]
    if len(by_prefix) > 1:
        raise ValidationError(f"Project id '{ref}' is ambiguous ({len(by_prefix)} matches)")
    if by_prefix:
        return by_prefix[0]

    raise ProjectNotFoundError(ref)


def find_task(columns, ref: str) -> Tuple[str, int, Task]:
    """
    Resolve a task by id or unique id prefix.

    Returns:
        (column_id, index within column, task)
    """
    ref = ref.strip()
    matches = []
    for column_id, tasks in columns.items():
        for index, task in enumerate(tasks):
            if task.id == ref:
                return column_id, index, task
            if ref and task.id.startswith(ref):
                matches.append((column_id, index, task))

    if len(matches) > 1:
        raise ValidationError(f"Task id '{ref}' is ambiguous ({len(matches)} matches)")
    if not matches:
        raise TaskNotFoundError(ref)
    return matches[0]


async def open_board(project_ref: Optional[str] = None) -> Board:
    """
    Build the Board facade from settings.

    With project_ref, the board is scoped to that project's tasks.
    """
    settings = get_settings()
    board = Board.from_repository(
        SQLiteBoardRepository(settings.db_path),
        columns=settings.columns,
    )
    if project_ref:
        project = find_project(await board.get_projects(), project_ref)
        board = await board.for_project(project.id)
    return board


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (  # noqa: E402
    # System commands
    version,
    # Task commands
    add,
    board,
    mv,
    reorder,
    edit,
    rm,
    # Project commands
    project_add,
    project_ls,
    project_show,
    project_edit,
    project_mv,
    project_rm,
)


def main():
    """Main entry point for CLI."""
    app()
