"""
FILE: folioboard/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    board,
    mv,
    reorder,
    edit,
    rm,
)
from .projects import (
    project_add,
    project_ls,
    project_show,
    project_edit,
    project_mv,
    project_rm,
)
from .system import (
    version,
)

__all__ = [
    "add",
    "board",
    "mv",
    "reorder",
    "edit",
    "rm",
    "project_add",
    "project_ls",
    "project_show",
    "project_edit",
    "project_mv",
    "project_rm",
    "version",
]
