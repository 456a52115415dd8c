"""
FILE: folioboard/core/__init__.py
PURPOSE: Board ordering engine (models, ordering, services, repository port)
"""

from .board import Board
from .locking import BoardLocks
from .repository import BoardRepository
from .service import ProjectService, TaskService
from .sqlite_repository import SQLiteBoardRepository

__all__ = [
    "Board",
    "BoardLocks",
    "BoardRepository",
    "ProjectService",
    "SQLiteBoardRepository",
    "TaskService",
]
