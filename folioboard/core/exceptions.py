"""
FILE: folioboard/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - FolioboardError (base exception)
  - ValidationError
  - NotFoundError, TaskNotFoundError, ProjectNotFoundError
  - ConflictError
  - IndexOutOfRangeError
  - UnknownColumnError
  - RepositoryError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from FolioboardError for easy catching
  - Exceptions include context (IDs, indices) for helpful error messages
  - http_status lets route handlers map errors without a lookup table
  - Service layer raises these, UI layers catch and display
"""

from typing import Optional


class FolioboardError(Exception):
    """Base exception for all Folioboard errors."""

    http_status = 500


class ValidationError(FolioboardError):
    """A required field is missing, empty or not allowed."""

    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(FolioboardError):
    """Referenced entity doesn't exist."""

    http_status = 404


class TaskNotFoundError(NotFoundError):
    """Task with given ID doesn't exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class ProjectNotFoundError(NotFoundError):
    """Project with given ID doesn't exist."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class ConflictError(FolioboardError):
    """Uniqueness violation, e.g. a duplicate project title."""

    http_status = 409


class IndexOutOfRangeError(FolioboardError):
    """Index doesn't point at an item in the column (stale client view)."""

    http_status = 400

    def __init__(self, column_id: str, index: int, length: int):
        self.column_id = column_id
        self.index = index
        self.length = length
        super().__init__(
            f"Index {index} out of range for column '{column_id}' ({length} item(s))"
        )


class UnknownColumnError(FolioboardError):
    """Column identifier isn't one of the board's columns."""

    http_status = 400

    def __init__(self, column_id: str, known=None):
        self.column_id = column_id
        self.known = tuple(known or ())
        message = f"Unknown column '{column_id}'"
        if self.known:
            message += f". Available columns: {', '.join(self.known)}"
        super().__init__(message)


class RepositoryError(FolioboardError):
    """Failure at the persistence boundary."""

    http_status = 500

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Failed to {operation}: {message}")
