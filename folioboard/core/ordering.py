"""
FILE: folioboard/core/ordering.py
PURPOSE: Pure column ordering primitives and column -> status mapping
EXPORTS:
  - Columns (type alias)
  - add_to_column(columns, column_id, item) -> Columns
  - move_between_columns(columns, from_col, to_col, from_index, to_index) -> Columns
  - reindex(items, timestamp) -> list
  - group_by_column(items, known_columns) -> Columns
  - apply_order(items, ordered_ids) -> (list, dropped_ids)
  - status_for_column(column_id, logger) -> TaskStatus
  - project_status_for_column(column) -> ProjectStatus
DEPENDENCIES:
  - dataclasses (replace)
  - logging (stdlib)
  - folioboard.core.constants, folioboard.core.exceptions
NOTES:
  - No I/O, no mutation of arguments: every function returns new lists
  - Works for any dataclass with an `order` field (tasks and projects)
  - Callers recompute contiguous order after a move (see reindex)
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .constants import (
    COLUMN_STATUS_MAP,
    DEFAULT_TASK_STATUS,
    PROJECT_COLUMN_STATUS_MAP,
    ProjectStatus,
    TaskStatus,
)
from .exceptions import IndexOutOfRangeError, UnknownColumnError

T = TypeVar("T")
Columns = Dict[str, List[T]]

logger = logging.getLogger(__name__)


def _copy_columns(columns: Columns) -> Columns:
    return {column_id: list(items) for column_id, items in columns.items()}


def add_to_column(columns: Columns, column_id: str, item: T) -> Columns:
    """
    Append item to the end of a column.

    Args:
        columns: Mapping of column id -> ordered items
        column_id: Target column (must be a key of columns)
        item: Item to append

    Returns:
        New columns mapping; the appended copy has order = previous length

    Raises:
        UnknownColumnError: If column_id is not a key of columns
    """
    if column_id not in columns:
        raise UnknownColumnError(column_id, columns.keys())

    result = _copy_columns(columns)
    placed = replace(item, order=len(result[column_id]))
    result[column_id].append(placed)
    return result


def move_between_columns(
    columns: Columns,
    from_col: str,
    to_col: str,
    from_index: int,
    to_index: int,
) -> Columns:
    """
    Move the item at from_index in from_col to to_index in to_col.

    Args:
        columns: Mapping of column id -> ordered items
        from_col: Source column
        to_col: Destination column (may equal from_col)
        from_index: Position of the item in the source column
        to_index: Insert position, clamped to [0, len(destination)]

    Returns:
        New columns mapping. Order fields are left untouched.

    Raises:
        UnknownColumnError: If either column is not a key of columns
        IndexOutOfRangeError: If from_index doesn't point at an item

    Notes:
        - For a same-column move, to_index addresses the list after removal
        - moving i -> i within one column returns an identical sequence
    """
    for column_id in (from_col, to_col):
        if column_id not in columns:
            raise UnknownColumnError(column_id, columns.keys())

    source_length = len(columns[from_col])
    if from_index < 0 or from_index >= source_length:
        raise IndexOutOfRangeError(from_col, from_index, source_length)

    result = _copy_columns(columns)
    moved = result[from_col].pop(from_index)

    dest = result[to_col]
    to_index = max(0, min(to_index, len(dest)))
    dest.insert(to_index, moved)

    return result


def reindex(items: Iterable[T], timestamp: Optional[str] = None) -> List[T]:
    """
    Rewrite order to 0..N-1 following the sequence of items.

    Only items whose order actually changes get a new updated_at
    (when a timestamp is given and the item has that field).
    """
    reindexed = []
    for position, item in enumerate(items):
        if item.order == position:
            reindexed.append(item)
            continue
        changes = {"order": position}
        if timestamp is not None and hasattr(item, "updated_at"):
            changes["updated_at"] = timestamp
        reindexed.append(replace(item, **changes))
    return reindexed


def group_by_column(
    items: Iterable[T],
    known_columns: Sequence[str],
    column_of: Callable[[T], str] = lambda item: item.column_id,
) -> Columns:
    """
    Bucket items by column, sorted by (order, created_at).

    Every known column is present (possibly empty). Items in columns
    outside known_columns get their own bucket after the known ones.
    """
    grouped: Columns = {column_id: [] for column_id in known_columns}
    for item in items:
        grouped.setdefault(column_of(item), []).append(item)

    for bucket in grouped.values():
        bucket.sort(key=lambda item: (item.order, getattr(item, "created_at", None) or ""))

    return grouped


def apply_order(items: Sequence[T], ordered_ids: Sequence[str]) -> Tuple[List[T], List[str]]:
    """
    Arrange items to follow ordered_ids.

    Returns:
        (arranged items, ids that matched nothing)

    Notes:
        - Unknown ids are dropped and returned for reporting
        - Repeated ids keep their first position
        - Items missing from ordered_ids follow, in their existing order
    """
    by_id = {item.id: item for item in items}
    arranged = []
    seen = set()
    dropped = []

    for item_id in ordered_ids:
        if item_id in seen:
            continue
        if item_id not in by_id:
            dropped.append(item_id)
            continue
        seen.add(item_id)
        arranged.append(by_id[item_id])

    arranged.extend(item for item in items if item.id not in seen)
    return arranged, dropped


def status_for_column(
    column_id: str,
    log: Optional[logging.Logger] = None,
    table: Optional[Dict[str, TaskStatus]] = None,
) -> TaskStatus:
    """
    Map a column id to the task status it implies.

    Total over all strings: unrecognized columns fall back to todo and a
    warning is logged on the given logger.
    """
    table = COLUMN_STATUS_MAP if table is None else table
    status = table.get(column_id)
    if status is None:
        (log or logger).warning(
            "No status mapping for column '%s', falling back to '%s'",
            column_id,
            DEFAULT_TASK_STATUS.value,
        )
        return DEFAULT_TASK_STATUS
    return status


def project_status_for_column(column: str) -> ProjectStatus:
    """
    Resolve a drop target to a project status.

    Accepts a board column id (ideas, in-progress, completed) or any
    project status value.

    Raises:
        UnknownColumnError: If column is neither
    """
    if column in PROJECT_COLUMN_STATUS_MAP:
        return PROJECT_COLUMN_STATUS_MAP[column]
    try:
        return ProjectStatus(column)
    except ValueError:
        known = list(PROJECT_COLUMN_STATUS_MAP) + [
            s for s in ProjectStatus.values() if s not in PROJECT_COLUMN_STATUS_MAP
        ]
        raise UnknownColumnError(column, known) from None
