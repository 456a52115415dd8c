"""
FILE: folioboard/config.py
PURPOSE: Runtime settings for the board
EXPORTS:
  - Settings (dataclass)
DEPENDENCIES:
  - os, pathlib (stdlib)
  - folioboard.core.constants (DEFAULT_COLUMNS)
  - folioboard.core.sqlite_repository (DB_PATH)
NOTES:
  - FOLIOBOARD_COLUMNS     comma-separated board columns
  - FOLIOBOARD_DB and FOLIOBOARD_LOG_LEVEL are read by the CLI options
    (typer envvar) and passed to load()
  - Invalid values fall back to defaults
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .core import sqlite_repository
from .core.constants import DEFAULT_COLUMNS

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_level(value: Optional[str]) -> str:
    level = (value or "").strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


def _parse_columns(value: Optional[str]) -> Tuple[str, ...]:
    columns = tuple(c.strip() for c in (value or "").split(",") if c.strip())
    # dict.fromkeys keeps first occurrence order
    return tuple(dict.fromkeys(columns)) or DEFAULT_COLUMNS


@dataclass
class Settings:
    """Runtime configuration for the board."""

    db_path: Optional[Path] = None
    log_level: str = DEFAULT_LOG_LEVEL
    columns: Tuple[str, ...] = field(default=DEFAULT_COLUMNS)

    def __post_init__(self):
        if self.db_path is None:
            self.db_path = sqlite_repository.DB_PATH
        self.db_path = Path(self.db_path).expanduser()

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def load(
        cls,
        db_path: Optional[Path] = None,
        log_level: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings from the CLI values plus the column list in the environment."""
        environ = os.environ if environ is None else environ
        return cls(
            db_path=db_path,
            log_level=parse_level(log_level),
            columns=_parse_columns(environ.get("FOLIOBOARD_COLUMNS")),
        )
