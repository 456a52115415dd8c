"""
FILE: folioboard/logging_setup.py
PURPOSE: Route folioboard log records to stderr through rich
EXPORTS:
  - configure_logging(level) -> logging.Logger
DEPENDENCIES:
  - logging (stdlib)
  - rich (RichHandler)
NOTES:
  - Library modules only call logging.getLogger(__name__)
  - Only entry points (the CLI) configure handlers
"""

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "folioboard"


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach a RichHandler on stderr to the folioboard logger.

    Safe to call repeatedly: the previous handler is replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
