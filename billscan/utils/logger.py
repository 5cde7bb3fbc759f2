"""Logging setup shared by the parser, extractors and CLI.

The library itself only creates named loggers; handlers are attached by
the application (or the CLI) through :func:`setup_logging`.
"""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    force: bool = False,
) -> None:
    """Attach a formatted stream handler to the root logger.

    Calling this more than once is a no-op unless ``force`` is set, so
    libraries embedding the parser keep their own handlers.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
        stream: Destination stream, ``sys.stdout`` when omitted. The CLI
            passes ``sys.stderr`` so JSON output stays clean.
        force: Replace any handlers already installed on the root logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    if root.handlers and not force:
        return

    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a ``billscan`` module.

    Args:
        name: Logger name, normally the caller's ``__name__``.
    """
    return logging.getLogger(name)
