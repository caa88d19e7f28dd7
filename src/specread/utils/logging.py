from __future__ import annotations

import logging

from rich.logging import RichHandler


def get_logger(name: str = "specread", level: int = logging.INFO) -> logging.Logger:
    """Return a Rich-configured logger for applications using the project."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    return logging.getLogger(name)
