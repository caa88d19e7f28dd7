from .io import read_source, source_name
from .logging import get_logger

__all__ = [
    "get_logger",
    "read_source",
    "source_name",
]
