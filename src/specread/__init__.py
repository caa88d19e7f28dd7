"""specread: validated loading of sampled spectral data.

Reads AMPAS-style spectral text (plus the AMPAS JSON layout and Argyll CGATS
files) into immutable :class:`SpectralDataset` objects. A read either yields a
fully validated dataset or raises a :class:`ReadError` whose ``diagnostics``
list every problem found in the file.
"""

from __future__ import annotations

from .config import ReaderConfig
from .errors import (
    DuplicateWavelengthError,
    EmptyDatasetError,
    MalformedDataRowError,
    MalformedDocumentError,
    MalformedHeaderError,
    NonMonotonicWavelengthError,
    RangeMismatchError,
    ReadError,
    SourceReadError,
)
from .io import available_extensions, read
from .types import (
    DEFAULT_SERIES_NAME,
    LineKind,
    Metadata,
    RawLine,
    SampleSeries,
    SpectralDataset,
)
from .version import __version__

__all__ = [
    "__version__",
    "DEFAULT_SERIES_NAME",
    "DuplicateWavelengthError",
    "EmptyDatasetError",
    "LineKind",
    "MalformedDataRowError",
    "MalformedDocumentError",
    "MalformedHeaderError",
    "Metadata",
    "NonMonotonicWavelengthError",
    "RangeMismatchError",
    "RawLine",
    "ReadError",
    "ReaderConfig",
    "SampleSeries",
    "SourceReadError",
    "SpectralDataset",
    "available_extensions",
    "read",
]
