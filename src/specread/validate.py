"""Post-parse validation of sample tables against the series invariants."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

import numpy as np

from specread.errors import (
    DuplicateWavelengthError,
    NonMonotonicWavelengthError,
    RangeMismatchError,
    ReadError,
)
from specread.types import Metadata
from specread.wavelengths import first_decrease, first_duplicate

if TYPE_CHECKING:
    from specread.io.table import SampleTable

logger = logging.getLogger(__name__)

__all__ = ["validate_table", "validate_series"]


def validate_series(
    name: str,
    wavelengths: np.ndarray,
    line_numbers: list[int | None],
    *,
    declared_range: tuple[float, float] | None = None,
    range_policy: Literal["error", "warn"] = "error",
) -> list[ReadError]:
    """Check one series and return every violation found (first of each kind).

    Samples are never reordered, dropped or clamped: a decrease, a repeat or a
    sample outside the declared range is reported against the original row.
    """

    errors: list[ReadError] = []
    wl = np.asarray(wavelengths, dtype=np.float64)

    def line_of(index: int) -> int | None:
        return line_numbers[index] if index < len(line_numbers) else None

    index = first_decrease(wl)
    if index is not None:
        errors.append(
            NonMonotonicWavelengthError(name, index, float(wl[index]), line_of(index))
        )

    index = first_duplicate(wl)
    if index is not None:
        errors.append(DuplicateWavelengthError(name, float(wl[index]), index, line_of(index)))

    if declared_range is not None and wl.size:
        lo, hi = declared_range
        outside = np.flatnonzero((wl < lo) | (wl > hi))
        if outside.size:
            index = int(outside[0])
            mismatch = RangeMismatchError(name, float(wl[index]), declared_range, line_of(index))
            if range_policy == "warn":
                logger.warning("%s", mismatch.message)
            else:
                errors.append(mismatch)

    return errors


def validate_table(
    table: SampleTable,
    metadata: Metadata,
    *,
    range_policy: Literal["error", "warn"] = "error",
) -> list[ReadError]:
    """Validate every series of ``table`` against ``metadata``."""

    errors: list[ReadError] = []
    declared = metadata.declared_range
    for name in table.series_names:
        wavelengths, _ = table.arrays(name)
        errors.extend(
            validate_series(
                name,
                wavelengths,
                table.line_numbers,
                declared_range=declared,
                range_policy=range_policy,
            )
        )
    return errors
