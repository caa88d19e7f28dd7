"""Numeric sample table parsing with collected row errors."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from specread.errors import MalformedDataRowError
from specread.io.tokenizer import is_number
from specread.types import DEFAULT_SERIES_NAME, LineKind, RawLine

logger = logging.getLogger(__name__)

__all__ = ["SampleTable", "parse_table", "unique_names"]


@dataclass
class SampleTable:
    """Rows accepted so far, grouped by series, plus the rejected-row errors.

    ``rows`` holds one list of values per series in column order; every
    accepted row contributes exactly one value to each of them, so all series
    share ``wavelengths`` and ``line_numbers``.
    """

    series_names: list[str]
    wavelength_label: str | None = None
    wavelengths: list[float] = field(default_factory=list)
    rows: list[list[float]] = field(default_factory=list)
    line_numbers: list[int | None] = field(default_factory=list)
    errors: list[MalformedDataRowError] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.rows:
            self.rows = [[] for _ in self.series_names]

    @property
    def columns(self) -> int:
        return len(self.series_names) + 1

    @property
    def row_count(self) -> int:
        return len(self.wavelengths)

    @property
    def attempted(self) -> int:
        """Accepted plus rejected rows."""
        return self.row_count + len(self.errors)

    def append(self, wavelength: float, values: Sequence[float], line: int | None) -> None:
        self.wavelengths.append(wavelength)
        for column, value in zip(self.rows, values):
            column.append(value)
        self.line_numbers.append(line)

    def reject(self, line: int | None, text: str, reason: str) -> None:
        self.errors.append(MalformedDataRowError(line, text, reason))

    def arrays(self, name: str) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        index = self.series_names.index(name)
        return (
            np.asarray(self.wavelengths, dtype=np.float64),
            np.asarray(self.rows[index], dtype=np.float64),
        )


def unique_names(labels: Iterable[str]) -> list[str]:
    """Make series labels unique by suffixing repeats with ``_2``, ``_3``..."""

    names: list[str] = []
    used: set[str] = set()
    for label in labels:
        name, count = label, 1
        while name in used:
            count += 1
            name = f"{label}_{count}"
        if name != label:
            logger.warning("Repeated series label %r renamed to %r", label, name)
        used.add(name)
        names.append(name)
    return names


def parse_row(tokens: Sequence[str], expected: int) -> tuple[list[float] | None, str]:
    """Parse one row of numeric tokens; returns ``(numbers, "")`` or ``(None, reason)``."""

    if len(tokens) != expected:
        return None, f"expected {expected} columns, found {len(tokens)}"
    numbers: list[float] = []
    for token in tokens:
        try:
            number = float(token)
        except ValueError:
            return None, f"{token!r} is not a number"
        if not math.isfinite(number):
            return None, f"{token!r} is not finite"
        numbers.append(number)
    return numbers, ""


def parse_table(
    lines: Iterable[RawLine], *, default_series: str = DEFAULT_SERIES_NAME
) -> SampleTable:
    """Read the data block of a classified file.

    Only the column definition directly preceding the first data row (blank
    and comment lines in between are allowed) names the columns. Bad rows are
    recorded on the returned table and scanning carries on. An unclassified
    line is a bad row when it holds a number or follows the first data row.
    """

    pending: RawLine | None = None
    table: SampleTable | None = None

    for line in lines:
        if line.kind in (LineKind.BLANK, LineKind.COMMENT):
            continue
        if line.kind is LineKind.COLUMN_DEF:
            _drop_label(pending)
            pending = line
            continue
        if line.kind is LineKind.UNKNOWN and (
            table is not None or any(is_number(token) for token in line.tokens())
        ):
            if table is None:
                table = _start_table(pending, default_series)
                pending = None
            table.reject(line.number, line.text, "not a numeric row")
            continue
        if line.kind is not LineKind.DATA:
            _drop_label(pending)
            pending = None
            if line.kind is LineKind.UNKNOWN:
                logger.debug("Ignoring line %d: %r", line.number, line.text)
            continue

        if table is None:
            table = _start_table(pending, default_series)
            pending = None

        numbers, reason = parse_row(line.tokens(), table.columns)
        if numbers is None:
            table.reject(line.number, line.text, reason)
            continue
        table.append(numbers[0], numbers[1:], line.number)

    if table is None:
        table = _start_table(None, default_series)
    return table


def _drop_label(line: RawLine | None) -> None:
    if line is not None:
        logger.debug("Ignoring label line %d: %r", line.number, line.text)


def _start_table(column_def: RawLine | None, default_series: str) -> SampleTable:
    if column_def is None:
        return SampleTable(series_names=[default_series])
    labels = column_def.tokens()
    if len(labels) < 2:
        logger.debug(
            "Column definition on line %d names no value column; using %r",
            column_def.number,
            default_series,
        )
        return SampleTable(series_names=[default_series])
    return SampleTable(series_names=unique_names(labels[1:]), wavelength_label=labels[0])
