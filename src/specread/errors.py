"""Error hierarchy raised by :func:`specread.read`.

Every failure of a read is a :class:`ReadError`. Problems found while parsing
are collected for the whole file before anything is raised; the error that is
finally raised is the first one in file order and carries every collected
problem in :attr:`ReadError.diagnostics`.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "ReadError",
    "SourceReadError",
    "MalformedDocumentError",
    "MalformedHeaderError",
    "MalformedDataRowError",
    "NonMonotonicWavelengthError",
    "DuplicateWavelengthError",
    "RangeMismatchError",
    "EmptyDatasetError",
]


def _at(line: int | None) -> str:
    return f"line {line}: " if line is not None else ""


class ReadError(Exception):
    """Base class for every failure of a spectral read."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostics: tuple[ReadError, ...] = (self,)

    def with_diagnostics(self, errors: Sequence[ReadError]) -> ReadError:
        """Attach the full list of problems collected during the read."""
        self.diagnostics = tuple(errors) if errors else (self,)
        return self

    def summary(self) -> str:
        """Return a multi-line report of every collected problem."""
        count = len(self.diagnostics)
        noun = "problem" if count == 1 else "problems"
        lines = [f"{count} {noun} found:"]
        lines.extend(f"  - {err.message}" for err in self.diagnostics)
        return "\n".join(lines)

    def __str__(self) -> str:
        extra = len(self.diagnostics) - 1
        if extra > 0:
            return f"{self.message} (and {extra} more)"
        return self.message


class SourceReadError(ReadError, OSError):
    """The source could not be opened or read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"cannot read {source}: {reason}")
        self.source = source
        self.reason = reason


class MalformedDocumentError(ReadError):
    """The overall document structure is unusable (e.g. invalid JSON)."""


class MalformedHeaderError(ReadError):
    """A well-known header key carries a value of the wrong type."""

    def __init__(self, key: str, value: str, reason: str, line: int | None = None) -> None:
        super().__init__(f"{_at(line)}invalid value {value!r} for header {key!r}: {reason}")
        self.key = key
        self.value = value
        self.reason = reason
        self.line = line


class MalformedDataRowError(ReadError):
    """A data row has the wrong column count or a non-numeric/non-finite token."""

    def __init__(self, line: int | None, text: str, reason: str) -> None:
        super().__init__(f"{_at(line)}malformed data row {text!r}: {reason}")
        self.line = line
        self.text = text
        self.reason = reason


class NonMonotonicWavelengthError(ReadError):
    """Wavelengths of a series decrease at :attr:`index`."""

    def __init__(
        self, series: str, index: int, wavelength: float, line: int | None = None
    ) -> None:
        super().__init__(
            f"{_at(line)}series {series!r}: wavelength {wavelength:g} at index {index} "
            "is lower than the previous sample"
        )
        self.series = series
        self.index = index
        self.wavelength = wavelength
        self.line = line


class DuplicateWavelengthError(ReadError):
    """A wavelength appears more than once in a series."""

    def __init__(
        self, series: str, wavelength: float, index: int, line: int | None = None
    ) -> None:
        super().__init__(
            f"{_at(line)}series {series!r}: wavelength {wavelength:g} is repeated at index {index}"
        )
        self.series = series
        self.wavelength = wavelength
        self.index = index
        self.line = line


class RangeMismatchError(ReadError):
    """A sample lies outside the wavelength range declared in the header."""

    def __init__(
        self,
        series: str,
        wavelength: float,
        declared_range: tuple[float, float],
        line: int | None = None,
    ) -> None:
        lo, hi = declared_range
        super().__init__(
            f"{_at(line)}series {series!r}: wavelength {wavelength:g} lies outside "
            f"the declared range [{lo:g}, {hi:g}]"
        )
        self.series = series
        self.wavelength = wavelength
        self.declared_range = declared_range
        self.line = line


class EmptyDatasetError(ReadError):
    """The source holds no data rows at all."""
