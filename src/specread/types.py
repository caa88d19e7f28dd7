from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

import numpy as np
from numpy.typing import NDArray

from specread.wavelengths import UNIFORM_STEP_RTOL, first_decrease, first_duplicate, to_nm, uniform_step

__all__ = [
    "DEFAULT_SERIES_NAME",
    "LineKind",
    "RawLine",
    "Metadata",
    "SampleSeries",
    "SpectralDataset",
]

DEFAULT_SERIES_NAME = "main"
"""Name of the single series of a file that has no column definition."""

_COMMA_SPLIT = re.compile(r"\s*,\s*")
_WS_SPLIT = re.compile(r"\s+")


def split_columns(text: str) -> list[str]:
    """Split a table line on commas when present, on whitespace otherwise."""
    stripped = text.strip()
    if not stripped:
        return []
    if "," in stripped:
        return [part for part in _COMMA_SPLIT.split(stripped) if part]
    return _WS_SPLIT.split(stripped)


class LineKind(str, Enum):
    HEADER = "header"
    COLUMN_DEF = "column_def"
    DATA = "data"
    COMMENT = "comment"
    BLANK = "blank"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class RawLine:
    """One classified input line; ``text`` has comments and trailing space removed."""

    number: int
    text: str
    kind: LineKind

    def tokens(self) -> list[str]:
        return split_columns(self.text)


@dataclass(frozen=True)
class Metadata:
    """Header metadata: opaque string fields plus typed well-known values.

    ``fields`` holds every header entry under its normalised (trimmed,
    lower-case) key. The typed attributes are derived from the well-known keys
    and are ``None`` when the file does not declare them.
    """

    fields: Mapping[str, str] = field(default_factory=dict)
    units: str | None = None
    wavelength_unit: str | None = None
    wavelength_min: float | None = None
    wavelength_max: float | None = None
    sample_id: str | None = None
    instrument: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __getitem__(self, key: str) -> str:
        return self.fields[key.strip().lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.strip().lower() in self.fields

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.fields.get(key.strip().lower(), default)

    @property
    def declared_range(self) -> tuple[float, float] | None:
        """Declared ``(min, max)`` wavelength bounds; a missing side is unbounded."""

        if self.wavelength_min is None and self.wavelength_max is None:
            return None
        lo = self.wavelength_min if self.wavelength_min is not None else -np.inf
        hi = self.wavelength_max if self.wavelength_max is not None else np.inf
        return float(lo), float(hi)


def _frozen_array(values: Sequence[float] | NDArray[np.floating]) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class SampleSeries:
    """An ordered, validated run of ``(wavelength, value)`` samples.

    Both arrays are read-only ``float64``. Construction enforces the series
    invariants: equal lengths, finite values, strictly increasing wavelengths.
    File-level problems are reported by the reader before a series is built,
    so a ``ValueError`` here signals misuse rather than a bad file.
    """

    name: str
    wavelengths: NDArray[np.float64]
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        wl = _frozen_array(self.wavelengths)
        vals = _frozen_array(self.values)
        if wl.ndim != 1 or vals.ndim != 1:
            raise ValueError("Series wavelengths and values must be 1-D")
        if wl.shape != vals.shape:
            raise ValueError("Series wavelengths and values must have the same length")
        if not (np.all(np.isfinite(wl)) and np.all(np.isfinite(vals))):
            raise ValueError("Series samples must be finite")
        if first_decrease(wl) is not None or first_duplicate(wl) is not None:
            raise ValueError("Series wavelengths must be strictly increasing")
        object.__setattr__(self, "wavelengths", wl)
        object.__setattr__(self, "values", vals)

    def __len__(self) -> int:
        return int(self.wavelengths.shape[0])

    def __iter__(self) -> Iterator[tuple[float, float]]:
        return iter(self.pairs())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampleSeries):
            return NotImplemented
        return (
            self.name == other.name
            and np.array_equal(self.wavelengths, other.wavelengths)
            and np.array_equal(self.values, other.values)
        )

    __hash__ = None  # type: ignore[assignment]

    def pairs(self) -> list[tuple[float, float]]:
        return list(zip(self.wavelengths.tolist(), self.values.tolist()))

    @property
    def step(self) -> float | None:
        return uniform_step(self.wavelengths)

    @property
    def is_uniform(self) -> bool:
        return self.step is not None

    def interpolate(
        self, targets: Sequence[float] | NDArray[np.floating], *, extrapolate: bool = False
    ) -> NDArray[np.float64]:
        """Linearly interpolate the series at ``targets``.

        Targets outside the sampled range are ``NaN`` unless ``extrapolate`` is
        true, in which case the endpoint values are held.
        """

        x = np.asarray(targets, dtype=np.float64)
        fill = None if extrapolate else np.nan
        return np.interp(x, self.wavelengths, self.values, left=fill, right=fill)


@dataclass(frozen=True)
class SpectralDataset:
    """Canonical result of a read: metadata, named series and summary statistics.

    Instances are never mutated; :meth:`resample` and :meth:`to_nm` return new
    datasets.
    """

    metadata: Metadata
    series: Mapping[str, SampleSeries]
    wavelength_min: float
    wavelength_max: float
    value_min: float
    value_max: float
    uniform: bool
    step: float | None
    source: str | None = None
    format: str = "ampas"

    def __post_init__(self) -> None:
        object.__setattr__(self, "series", MappingProxyType(dict(self.series)))

    @property
    def series_names(self) -> tuple[str, ...]:
        return tuple(self.series)

    def __getitem__(self, name: str) -> SampleSeries:
        return self.series[name]

    def __iter__(self) -> Iterator[SampleSeries]:
        return iter(self.series.values())

    def __len__(self) -> int:
        return len(self.series)

    def resample(
        self,
        targets: Sequence[float] | NDArray[np.floating],
        *,
        extrapolate: bool = False,
        rtol: float = UNIFORM_STEP_RTOL,
    ) -> SpectralDataset:
        """Return a new dataset with every series interpolated onto ``targets``."""

        from specread.builder import assemble_dataset

        grid = np.asarray(targets, dtype=np.float64)
        resampled: dict[str, SampleSeries] = {}
        for name, series in self.series.items():
            values = series.interpolate(grid, extrapolate=extrapolate)
            if not np.all(np.isfinite(values)):
                msg = f"Resampling targets fall outside the sampled range of series {name!r}"
                raise ValueError(msg)
            resampled[name] = SampleSeries(name=name, wavelengths=grid, values=values)
        return assemble_dataset(
            self.metadata, resampled, rtol=rtol, source=self.source, format=self.format
        )

    def to_nm(self, *, rtol: float = UNIFORM_STEP_RTOL) -> SpectralDataset:
        """Return the dataset with wavelengths expressed in nanometres."""

        from specread.builder import assemble_dataset

        unit = self.metadata.wavelength_unit
        if unit is None or unit == "nm":
            return self
        converted = {
            name: SampleSeries(name=name, wavelengths=to_nm(s.wavelengths, unit), values=s.values)
            for name, s in self.series.items()
        }
        bounds: dict[str, Any] = {}
        for attr in ("wavelength_min", "wavelength_max"):
            value = getattr(self.metadata, attr)
            bounds[attr] = float(to_nm([value], unit)[0]) if value is not None else None
        metadata = replace(self.metadata, wavelength_unit="nm", **bounds)
        return assemble_dataset(
            metadata, converted, rtol=rtol, source=self.source, format=self.format
        )
