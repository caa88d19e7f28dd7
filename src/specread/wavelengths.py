"""Utilities for wavelength axes: unit handling, ordering checks and spacing.

Samples are kept in the unit the file declares; :func:`to_nm` is used only when
a caller explicitly asks for nanometres.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

_NM_UNITS: set[str] = {"nm", "nanometer", "nanometers", "nanometre", "nanometres"}
_MICRON_UNITS: set[str] = {
    "um",
    "µm",
    "μm",
    "micron",
    "microns",
    "micrometer",
    "micrometers",
    "micrometre",
    "micrometres",
}
_ANGSTROM_UNITS: set[str] = {"angstrom", "angstroms", "å", "a", "ang"}

_SCALE_TO_NM: dict[str, float] = {"nm": 1.0, "um": 1e3, "angstrom": 0.1}

UNIFORM_STEP_RTOL = 1e-6
"""Relative tolerance on the nominal step for a grid to count as uniform."""

__all__ = [
    "UNIFORM_STEP_RTOL",
    "normalize_unit",
    "is_length_unit",
    "to_nm",
    "first_decrease",
    "first_duplicate",
    "uniform_step",
]


def normalize_unit(unit: str | None) -> str | None:
    """Map a wavelength unit label onto ``"nm"``, ``"um"`` or ``"angstrom"``.

    ``None`` is returned unchanged. Unknown labels raise ``ValueError`` to
    avoid silent guesses.
    """

    if unit is None:
        return None
    token = unit.strip().lower().replace(" ", "")
    if token in _NM_UNITS:
        return "nm"
    if token in _MICRON_UNITS:
        return "um"
    if token in _ANGSTROM_UNITS:
        return "angstrom"
    msg = f"Unsupported wavelength unit: {unit!r}"
    raise ValueError(msg)


def is_length_unit(unit: str | None) -> bool:
    try:
        return normalize_unit(unit) is not None
    except ValueError:
        return False


def to_nm(values: np.ndarray | Iterable[float], from_units: str | None) -> np.ndarray:
    """Convert wavelength values to nanometres (``None`` means already nm)."""

    arr = np.asarray(values, dtype=np.float64)
    unit = normalize_unit(from_units)
    if unit is None:
        return arr.copy()
    return arr * _SCALE_TO_NM[unit]


def first_decrease(wavelengths: np.ndarray) -> int | None:
    """Return the index of the first sample lower than its predecessor."""

    arr = np.asarray(wavelengths, dtype=np.float64)
    if arr.size <= 1:
        return None
    hits = np.flatnonzero(np.diff(arr) < 0)
    if hits.size == 0:
        return None
    return int(hits[0]) + 1


def first_duplicate(wavelengths: np.ndarray) -> int | None:
    """Return the index of the first repeat of an earlier wavelength.

    Repeats need not be adjacent; ``[400, 390, 400]`` reports index ``2``.
    """

    arr = np.asarray(wavelengths, dtype=np.float64)
    if arr.size <= 1:
        return None
    _, first_seen = np.unique(arr, return_index=True)
    repeated = np.ones(arr.size, dtype=bool)
    repeated[first_seen] = False
    hits = np.flatnonzero(repeated)
    if hits.size == 0:
        return None
    return int(hits[0])


def uniform_step(wavelengths: np.ndarray, *, rtol: float = UNIFORM_STEP_RTOL) -> float | None:
    """Return the nominal step when the grid is evenly spaced, else ``None``.

    The nominal step is ``(last - first) / (n - 1)``; every individual step
    must lie within ``rtol * nominal`` of it. Grids with fewer than two samples
    have no step.
    """

    arr = np.asarray(wavelengths, dtype=np.float64)
    if arr.ndim != 1 or arr.size < 2:
        return None
    nominal = float(arr[-1] - arr[0]) / (arr.size - 1)
    if nominal <= 0:
        return None
    diffs = np.diff(arr)
    if np.all(np.abs(diffs - nominal) <= rtol * nominal):
        return nominal
    return None
