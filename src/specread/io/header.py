"""Header metadata parsing."""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping

from specread.errors import MalformedHeaderError
from specread.io.tokenizer import split_header_line
from specread.types import LineKind, Metadata, RawLine
from specread.wavelengths import is_length_unit, normalize_unit

__all__ = [
    "collect_header",
    "collect_metadata",
    "metadata_from_fields",
    "normalize_key",
    "parse_header",
]

_UNITS_KEYS = ("units", "unit")
_WAVELENGTH_UNIT_KEYS = ("wavelength_units", "wavelength_unit")
_MIN_KEYS = ("wavelength_min", "wavelength_start", "start_nm", "min_wavelength")
_MAX_KEYS = ("wavelength_max", "wavelength_end", "end_nm", "max_wavelength")
_RANGE_KEYS = ("wavelength_range", "range")
_SAMPLE_KEYS = ("sample", "sample_id", "sample_name", "name", "id")
_INSTRUMENT_KEYS = ("instrument", "device")

_NUMBER = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
_RANGE = re.compile(rf"^\s*({_NUMBER})\s*(?:-|–|to|,|\.\.|:)\s*({_NUMBER})\s*$", re.IGNORECASE)


def normalize_key(key: str) -> str:
    return key.strip().lower()


def _lookup_key(key: str) -> str:
    return re.sub(r"[\s\-]+", "_", key)


def _header_fields(lines: Iterable[RawLine]) -> tuple[dict[str, str], dict[str, int]]:
    fields: dict[str, str] = {}
    origin: dict[str, int] = {}
    for line in lines:
        if line.kind is not LineKind.HEADER:
            continue
        parts = split_header_line(line.text)
        if parts is None:
            continue
        key = normalize_key(parts[0])
        fields[key] = parts[1].strip()
        origin[key] = line.number
    return fields, origin


def parse_header(lines: Iterable[RawLine]) -> Metadata:
    """Build :class:`Metadata` from header-candidate lines.

    Later declarations of a key overwrite earlier ones. Only the final value
    of a well-known key is type-checked, so a corrected re-declaration of a bad
    value is accepted.
    """

    return metadata_from_fields(*_header_fields(lines))


def collect_header(lines: Iterable[RawLine]) -> tuple[Metadata, list[MalformedHeaderError]]:
    """Like :func:`parse_header`, but return every bad value instead of raising."""

    return collect_metadata(*_header_fields(lines))


def metadata_from_fields(
    fields: Mapping[str, str], origin: Mapping[str, int] | None = None
) -> Metadata:
    """Derive the typed metadata values, raising on the first bad value in file order."""

    metadata, errors = collect_metadata(fields, origin)
    if errors:
        raise errors[0].with_diagnostics(errors)
    return metadata


def collect_metadata(
    fields: Mapping[str, str], origin: Mapping[str, int] | None = None
) -> tuple[Metadata, list[MalformedHeaderError]]:
    """Derive the typed metadata values from a normalised field mapping.

    A well-known key with a bad value is reported and left unset; the other
    typed values are still derived.
    """

    origin = origin or {}
    errors: list[MalformedHeaderError] = []
    by_lookup: dict[str, tuple[str, str]] = {}
    for key, value in fields.items():
        by_lookup[_lookup_key(key)] = (key, value)

    def first(keys: tuple[str, ...]) -> tuple[str, str] | None:
        # Latest declaration wins among alias keys as well.
        hits = [by_lookup[k] for k in keys if k in by_lookup]
        if not hits:
            return None
        return max(hits, key=lambda kv: origin.get(kv[0], -1))

    def fail(entry: tuple[str, str], reason: str) -> None:
        errors.append(MalformedHeaderError(entry[0], entry[1], reason, origin.get(entry[0])))

    units_entry = first(_UNITS_KEYS)
    units = units_entry[1] if units_entry else None

    wavelength_unit: str | None = None
    unit_entry = first(_WAVELENGTH_UNIT_KEYS)
    if unit_entry is not None:
        try:
            wavelength_unit = normalize_unit(unit_entry[1])
        except ValueError:
            fail(unit_entry, "unrecognised wavelength unit")
    elif units is not None and is_length_unit(units):
        wavelength_unit = normalize_unit(units)

    lo: float | None = None
    hi: float | None = None
    range_entry = first(_RANGE_KEYS)
    if range_entry is not None:
        match = _RANGE.match(range_entry[1])
        if match is None:
            fail(range_entry, "expected a range such as '380-780'")
        else:
            lo = _parse_bound(range_entry, match.group(1), fail)
            hi = _parse_bound(range_entry, match.group(2), fail)

    min_entry = first(_MIN_KEYS)
    if min_entry is not None:
        lo = _parse_bound(min_entry, min_entry[1], fail)
    max_entry = first(_MAX_KEYS)
    if max_entry is not None:
        hi = _parse_bound(max_entry, max_entry[1], fail)

    if lo is not None and hi is not None and lo > hi:
        entry = max_entry or min_entry or range_entry
        if entry is not None:
            fail(entry, f"lower bound {lo:g} exceeds upper bound {hi:g}")
        lo = hi = None

    sample_entry = first(_SAMPLE_KEYS)
    instrument_entry = first(_INSTRUMENT_KEYS)

    errors.sort(key=lambda err: err.line if err.line is not None else math.inf)
    metadata = Metadata(
        fields=fields,
        units=units,
        wavelength_unit=wavelength_unit,
        wavelength_min=lo,
        wavelength_max=hi,
        sample_id=sample_entry[1] if sample_entry else None,
        instrument=instrument_entry[1] if instrument_entry else None,
    )
    return metadata, errors


def _parse_bound(
    entry: tuple[str, str], text: str, fail: Callable[[tuple[str, str], str], None]
) -> float | None:
    try:
        value = float(text)
    except ValueError:
        fail(entry, "wavelength bound is not a number")
        return None
    if not math.isfinite(value):
        fail(entry, "wavelength bound must be finite")
        return None
    return value
