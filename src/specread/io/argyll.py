"""Reader for Argyll CMS CGATS spectral files (``.sp``, ``.cgats``, ``.ti3``).

A file is a sequence of ``KEYWORD value`` lines followed by a
``BEGIN_DATA_FORMAT``/``END_DATA_FORMAT`` block naming the fields and a
``BEGIN_DATA``/``END_DATA`` block holding one measurement set per row. Spectral
fields are named ``SPEC_<nm>``; without them the wavelength axis is rebuilt
from ``SPECTRAL_START_NM``, ``SPECTRAL_END_NM`` and ``SPECTRAL_BANDS``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace

import numpy as np

from specread.builder import build_dataset, raise_collected
from specread.config import ReaderConfig
from specread.errors import (
    EmptyDatasetError,
    MalformedDocumentError,
    MalformedHeaderError,
)
from specread.io.header import collect_metadata
from specread.io.table import SampleTable, parse_row, unique_names
from specread.types import Metadata, SpectralDataset, split_columns

logger = logging.getLogger(__name__)

__all__ = ["EXTENSIONS", "parse_argyll"]

EXTENSIONS = ("sp", "cgats", "ti3")

_KEYWORD = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s+(.*)$")
_SPECTRAL_FIELD = re.compile(r"^SPEC_(\d+(?:\.\d+)?)$", re.IGNORECASE)
_NAME_FIELDS = ("SAMPLE_ID", "SAMPLE_NAME", "SAMPLE_LOC")
_INT_KEYWORDS = ("SPECTRAL_BANDS", "NUMBER_OF_SETS", "NUMBER_OF_FIELDS")
_BOUND_KEYWORDS = {"SPECTRAL_START_NM": "wavelength_min", "SPECTRAL_END_NM": "wavelength_max"}
_MEAS_TYPE_UNITS = {
    "AMBIENT": "ambient illuminance",
    "REFLECTIVE": "reflectance sensitivity",
}


class _Document:
    def __init__(self) -> None:
        self.identifier: str | None = None
        self.keywords: dict[str, str] = {}
        self.origin: dict[str, int] = {}
        self.fields: list[str] = []
        self.rows: list[tuple[int, str]] = []


def _scan(text: str) -> _Document:
    doc = _Document()
    state = "keywords"
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if state == "format":
            if line.startswith("END_DATA_FORMAT"):
                state = "keywords"
            else:
                doc.fields.extend(line.split())
            continue
        if state == "data":
            if line.startswith("END_DATA"):
                state = "keywords"
            else:
                doc.rows.append((number, line))
            continue
        if line.startswith("BEGIN_DATA_FORMAT"):
            state = "format"
        elif line.startswith("BEGIN_DATA"):
            state = "data"
        elif (match := _KEYWORD.match(line)) is not None:
            key = match.group(1).upper()
            doc.keywords[key] = match.group(2).strip().strip('"')
            doc.origin[key] = number
        elif doc.identifier is None:
            doc.identifier = line
        else:
            logger.debug("Ignoring line %d: %r", number, line)
    return doc


def _metadata(doc: _Document) -> tuple[Metadata, list[MalformedHeaderError]]:
    kw = doc.keywords
    errors: list[MalformedHeaderError] = []
    for key in _INT_KEYWORDS:
        if key in kw:
            try:
                int(kw[key])
            except ValueError:
                errors.append(
                    MalformedHeaderError(key, kw[key], "expected an integer", doc.origin.get(key))
                )

    typed: dict[str, str] = {}
    origin: dict[str, int] = {}
    for source_key, target in _BOUND_KEYWORDS.items():
        if source_key in kw:
            typed[target] = kw[source_key]
            origin[target] = doc.origin[source_key]
    if "MEAS_TYPE" in kw:
        typed["units"] = _MEAS_TYPE_UNITS.get(kw["MEAS_TYPE"].upper(), kw["MEAS_TYPE"])
    if "ORIGINATOR" in kw:
        typed["name"] = kw["ORIGINATOR"]
    if "INSTRUMENT" in kw:
        typed["instrument"] = kw["INSTRUMENT"]

    metadata, bound_errors = collect_metadata(typed, origin)
    # Report against the keyword actually written in the file.
    written = {target: source_key for source_key, target in _BOUND_KEYWORDS.items()}
    errors.extend(
        MalformedHeaderError(written.get(err.key, err.key), err.value, err.reason, err.line)
        for err in bound_errors
    )
    errors.sort(key=lambda err: err.line if err.line is not None else math.inf)

    fields = {key.lower(): value for key, value in kw.items()}
    if doc.identifier is not None:
        fields.setdefault("file_type", doc.identifier)
    return replace(metadata, fields=fields, wavelength_unit="nm"), errors


def _axis(doc: _Document) -> tuple[list[float], list[int]]:
    """Return the wavelength axis and the row columns holding each band."""

    spectral = [
        (float(match.group(1)), column)
        for column, name in enumerate(doc.fields)
        if (match := _SPECTRAL_FIELD.match(name)) is not None
    ]
    if spectral:
        return [wl for wl, _ in spectral], [column for _, column in spectral]

    kw = doc.keywords
    try:
        bands = int(kw["SPECTRAL_BANDS"])
        start = float(kw["SPECTRAL_START_NM"])
        end = float(kw["SPECTRAL_END_NM"])
    except (KeyError, ValueError):
        msg = "no SPEC_<nm> fields and no usable SPECTRAL_BANDS/START_NM/END_NM keywords"
        raise MalformedDocumentError(msg) from None
    if bands <= 0:
        raise MalformedDocumentError("SPECTRAL_BANDS must be positive")
    axis = np.linspace(start, end, bands) if bands > 1 else np.array([start])
    return axis.tolist(), list(range(bands))


def parse_argyll(
    text: str, *, config: ReaderConfig | None = None, source: str | None = None
) -> SpectralDataset:
    """Parse an Argyll CGATS spectral file; each data row becomes one series."""

    config = config or ReaderConfig()
    doc = _scan(text)
    metadata, header_errors = _metadata(doc)

    if not doc.rows:
        raise_collected([*header_errors, EmptyDatasetError(f"no data rows in {source or 'input'}")])

    wavelengths, columns = _axis(doc)
    width = len(doc.fields) if doc.fields else len(columns)
    name_column = next(
        (doc.fields.index(field) for field in _NAME_FIELDS if field in doc.fields), None
    )

    labels: list[str] = []
    sets: list[list[float]] = []
    errors: list[tuple[int, str, str]] = []
    for position, (number, line) in enumerate(doc.rows, start=1):
        tokens = split_columns(line)
        if len(tokens) != width:
            errors.append((number, line, f"expected {width} fields, found {len(tokens)}"))
            continue
        values, reason = parse_row([tokens[column] for column in columns], len(columns))
        if values is None:
            errors.append((number, line, reason))
            continue
        label = f"Set {position}"
        if name_column is not None:
            label = tokens[name_column].strip('"')
        labels.append(label)
        sets.append(values)

    declared_sets = doc.keywords.get("NUMBER_OF_SETS")
    if declared_sets is not None and declared_sets.isdigit() and int(declared_sets) != len(doc.rows):
        logger.warning(
            "NUMBER_OF_SETS declares %s sets but %d data rows were found",
            declared_sets,
            len(doc.rows),
        )

    table = SampleTable(
        series_names=unique_names(labels),
        wavelengths=list(wavelengths),
        rows=sets,
        line_numbers=[None] * len(wavelengths),
    )
    for number, line, reason in errors:
        table.reject(number, line, reason)

    return build_dataset(
        metadata,
        table,
        config=config,
        header_errors=header_errors,
        source=source,
        format="argyll",
    )
