"""Reader for the AMPAS JSON spectral layout.

Expected structure::

    {
      "header": {"manufacturer": "...", "model": "...", ...},
      "spectral_data": {
        "units": "relative",
        "index": {"main": ["R", "G", "B"]},
        "data": {"main": {"380": [0.1, 0.2, 0.3], "385": [...], ...}}
      }
    }
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from specread.builder import build_dataset
from specread.config import ReaderConfig
from specread.errors import MalformedDocumentError
from specread.io.header import collect_metadata, normalize_key
from specread.io.table import SampleTable, unique_names
from specread.types import SpectralDataset

__all__ = ["EXTENSIONS", "parse_ampas_json"]

EXTENSIONS = ("json",)

_SECTION = "main"


class _Object(dict):
    """JSON object that also keeps every ``(key, value)`` pair, repeated keys included."""

    def __init__(self, pairs: list[tuple[str, Any]]) -> None:
        super().__init__(pairs)
        self.pairs = pairs


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _object(parent: Mapping[str, Any], key: str, where: str, *, required: bool) -> _Object:
    value = parent.get(key)
    if value is None and not required:
        return _Object([])
    if not isinstance(value, dict):
        raise MalformedDocumentError(f"{where}{key!r} must be a JSON object")
    return value


def parse_ampas_json(
    text: str, *, config: ReaderConfig | None = None, source: str | None = None
) -> SpectralDataset:
    """Parse an AMPAS JSON document into a validated dataset."""

    config = config or ReaderConfig()
    try:
        doc = json.loads(text, object_pairs_hook=_Object)
    except json.JSONDecodeError as exc:
        msg = f"invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"
        raise MalformedDocumentError(msg) from exc
    if not isinstance(doc, dict):
        raise MalformedDocumentError("top-level JSON value must be an object")

    header = _object(doc, "header", "", required=False)
    spectral = _object(doc, "spectral_data", "", required=True)
    index = _object(spectral, "index", "spectral_data.", required=False)
    data_section = _object(spectral, "data", "spectral_data.", required=True)
    data = _object(data_section, _SECTION, "spectral_data.data.", required=True)

    fields = {normalize_key(str(k)): _stringify(v) for k, v in header.items()}
    if spectral.get("units") is not None:
        fields["units"] = _stringify(spectral["units"])

    metadata, header_errors = collect_metadata(fields)

    labels = index.get(_SECTION)
    if labels is not None and not (
        isinstance(labels, list) and all(isinstance(label, str) for label in labels)
    ):
        raise MalformedDocumentError("spectral_data.index.main must be a list of names")

    if labels:
        width = len(labels)
        names = unique_names(labels)
    else:
        first = next(iter(data.values()), None)
        width = len(first) if isinstance(first, list) and first else 1
        default = config.default_series_name
        names = [default] if width == 1 else [f"{default}_{n}" for n in range(1, width + 1)]

    table = SampleTable(series_names=names)
    for key, row in data.pairs:
        wavelength = _as_number(key)
        if wavelength is None:
            table.reject(None, key, "wavelength key is not a finite number")
            continue
        items = row if isinstance(row, list) else [row]
        if len(items) != width:
            table.reject(None, key, f"expected {width} values, found {len(items)}")
            continue
        values = [_as_number(item) for item in items]
        if None in values:
            bad = items[values.index(None)]
            table.reject(None, key, f"{bad!r} is not a finite number")
            continue
        table.append(wavelength, values, None)

    return build_dataset(
        metadata,
        table,
        config=config,
        header_errors=header_errors,
        source=source,
        format="ampas_json",
    )
