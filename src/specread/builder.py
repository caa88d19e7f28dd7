"""Assembly of validated tables into immutable :class:`SpectralDataset` objects."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from specread.config import ReaderConfig
from specread.errors import EmptyDatasetError, ReadError
from specread.types import Metadata, SampleSeries, SpectralDataset
from specread.validate import validate_table
from specread.wavelengths import UNIFORM_STEP_RTOL, uniform_step

if TYPE_CHECKING:
    from specread.io.table import SampleTable

logger = logging.getLogger(__name__)

__all__ = ["assemble_dataset", "build_dataset", "raise_collected"]


def raise_collected(errors: Iterable[ReadError]) -> None:
    """Raise the first of ``errors`` carrying all of them, if there are any."""

    collected = list(errors)
    if collected:
        raise collected[0].with_diagnostics(collected)


def assemble_dataset(
    metadata: Metadata,
    series: Mapping[str, SampleSeries],
    *,
    rtol: float = UNIFORM_STEP_RTOL,
    source: str | None = None,
    format: str = "ampas",
) -> SpectralDataset:
    """Compute summary statistics in one pass and freeze the dataset."""

    if not series or any(len(s) == 0 for s in series.values()):
        raise ValueError("A dataset needs at least one non-empty series")

    wl_min = wl_max = val_min = val_max = None
    steps: list[float | None] = []
    for s in series.values():
        first, last = float(s.wavelengths[0]), float(s.wavelengths[-1])
        low, high = float(s.values.min()), float(s.values.max())
        wl_min = first if wl_min is None else min(wl_min, first)
        wl_max = last if wl_max is None else max(wl_max, last)
        val_min = low if val_min is None else min(val_min, low)
        val_max = high if val_max is None else max(val_max, high)
        steps.append(uniform_step(s.wavelengths, rtol=rtol))

    step = steps[0]
    uniform = step is not None and all(
        other is not None and math.isclose(other, step, rel_tol=rtol) for other in steps
    )

    return SpectralDataset(
        metadata=metadata,
        series=series,
        wavelength_min=wl_min,
        wavelength_max=wl_max,
        value_min=val_min,
        value_max=val_max,
        uniform=uniform,
        step=step if uniform else None,
        source=source,
        format=format,
    )


def build_dataset(
    metadata: Metadata,
    table: SampleTable,
    *,
    config: ReaderConfig | None = None,
    header_errors: Iterable[ReadError] = (),
    source: str | None = None,
    format: str = "ampas",
) -> SpectralDataset:
    """Validate ``table`` and build the dataset, or raise every collected problem.

    Problems are reported in file order: header errors, rejected rows, then
    validation failures. Nothing is returned unless all of them are absent.
    """

    config = config or ReaderConfig()
    errors: list[ReadError] = list(header_errors)
    errors.extend(table.errors)
    if table.attempted == 0:
        errors.append(EmptyDatasetError(f"no data rows found in {source or 'input'}"))
    else:
        errors.extend(validate_table(table, metadata, range_policy=config.range_policy))
    raise_collected(errors)

    series: dict[str, SampleSeries] = {}
    for name in table.series_names:
        wavelengths, values = table.arrays(name)
        series[name] = SampleSeries(name=name, wavelengths=wavelengths, values=values)

    dataset = assemble_dataset(
        metadata, series, rtol=config.uniform_step_rtol, source=source, format=format
    )
    logger.info(
        "Read %s: %d series, %d samples each",
        source or "<stream>",
        len(series),
        table.row_count,
    )
    return dataset
