"""Reader for AMPAS-style spectral text files."""

from __future__ import annotations

from specread.builder import build_dataset
from specread.config import ReaderConfig
from specread.io.header import collect_header
from specread.io.table import parse_table
from specread.io.tokenizer import Tokenizer
from specread.types import SpectralDataset

__all__ = ["EXTENSIONS", "parse_ampas_text"]

EXTENSIONS = ("txt", "spd", "csv", "tsv", "dat", "ampas")


def parse_ampas_text(
    text: str, *, config: ReaderConfig | None = None, source: str | None = None
) -> SpectralDataset:
    """Parse AMPAS-style text into a validated dataset.

    The classified lines are scanned twice, once for the header and once for
    the sample table, so a malformed row never affects header parsing and a
    bad header value never stops the rows from being checked.
    """

    config = config or ReaderConfig()
    lines = Tokenizer(text, config.comment_markers)
    metadata, header_errors = collect_header(lines)
    table = parse_table(lines, default_series=config.default_series_name)
    return build_dataset(
        metadata,
        table,
        config=config,
        header_errors=header_errors,
        source=source,
        format="ampas",
    )
