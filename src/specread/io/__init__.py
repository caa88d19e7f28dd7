"""Reading spectral datasets from files and streams.

:func:`read` is the single entry point. The reader is picked from an explicit
``format``, else from the file suffix, else by sniffing the content.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from specread.config import ReaderConfig
from specread.types import SpectralDataset
from specread.utils.io import Source, read_source, source_name

from . import ampas, ampas_json, argyll
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)

__all__ = ["ReaderSpec", "Tokenizer", "available_extensions", "read", "reader_for"]


@dataclass(frozen=True, slots=True)
class ReaderSpec:
    name: str
    extensions: tuple[str, ...]
    parse: Callable[..., SpectralDataset]
    sniff: Callable[[str], bool]


def _looks_like_json(text: str) -> bool:
    return text.lstrip().startswith("{")


def _looks_like_cgats(text: str) -> bool:
    head = text.lstrip()[:4096]
    return "BEGIN_DATA" in head and any(
        marker in head for marker in ("SPECTRAL_BANDS", "BEGIN_DATA_FORMAT")
    )


_READERS: dict[str, ReaderSpec] = {
    spec.name: spec
    for spec in (
        ReaderSpec("ampas_json", ampas_json.EXTENSIONS, ampas_json.parse_ampas_json, _looks_like_json),
        ReaderSpec("argyll", argyll.EXTENSIONS, argyll.parse_argyll, _looks_like_cgats),
        ReaderSpec("ampas", ampas.EXTENSIONS, ampas.parse_ampas_text, lambda _text: True),
    )
}


def available_extensions() -> list[str]:
    """Return every file suffix (without the dot) a registered reader handles."""

    return [ext for spec in _READERS.values() for ext in spec.extensions]


def reader_for(name: str | None = None, *, format: str | None = None, text: str = "") -> ReaderSpec:
    """Pick the reader for an explicit format, a file name, or the content."""

    if format is not None:
        try:
            return _READERS[format]
        except KeyError:
            known = ", ".join(sorted(_READERS))
            raise ValueError(f"Unknown spectral format {format!r}; expected one of {known}") from None
    if name:
        suffix = PurePath(name).suffix.lower().lstrip(".")
        for spec in _READERS.values():
            if suffix in spec.extensions:
                return spec
    for spec in _READERS.values():
        if spec.sniff(text):
            return spec
    return _READERS["ampas"]


def read(
    source: Source,
    *,
    config: ReaderConfig | None = None,
    format: str | None = None,
) -> SpectralDataset:
    """Read ``source`` into a validated, immutable :class:`SpectralDataset`.

    Parameters
    ----------
    source:
        A path (``str`` or path-like) or an open text/binary stream.
    config:
        Reader options; defaults to :class:`ReaderConfig` with strict settings.
    format:
        Force a reader (``"ampas"``, ``"ampas_json"`` or ``"argyll"``) instead of
        choosing by suffix and content.

    Raises
    ------
    SourceReadError
        The source cannot be opened or read.
    ReadError
        Any parse or validation failure. The raised error is the first problem
        in file order and ``diagnostics`` lists every problem found.
    """

    config = config or ReaderConfig()
    name = source_name(source)
    text = read_source(source, encoding=config.encoding)
    spec = reader_for(name, format=format, text=text)
    logger.debug("Reading %s with the %s reader", name or "<stream>", spec.name)
    return spec.parse(text, config=config, source=name)
