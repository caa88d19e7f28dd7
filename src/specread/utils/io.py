from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Protocol

from specread.errors import SourceReadError


class _SupportsPath(Protocol):
    """Protocol for path-like objects accepted by Path."""

    def __fspath__(self) -> str:  # pragma: no cover - runtime protocol hook
        ...


StrPath = str | Path | _SupportsPath
Source = StrPath | IO[str] | IO[bytes]


def source_name(source: Source) -> str | None:
    """Return a display name for ``source``: the path, or a stream's ``name``."""
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    name = getattr(source, "name", None)
    return name if isinstance(name, str) else None


def read_source(source: Source, *, encoding: str = "utf-8") -> str:
    """Return the full text of a path or an open text/binary stream.

    Undecodable bytes are replaced rather than failing the read; any error
    opening or reading the source surfaces as :class:`SourceReadError`.
    """
    label = source_name(source) or "<stream>"
    try:
        if isinstance(source, (str, os.PathLike)):
            raw: str | bytes = Path(source).read_bytes()
        else:
            raw = source.read()
    except OSError as exc:
        raise SourceReadError(label, exc.strerror or str(exc)) from exc
    if isinstance(raw, bytes):
        return raw.decode(encoding, errors="replace")
    return raw
