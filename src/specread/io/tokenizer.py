"""Line scanner for AMPAS-style spectral text."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence

from specread.types import LineKind, RawLine, split_columns

__all__ = ["Tokenizer", "is_number", "split_header_line"]

_HEADER_LINE = re.compile(r"^\s*([^=:]+?)\s*[=:]\s*(.*?)\s*$")


def split_header_line(text: str) -> tuple[str, str] | None:
    """Split ``key = value`` / ``key: value`` on the first delimiter."""

    match = _HEADER_LINE.match(text)
    if match is None:
        return None
    return match.group(1), match.group(2)


def is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


class Tokenizer:
    """Classify each line of ``text`` as a :class:`RawLine`.

    The tokenizer is an iterable rather than an iterator: every ``iter()``
    starts again from the first line. Lines are produced lazily and no line
    ever raises; anything that cannot be classified is tagged
    :attr:`LineKind.UNKNOWN` for the consumer to decide on.
    """

    def __init__(self, text: str, comment_markers: Sequence[str] = ("#",)) -> None:
        self.text = text
        self.comment_markers = tuple(comment_markers)

    def __iter__(self) -> Iterator[RawLine]:
        seen_data = False
        for number, line in enumerate(self.text.splitlines(), start=1):
            content, had_comment = self._strip_comment(line)
            content = content.rstrip()
            kind = self._classify(content, had_comment, seen_data)
            if kind is LineKind.DATA:
                seen_data = True
            yield RawLine(number=number, text=content, kind=kind)

    def _strip_comment(self, line: str) -> tuple[str, bool]:
        cut = len(line)
        for marker in self.comment_markers:
            pos = line.find(marker)
            if pos != -1 and pos < cut:
                cut = pos
        return line[:cut], cut != len(line)

    @staticmethod
    def _classify(content: str, had_comment: bool, seen_data: bool) -> LineKind:
        if not content.strip():
            return LineKind.COMMENT if had_comment else LineKind.BLANK

        tokens = split_columns(content)
        if is_number(tokens[0]):
            return LineKind.DATA
        if split_header_line(content) is not None:
            return LineKind.HEADER
        if not seen_data and not any(is_number(token) for token in tokens):
            return LineKind.COLUMN_DEF
        return LineKind.UNKNOWN
