"""Pytest configuration for the specread test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import textwrap

import pytest


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write dedented ``content`` to ``tmp_path / relative`` and return the path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).strip() + "\n", encoding="utf-8")
        return path

    return _write
