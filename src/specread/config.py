"""Configuration schema for spectral readers.

Every option has a default matching the strict behaviour; callers only pass a
:class:`ReaderConfig` when they need to relax or adjust something.
"""

from __future__ import annotations

import codecs
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from specread.types import DEFAULT_SERIES_NAME
from specread.wavelengths import UNIFORM_STEP_RTOL

__all__ = ["ReaderConfig"]


class ReaderConfig(BaseModel):
    """Options shared by every registered reader."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    comment_markers: tuple[str, ...] = Field(
        ("#",),
        description="Markers starting an inline comment; text after them is ignored",
    )
    uniform_step_rtol: float = Field(
        UNIFORM_STEP_RTOL,
        gt=0.0,
        description="Relative tolerance on the nominal step for a uniform grid",
    )
    range_policy: Literal["error", "warn"] = Field(
        "error",
        description="Whether samples outside the declared range fail the read or only warn",
    )
    encoding: str = Field(
        "utf-8",
        description="Text encoding of byte sources; undecodable bytes are replaced",
    )
    default_series_name: str = Field(
        DEFAULT_SERIES_NAME,
        min_length=1,
        description="Series name used when a file carries no column definition",
    )

    @field_validator("comment_markers")
    @classmethod
    def _check_markers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not marker for marker in value):
            raise ValueError("comment markers must be non-empty strings")
        return value

    @field_validator("encoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown text encoding {value!r}") from exc
        return value

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any] | None, fallback: Mapping[str, Any] | None = None
    ) -> ReaderConfig:
        raw: dict[str, Any] = {}
        if fallback:
            raw.update(fallback)
        if data:
            raw.update(data)
        return cls.model_validate(raw)
