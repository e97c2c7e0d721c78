"""Base model and enum for realtime store records.

Every record model inherits from :class:`NestBaseModel` which provides:

* A ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used (or, for required fields, validation fails).
* A ``raw`` dict that captures the original record.

String enums inherit from :class:`NestEnum` which resolves any value
without a mapped member to ``UNKNOWN`` instead of raising ``ValueError``.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NestEnum(enum.StrEnum):
    """Base for upstream string enums.

    Every subclass **must** define ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> NestEnum:
        if hasattr(cls, "UNKNOWN"):
            unknown: NestEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class NestBaseModel(BaseModel):
    """Base for records delivered by the realtime store."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original record as delivered."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop ``None`` values and stash the raw record."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep the caller's raw= when constructing with kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
