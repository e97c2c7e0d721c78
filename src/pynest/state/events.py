"""Change notifications produced by the detector."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CapabilityChange(BaseModel):
    """One capability transitioning from its settled value to a new one."""

    model_config = ConfigDict(frozen=True)

    capability: str = Field(..., description="Capability (field) name")
    previous: Any = None
    value: Any = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("capability")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("capability must be non-empty")
        return value
