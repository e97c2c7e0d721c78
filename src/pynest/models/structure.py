"""Structure (location) model."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from pynest.models._base import NestBaseModel, NestEnum

__all__ = [
    "AwayState",
    "Structure",
]


class AwayState(NestEnum):
    """Occupancy state of a structure, set upstream."""

    UNKNOWN = "unknown"
    HOME = "home"
    AWAY = "away"
    AUTO_AWAY = "auto-away"


class Structure(NestBaseModel):
    """A location grouping one or more devices."""

    structure_id: str = Field(min_length=1)
    """Stable structure identifier."""
    name: str = Field(min_length=1)
    """Display name."""
    away: AwayState = AwayState.UNKNOWN
    """Occupancy state; gates climate commands."""

    @field_validator("away", mode="before")
    @classmethod
    def _coerce_away(cls, value: Any) -> AwayState:
        if isinstance(value, AwayState):
            return value
        return AwayState(str(value))

    @property
    def is_home(self) -> bool:
        """Whether the structure is currently marked as occupied."""
        return self.away == AwayState.HOME
