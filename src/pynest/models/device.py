"""Device registry entry model and category definitions."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field

from pynest.models._base import NestBaseModel
from pynest.models.structure import Structure

__all__ = [
    "DeviceCategory",
    "DeviceEntry",
]


class DeviceCategory(enum.StrEnum):
    """Device collection in the realtime store.

    The value doubles as the collection name under ``devices/``.
    """

    THERMOSTATS = "thermostats"
    SMOKE_CO_ALARMS = "smoke_co_alarms"
    CAMERAS = "cameras"

    @property
    def capabilities(self) -> tuple[str, ...]:
        """Observable fields whose changes are individually notified."""
        return _CAPABILITIES[self]


_CAPABILITIES: dict[DeviceCategory, tuple[str, ...]] = {
    DeviceCategory.THERMOSTATS: ("target_temperature_c", "ambient_temperature_c", "hvac_state"),
    DeviceCategory.SMOKE_CO_ALARMS: ("battery_health", "co_alarm_state", "smoke_alarm_state"),
    DeviceCategory.CAMERAS: ("last_event", "is_streaming"),
}


class DeviceRecord(NestBaseModel):
    """Identity fields every device record must carry to be registered."""

    device_id: str = Field(min_length=1)
    name_long: str = Field(min_length=1)
    structure_id: str = Field(min_length=1)


class DeviceEntry(NestBaseModel):
    """A registered device.

    ``structure`` is a lookup made at upsert time.  It stays ``None``
    until the owning structure has synced and the device is upserted
    again.
    """

    device_id: str
    """Identifier, unique within the category."""
    name_long: str
    """Long display name."""
    structure_id: str
    """Identifier of the owning structure."""
    category: DeviceCategory
    """Collection the device was delivered in."""
    structure: Structure | None = None
    """Owning structure, if it was known when the entry was upserted."""
    values: dict[str, Any] = Field(default_factory=dict)
    """Every field of the record as delivered, capability values included."""

    @property
    def capabilities(self) -> tuple[str, ...]:
        return self.category.capabilities

    @property
    def is_structure_resolved(self) -> bool:
        return self.structure is not None
