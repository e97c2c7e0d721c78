"""Hazard alarm (smoke/CO) handle; observe only."""

from __future__ import annotations

from pynest.devices.base import DeviceHandle
from pynest.models.device import DeviceCategory


class HazardUnit(DeviceHandle):
    category = DeviceCategory.SMOKE_CO_ALARMS

    @property
    def battery_health(self) -> str | None:
        return self.get("battery_health")

    @property
    def co_alarm_state(self) -> str | None:
        return self.get("co_alarm_state")

    @property
    def smoke_alarm_state(self) -> str | None:
        return self.get("smoke_alarm_state")
