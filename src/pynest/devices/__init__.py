"""Typed device handles."""

from pynest.devices.base import DeviceHandle
from pynest.devices.camera import CameraUnit
from pynest.devices.climate import ClimateUnit
from pynest.devices.hazard import HazardUnit
from pynest.models.device import DeviceCategory

HANDLE_TYPES: dict[DeviceCategory, type[DeviceHandle]] = {
    DeviceCategory.THERMOSTATS: ClimateUnit,
    DeviceCategory.SMOKE_CO_ALARMS: HazardUnit,
    DeviceCategory.CAMERAS: CameraUnit,
}

__all__ = [
    "HANDLE_TYPES",
    "CameraUnit",
    "ClimateUnit",
    "DeviceHandle",
    "HazardUnit",
]
