"""Data models for realtime store records."""

from pynest.models._base import NestBaseModel, NestEnum
from pynest.models.device import DeviceCategory, DeviceEntry, DeviceRecord
from pynest.models.structure import AwayState, Structure

__all__ = [
    "AwayState",
    "DeviceCategory",
    "DeviceEntry",
    "DeviceRecord",
    "NestBaseModel",
    "NestEnum",
    "Structure",
]
