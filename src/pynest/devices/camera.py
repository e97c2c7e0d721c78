"""Camera handle."""

from __future__ import annotations

from typing import Any

from pynest.devices.base import DeviceHandle
from pynest.exceptions import PreconditionError
from pynest.models.device import DeviceCategory


class CameraUnit(DeviceHandle):
    """Camera: observes the last event and toggles streaming."""

    category = DeviceCategory.CAMERAS

    @property
    def last_event(self) -> Any:
        return self.get("last_event")

    @property
    def is_streaming(self) -> bool | None:
        return self.get("is_streaming")

    async def set_streaming(self, enabled: bool) -> None:
        """Turn streaming on or off.

        Raises
        ------
        PreconditionError
            *enabled* is not a ``bool``.  No write is issued.
        """
        await self.session.authenticate()
        if not isinstance(enabled, bool):
            raise PreconditionError(f"streaming flag must be a boolean, got {type(enabled).__name__}")
        await self._write("is_streaming", enabled)
