"""Climate control unit (thermostat) handle."""

from __future__ import annotations

from typing import Any

from pynest.devices.base import DeviceHandle
from pynest.exceptions import PreconditionError
from pynest.models.device import DeviceCategory
from pynest.models.structure import AwayState

HVAC_MODE_HEAT_COOL = "heat-cool"


class ClimateUnit(DeviceHandle):
    """Thermostat: observes temperatures and HVAC state, sets the target."""

    category = DeviceCategory.THERMOSTATS

    @property
    def target_temperature_c(self) -> Any:
        return self.get("target_temperature_c")

    @property
    def ambient_temperature_c(self) -> Any:
        return self.get("ambient_temperature_c")

    @property
    def hvac_state(self) -> str | None:
        return self.get("hvac_state")

    @property
    def hvac_mode(self) -> str | None:
        return self.get("hvac_mode")

    @property
    def is_locked(self) -> bool:
        return bool(self.get("is_locked"))

    @property
    def locked_range_c(self) -> tuple[Any, Any]:
        return self.get("locked_temp_min_c"), self.get("locked_temp_max_c")

    @property
    def is_using_emergency_heat(self) -> bool:
        return bool(self.get("is_using_emergency_heat"))

    def check_target_temperature_allowed(self) -> None:
        """Raise :class:`PreconditionError` if the target may not be changed now."""
        if self.is_using_emergency_heat:
            raise PreconditionError("can not adjust target temperature while using emergency heat")
        if self.is_locked:
            low, high = self.locked_range_c
            raise PreconditionError(
                f"can not adjust target temperature outside locked range: {low} - {high}",
                bounds=(low, high),
            )
        structure = self.structure
        away = structure.away if structure is not None else AwayState.UNKNOWN
        if away != AwayState.HOME:
            raise PreconditionError(f"can not adjust target temperature when structure status is set to {away}")
        if self.hvac_mode == HVAC_MODE_HEAT_COOL:
            raise PreconditionError("can not adjust target temperature when hvac_mode is heat-cool")

    async def set_target_temperature(self, temperature: float) -> float:
        """Write a new target temperature in °C.

        The value is not applied locally; it comes back through the
        device subscription.

        Raises
        ------
        PreconditionError
            Emergency heat, a locked range, a structure that is not
            ``home``, or ``heat-cool`` mode.  No write is issued.
        """
        await self.session.authenticate()
        self.check_target_temperature_allowed()
        await self._write("target_temperature_c", temperature)
        return temperature
