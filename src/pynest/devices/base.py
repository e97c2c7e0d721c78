"""Shared device handle behavior.

A handle is a derived view over a registry entry: it deep-copies the
entry's values at construction and is kept current afterwards by its own
subscription to the device record.  Change detection is delegated to a
composed :class:`ChangeDetector`; categories differ only in their
capability list and command methods.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from pynest._constants import device_record_path
from pynest._events import EventEmitter
from pynest._transport import RealtimeSource
from pynest.models.device import DeviceCategory, DeviceEntry
from pynest.models.structure import Structure
from pynest.session import Session
from pynest.state.detector import ChangeDetector, DetectorState
from pynest.state.events import CapabilityChange
from pynest.state.registry import Registry

_logger = logging.getLogger(__name__)


class DeviceHandle:
    """Typed front end for one registered device.

    Emits one event per capability name whose payload is the new value::

        handle.on("target_temperature_c", lambda value: ...)
    """

    category: ClassVar[DeviceCategory]

    def __init__(
        self,
        entry: DeviceEntry,
        *,
        session: Session,
        source: RealtimeSource,
        registry: Registry,
    ) -> None:
        if entry.category != self.category:
            raise ValueError(f"{type(self).__name__} cannot wrap a {entry.category} entry")
        self._device_id = entry.device_id
        self._name_long = entry.name_long
        self._structure_id = entry.structure_id
        self._structure = entry.structure
        self._session = session
        self._source = source
        self._registry = registry
        self._events = EventEmitter()
        self._detector = ChangeDetector(
            self.category.capabilities,
            initial=entry.values,
            on_change=self._events.emit,
        )
        self._task: asyncio.Task[None] | None = None
        self._started = False

    async def __aenter__(self) -> DeviceHandle:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._device_id} {self._name_long!r}>"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def name_long(self) -> str:
        return self._name_long

    @property
    def capabilities(self) -> tuple[str, ...]:
        return self.category.capabilities

    @property
    def structure_id(self) -> str:
        return self._structure_id

    @property
    def structure(self) -> Structure | None:
        """Owning structure as of the last device event, if known."""
        return self._structure

    @property
    def session(self) -> Session:
        return self._session

    @property
    def path(self) -> str:
        return device_record_path(self.category, self._device_id)

    @property
    def values(self) -> dict[str, Any]:
        return self._detector.values

    @property
    def is_synced(self) -> bool:
        return self._detector.state == DetectorState.SYNCED

    @property
    def is_listening(self) -> bool:
        return self._task is not None and not self._task.done()

    def get(self, name: str, default: Any = None) -> Any:
        return self._detector.get(name, default)

    def on(self, capability: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Listen for changes of *capability*; returns an unsubscribe callable."""
        if capability not in self.capabilities:
            raise ValueError(f"{capability!r} is not a capability of {self.category}")
        return self._events.on(capability, callback)

    # ------------------------------------------------------------------
    # Realtime updates
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Authenticate and subscribe to this device's record."""
        if self._started:
            return
        self._started = True
        try:
            await self._session.authenticate()
        except BaseException:
            self._started = False
            raise
        if not self._started:
            # Closed while authenticating.
            return
        self._task = asyncio.create_task(self._listen(), name=f"pynest-device:{self.path}")

    async def close(self) -> None:
        self._started = False
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _listen(self) -> None:
        try:
            async for snapshot in self._source.subscribe(self.path):
                self.handle_snapshot(snapshot)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Subscription to %s failed", self.path)

    def handle_snapshot(self, snapshot: Any) -> list[CapabilityChange]:
        """Run change detection for one record snapshot."""
        if not isinstance(snapshot, Mapping):
            _logger.debug("Ignoring empty snapshot for %s", self.path)
            return []

        changes = self._detector.apply(snapshot)

        name_long = self._detector.get("name_long")
        if isinstance(name_long, str) and name_long:
            self._name_long = name_long
        structure_id = self._detector.get("structure_id")
        if isinstance(structure_id, str) and structure_id:
            self._structure_id = structure_id
        self._structure = self._registry.get_structure(self._structure_id)

        if changes:
            _logger.debug("%s changed: %s", self.path, ", ".join(change.capability for change in changes))
        return changes

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _write(self, field: str, value: Any) -> None:
        path = f"{self.path}/{field}"
        _logger.debug("Writing %s = %r", path, value)
        await self._source.write(path, value)
