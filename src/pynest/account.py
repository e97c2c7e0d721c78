"""High-level async facade for one realtime home-automation account."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import aiohttp

from pynest._constants import EVENT_AUTHENTICATED, EVENT_INITIALIZED, EVENT_UNAUTHENTICATED
from pynest._events import EventEmitter
from pynest._transport import AuthTransport, HttpRevocationTransport, RealtimeSource, RevocationTransport
from pynest.config import NestConfig
from pynest.devices import HANDLE_TYPES, CameraUnit, ClimateUnit, DeviceHandle, HazardUnit
from pynest.exceptions import NestError
from pynest.ingestion.multiplexer import SubscriptionMultiplexer
from pynest.models.device import DeviceCategory, DeviceEntry
from pynest.models.structure import Structure
from pynest.session import Session
from pynest.state.registry import Registry

_logger = logging.getLogger(__name__)

H = TypeVar("H", bound=DeviceHandle)


class NestAccount:
    """Live mirror of an account's structures and devices.

    Usage::

        async with NestAccount(config, auth_transport=auth, realtime=source) as account:
            await account.wait_initialized()
            thermostat = await account.create_thermostat(device_id)
            thermostat.on("ambient_temperature_c", print)
            await thermostat.set_target_temperature(21)

    Emits ``initialized`` once every collection has synced, and
    ``authenticated`` / ``unauthenticated`` on session transitions.
    """

    def __init__(
        self,
        config: NestConfig,
        *,
        auth_transport: AuthTransport,
        realtime: RealtimeSource,
        revocation: RevocationTransport | None = None,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._realtime = realtime
        self._external_http = http_session is not None
        self._http_session = http_session
        self._revocation = revocation
        self._events = EventEmitter()
        self._registry = Registry()
        self._session = Session(auth_transport, revocation, credential=config.access_token)
        self._multiplexer = SubscriptionMultiplexer(
            session=self._session,
            source=realtime,
            registry=self._registry,
            categories=config.categories,
            trace_snapshots=config.snapshot_trace_enabled,
        )
        self._handles: list[DeviceHandle] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._init_task: asyncio.Task[None] | None = None
        self._started = False
        self._initialized = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> NestAccount:
        if self._revocation is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._revocation = HttpRevocationTransport(
                self._http_session,
                url_template=self._config.revoke_url,
                timeout=self._config.revoke_timeout,
            )
            self._session.revocation = self._revocation
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Authenticate and start mirroring the account."""
        if self._started:
            return
        self._started = True
        self._unsubscribers = [
            self._session.on(EVENT_AUTHENTICATED, lambda: self._events.emit(EVENT_AUTHENTICATED)),
            self._session.on(EVENT_UNAUTHENTICATED, lambda: self._events.emit(EVENT_UNAUTHENTICATED)),
        ]
        try:
            await self._multiplexer.start()
        except BaseException:
            self._started = False
            raise
        self._init_task = asyncio.create_task(self._await_initialized(), name="pynest-initialized")

    async def _await_initialized(self) -> None:
        try:
            await self._multiplexer.wait_synced()
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Initial sync failed")
            raise
        self._initialized = True
        _logger.info(
            "Initial sync complete: %d structure(s), %s",
            len(self._registry.structures),
            ", ".join(f"{len(self._registry.devices(c))} {c}" for c in self._multiplexer.categories),
        )
        self._events.emit(EVENT_INITIALIZED)

    async def wait_initialized(self) -> None:
        """Wait for the initial sync to complete."""
        if self._init_task is None:
            raise NestError("Account not started. Use 'async with NestAccount(...) as account:'")
        await asyncio.shield(self._init_task)

    async def close(self) -> None:
        """Stop every subscription and release owned resources."""
        self._started = False
        handles = self._handles
        self._handles = []
        for handle in handles:
            await handle.close()
        await self._multiplexer.close()
        if self._init_task is not None:
            self._init_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await self._init_task
            self._init_task = None
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if not self._external_http and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    async def authenticate(self, credential: str | None = None) -> None:
        await self._session.authenticate(credential)

    async def revoke_authentication(self) -> None:
        """Sign out locally and revoke the access token remotely."""
        await self._session.revoke()

    def on(self, event: str, callback: Callable[[], None]) -> Callable[[], None]:
        """Listen for ``initialized``, ``authenticated`` or ``unauthenticated``."""
        return self._events.on(event, callback)

    # ------------------------------------------------------------------
    # Registry views
    # ------------------------------------------------------------------

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def structures(self) -> list[Structure]:
        return self._registry.structures

    @property
    def thermostats(self) -> list[DeviceEntry]:
        return self._registry.devices(DeviceCategory.THERMOSTATS)

    @property
    def smoke_co_alarms(self) -> list[DeviceEntry]:
        return self._registry.devices(DeviceCategory.SMOKE_CO_ALARMS)

    @property
    def cameras(self) -> list[DeviceEntry]:
        return self._registry.devices(DeviceCategory.CAMERAS)

    # ------------------------------------------------------------------
    # Handle factories
    # ------------------------------------------------------------------

    async def create_device(self, category: DeviceCategory, device_id: str) -> DeviceHandle:
        """Build and start a handle from the current registry entry.

        Raises
        ------
        NotFoundError
            No entry exists for *device_id* in *category*.
        """
        category = DeviceCategory(category)
        entry = self._registry.require_device(category, device_id)
        handle = HANDLE_TYPES[category](
            entry,
            session=self._session,
            source=self._realtime,
            registry=self._registry,
        )
        await handle.start()
        self._handles.append(handle)
        return handle

    async def _create(self, handle_type: type[H], device_id: str) -> H:
        handle = await self.create_device(handle_type.category, device_id)
        assert isinstance(handle, handle_type)  # noqa: S101
        return handle

    async def create_thermostat(self, device_id: str) -> ClimateUnit:
        return await self._create(ClimateUnit, device_id)

    async def create_protect(self, device_id: str) -> HazardUnit:
        return await self._create(HazardUnit, device_id)

    async def create_camera(self, device_id: str) -> CameraUnit:
        return await self._create(CameraUnit, device_id)
