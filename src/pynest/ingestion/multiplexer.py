"""Realtime subscription fan-in.

Owns one subscription to the structures collection and, once the first
structures snapshot has been applied, one subscription per device
category.  Every snapshot is handed to the :class:`Registry`.

Initial sync is a one-shot barrier over one future per collection: it
completes once every collection has delivered at least one value.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from typing import Any

from pynest._constants import STRUCTURES_PATH, device_collection_path
from pynest._redact import redact_for_log
from pynest._transport import RealtimeSource
from pynest.models.device import DeviceCategory
from pynest.session import Session
from pynest.state.registry import Registry

_logger = logging.getLogger(__name__)


class SubscriptionMultiplexer:
    """Keeps a :class:`Registry` in sync with the realtime store."""

    def __init__(
        self,
        *,
        session: Session,
        source: RealtimeSource,
        registry: Registry,
        categories: Sequence[DeviceCategory] = tuple(DeviceCategory),
        trace_snapshots: bool = False,
    ) -> None:
        self._session = session
        self._source = source
        self._registry = registry
        self._categories = tuple(DeviceCategory(category) for category in categories)
        self._trace = trace_snapshots
        self._tasks: list[asyncio.Task[None]] = []
        self._barrier: dict[str, asyncio.Future[None]] = {}
        self._devices_opened = False
        self._started = False

    @property
    def categories(self) -> tuple[DeviceCategory, ...]:
        return self._categories

    @property
    def is_synced(self) -> bool:
        return bool(self._barrier) and all(
            fut.done() and not fut.cancelled() and fut.exception() is None for fut in self._barrier.values()
        )

    async def start(self) -> None:
        """Authenticate and open the structures subscription."""
        if self._started:
            return
        self._started = True

        loop = asyncio.get_running_loop()
        paths = [STRUCTURES_PATH, *(device_collection_path(category) for category in self._categories)]
        self._barrier = {path: loop.create_future() for path in paths}

        try:
            await self._session.authenticate()
        except BaseException:
            self._started = False
            self._barrier = {}
            raise

        self._spawn(STRUCTURES_PATH, self._apply_structures)

    async def wait_synced(self) -> None:
        """Wait until every collection has delivered its first snapshot."""
        if not self._barrier:
            raise RuntimeError("Multiplexer not started")
        await asyncio.gather(*(asyncio.shield(fut) for fut in self._barrier.values()))

    async def close(self) -> None:
        """Cancel every open subscription."""
        tasks = self._tasks
        self._tasks = []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        for fut in self._barrier.values():
            if not fut.done():
                fut.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spawn(self, path: str, apply: Callable[[Any], None]) -> None:
        task = asyncio.create_task(self._consume(path, apply), name=f"pynest-subscription:{path}")
        self._tasks.append(task)

    def _apply_structures(self, snapshot: Any) -> None:
        self._registry.apply_structure_snapshot(snapshot)

    async def _open_device_subscriptions(self) -> None:
        if self._devices_opened:
            return
        self._devices_opened = True
        for category in self._categories:
            await self._session.authenticate()
            self._spawn(
                device_collection_path(category),
                lambda snapshot, category=category: self._registry.apply_device_snapshot(snapshot, category),
            )

    async def _open_device_subscriptions_or_fail(self) -> None:
        try:
            await self._open_device_subscriptions()
        except Exception as exc:
            _logger.error("Opening device subscriptions failed: %s", exc)
            for category in self._categories:
                fut = self._barrier[device_collection_path(category)]
                if not fut.done():
                    fut.set_exception(exc)

    async def _consume(self, path: str, apply: Callable[[Any], None]) -> None:
        first = self._barrier[path]
        try:
            async for snapshot in self._source.subscribe(path):
                if self._trace:
                    _logger.debug("Snapshot %s: %s", path, redact_for_log(snapshot))
                apply(snapshot)
                if not first.done():
                    _logger.debug("Initial snapshot received for %s", path)
                    first.set_result(None)
                    if path == STRUCTURES_PATH:
                        await self._open_device_subscriptions_or_fail()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            _logger.error("Subscription to %s failed: %s", path, exc, exc_info=True)
            if not first.done():
                first.set_exception(exc)
            return

        _logger.warning("Subscription to %s ended", path)
        if not first.done():
            first.set_exception(RuntimeError(f"Subscription to {path} ended before its first snapshot"))
