from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from pynest.session import Session
from pynest.state.registry import Registry


class FakeChannel:
    def __init__(self) -> None:
        self.callbacks: list[Callable[[bool], None]] = []
        self.sign_outs = 0

    def on_auth_state_change(self, callback: Callable[[bool], None]) -> None:
        self.callbacks.append(callback)

    def sign_out(self) -> None:
        self.sign_outs += 1

    def fire(self, authenticated: bool) -> None:
        for callback in list(self.callbacks):
            callback(authenticated)


@dataclass
class FakeAuthTransport:
    fail_with: Exception | None = None
    gate: asyncio.Event | None = None
    tokens: list[str] = field(default_factory=list)
    channels: list[FakeChannel] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.tokens)

    async def exchange_credential(self, token: str) -> FakeChannel:
        self.tokens.append(token)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        channel = FakeChannel()
        self.channels.append(channel)
        return channel


@dataclass
class FakeRevocationTransport:
    status: int = 200
    fail_with: Exception | None = None
    tokens: list[str] = field(default_factory=list)

    async def revoke(self, token: str) -> int:
        self.tokens.append(token)
        if self.fail_with is not None:
            raise self.fail_with
        return self.status


@dataclass(frozen=True)
class _StreamFailure:
    exc: Exception


class FakeRealtimeSource:
    """Per-path queues; values pushed before a subscription are buffered."""

    def __init__(self) -> None:
        self._queues: dict[str, asyncio.Queue[Any]] = {}
        self.subscriptions: list[str] = []
        self.writes: list[tuple[str, Any]] = []

    def _queue(self, path: str) -> asyncio.Queue[Any]:
        return self._queues.setdefault(path, asyncio.Queue())

    def push(self, path: str, value: Any) -> None:
        self._queue(path).put_nowait(value)

    def fail(self, path: str, exc: Exception) -> None:
        self._queue(path).put_nowait(_StreamFailure(exc))

    async def subscribe(self, path: str) -> AsyncIterator[Any]:
        self.subscriptions.append(path)
        queue = self._queue(path)
        while True:
            item = await queue.get()
            if isinstance(item, _StreamFailure):
                raise item.exc
            yield item

    async def write(self, path: str, value: Any) -> None:
        self.writes.append((path, value))


def structure_record(
    structure_id: str = "s1",
    *,
    name: str = "Home",
    away: str | None = "home",
) -> dict[str, Any]:
    return {"structure_id": structure_id, "name": name, "away": away}


def thermostat_record(device_id: str = "t1", *, structure_id: str = "s1", **fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "device_id": device_id,
        "name_long": f"Thermostat {device_id}",
        "structure_id": structure_id,
        "target_temperature_c": 20.0,
        "ambient_temperature_c": 19.5,
        "hvac_state": "off",
        "hvac_mode": "heat",
        "is_locked": False,
        "is_using_emergency_heat": False,
    }
    record.update(fields)
    return record


def protect_record(device_id: str = "p1", *, structure_id: str = "s1", **fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "device_id": device_id,
        "name_long": f"Protect {device_id}",
        "structure_id": structure_id,
        "battery_health": "ok",
        "co_alarm_state": "ok",
        "smoke_alarm_state": "ok",
    }
    record.update(fields)
    return record


def camera_record(device_id: str = "c1", *, structure_id: str = "s1", **fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "device_id": device_id,
        "name_long": f"Camera {device_id}",
        "structure_id": structure_id,
        "is_streaming": False,
        "last_event": None,
    }
    record.update(fields)
    return record


def keyed(*records: dict[str, Any], key: str = "device_id") -> dict[str, dict[str, Any]]:
    return {record[key]: record for record in records}


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    return _settle


@pytest.fixture
def auth_transport() -> FakeAuthTransport:
    return FakeAuthTransport()


@pytest.fixture
def revocation() -> FakeRevocationTransport:
    return FakeRevocationTransport()


@pytest.fixture
def realtime() -> FakeRealtimeSource:
    return FakeRealtimeSource()


@pytest.fixture
def session(auth_transport: FakeAuthTransport, revocation: FakeRevocationTransport) -> Session:
    return Session(auth_transport, revocation, credential="token-abc123")


@pytest.fixture
def registry() -> Registry:
    return Registry()
