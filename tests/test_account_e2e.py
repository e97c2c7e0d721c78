"""End-to-end account flows against in-memory collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from conftest import (
    FakeAuthTransport,
    FakeRealtimeSource,
    FakeRevocationTransport,
    camera_record,
    keyed,
    protect_record,
    structure_record,
    thermostat_record,
)

from pynest import (
    CameraUnit,
    ClimateUnit,
    HazardUnit,
    HttpRevocationTransport,
    NestAccount,
    NestConfig,
    NestError,
    NotFoundError,
    PreconditionError,
)
from pynest.models import DeviceCategory

Settle = Callable[..., Awaitable[None]]

pytestmark = [pytest.mark.e2e, pytest.mark.asyncio]


def _seed(realtime: FakeRealtimeSource, *, away: str = "home") -> None:
    realtime.push("structures", keyed(structure_record(away=away), key="structure_id"))
    realtime.push("devices/thermostats", keyed(thermostat_record(), thermostat_record("t2")))
    realtime.push("devices/smoke_co_alarms", keyed(protect_record()))
    realtime.push("devices/cameras", keyed(camera_record()))


def _account(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport | None,
    **config: Any,
) -> NestAccount:
    return NestAccount(
        NestConfig(access_token="token-abc123", **config),
        auth_transport=auth_transport,
        realtime=realtime,
        revocation=revocation,
    )


async def test_full_account_flow(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
    settle: Settle,
) -> None:
    events: list[str] = []
    account = _account(auth_transport, realtime, revocation)
    for name in ("initialized", "authenticated", "unauthenticated"):
        account.on(name, lambda name=name: events.append(name))

    async with account:
        _seed(realtime)
        await asyncio.wait_for(account.wait_initialized(), 1)

        assert account.is_initialized
        assert [s.structure_id for s in account.structures] == ["s1"]
        assert [d.device_id for d in account.thermostats] == ["t1", "t2"]
        assert len(account.smoke_co_alarms) == 1
        assert len(account.cameras) == 1

        thermostat = await account.create_thermostat("t1")
        protect = await account.create_protect("p1")
        camera = await account.create_camera("c1")
        assert isinstance(thermostat, ClimateUnit)
        assert isinstance(protect, HazardUnit)
        assert isinstance(camera, CameraUnit)
        assert thermostat.structure is not None

        changes: list[Any] = []
        thermostat.on("ambient_temperature_c", changes.append)
        await thermostat.set_target_temperature(21.5)
        realtime.push(thermostat.path, thermostat_record(target_temperature_c=21.5, ambient_temperature_c=20.0))
        await settle()

        assert realtime.writes == [("devices/thermostats/t1/target_temperature_c", 21.5)]
        assert thermostat.target_temperature_c == 21.5
        assert changes == [20.0]

        # A later collection snapshot reaches the registry.
        realtime.push("devices/cameras", keyed(camera_record(), camera_record("c2")))
        await settle()
        assert len(account.cameras) == 2

        await account.revoke_authentication()

    assert events == ["authenticated", "initialized", "unauthenticated"]
    assert revocation.tokens == ["token-abc123"]
    assert auth_transport.calls == 1
    assert not thermostat.is_listening


async def test_initialized_fires_once(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
    settle: Settle,
) -> None:
    fired: list[None] = []
    _seed(realtime)
    async with _account(auth_transport, realtime, revocation) as account:
        account.on("initialized", lambda: fired.append(None))
        await asyncio.wait_for(account.wait_initialized(), 1)
        _seed(realtime)
        await settle()
        await account.wait_initialized()

    assert fired == [None]


async def test_create_device_for_unknown_id_raises(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    _seed(realtime)
    async with _account(auth_transport, realtime, revocation) as account:
        await asyncio.wait_for(account.wait_initialized(), 1)

        with pytest.raises(NotFoundError):
            await account.create_camera("missing")
        with pytest.raises(NotFoundError):
            await account.create_device(DeviceCategory.SMOKE_CO_ALARMS, "t1")


async def test_climate_command_rejected_when_away(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    _seed(realtime, away="away")
    async with _account(auth_transport, realtime, revocation) as account:
        await asyncio.wait_for(account.wait_initialized(), 1)
        thermostat = await account.create_thermostat("t2")

        with pytest.raises(PreconditionError):
            await thermostat.set_target_temperature(19)

    assert realtime.writes == []


async def test_configured_categories_limit_the_mirror(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    realtime.push("structures", [structure_record()])
    realtime.push("devices/cameras", [camera_record()])

    async with _account(auth_transport, realtime, revocation, categories=(DeviceCategory.CAMERAS,)) as account:
        await asyncio.wait_for(account.wait_initialized(), 1)

        assert len(account.cameras) == 1
        assert account.thermostats == []


async def test_failed_authentication_aborts_context_entry(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    auth_transport.fail_with = PermissionError("invalid token")
    account = _account(auth_transport, realtime, revocation)

    with pytest.raises(NestError):
        async with account:
            pass

    assert realtime.subscriptions == []
    with pytest.raises(NestError):
        await account.wait_initialized()


async def test_wait_initialized_requires_start(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    account = _account(auth_transport, realtime, revocation)

    with pytest.raises(NestError):
        await account.wait_initialized()


async def test_http_revocation_transport_is_created_when_none_given(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
) -> None:
    async with _account(auth_transport, realtime, None) as account:
        assert isinstance(account.session.revocation, HttpRevocationTransport)


async def test_concurrent_start_mirrors_once(
    auth_transport: FakeAuthTransport,
    realtime: FakeRealtimeSource,
    revocation: FakeRevocationTransport,
) -> None:
    fired: list[None] = []
    account = _account(auth_transport, realtime, revocation)
    account.on("initialized", lambda: fired.append(None))
    _seed(realtime)

    await asyncio.gather(account.start(), account.start())
    await asyncio.wait_for(account.wait_initialized(), 1)
    await account.close()

    assert realtime.subscriptions.count("structures") == 1
    assert fired == [None]
