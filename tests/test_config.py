from __future__ import annotations

import pytest

from pynest._constants import DEFAULT_REVOKE_TIMEOUT, REVOKE_URL_TEMPLATE
from pynest.config import NestConfig
from pynest.exceptions import NestConfigError
from pynest.models import DeviceCategory

_ENV_KEYS = (
    "NEST_ACCESS_TOKEN",
    "NEST_REVOKE_URL",
    "NEST_REVOKE_TIMEOUT",
    "NEST_CATEGORIES",
    "NEST_SNAPSHOT_TRACE_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = NestConfig()

    assert config.access_token is None
    assert config.revoke_url == REVOKE_URL_TEMPLATE
    assert config.revoke_timeout == DEFAULT_REVOKE_TIMEOUT
    assert config.categories == tuple(DeviceCategory)
    assert config.snapshot_trace_enabled is False


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEST_ACCESS_TOKEN", "c.token")
    monkeypatch.setenv("NEST_REVOKE_URL", "https://auth.test/{token}")
    monkeypatch.setenv("NEST_REVOKE_TIMEOUT", "3.5")
    monkeypatch.setenv("NEST_CATEGORIES", "thermostats, cameras")
    monkeypatch.setenv("NEST_SNAPSHOT_TRACE_ENABLED", "yes")

    config = NestConfig.from_env()

    assert config.access_token == "c.token"
    assert config.revoke_url == "https://auth.test/{token}"
    assert config.revoke_timeout == 3.5
    assert config.categories == (DeviceCategory.THERMOSTATS, DeviceCategory.CAMERAS)
    assert config.snapshot_trace_enabled is True


def test_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEST_ACCESS_TOKEN", "from-env")
    monkeypatch.setenv("NEST_CATEGORIES", "bogus")
    monkeypatch.setenv("NEST_SNAPSHOT_TRACE_ENABLED", "1")

    config = NestConfig.from_env(
        access_token="explicit",
        categories=(DeviceCategory.SMOKE_CO_ALARMS,),
        snapshot_trace_enabled=False,
    )

    assert config.access_token == "explicit"
    assert config.categories == (DeviceCategory.SMOKE_CO_ALARMS,)
    assert config.snapshot_trace_enabled is False


def test_unknown_category_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEST_CATEGORIES", "thermostats,doorbells")

    with pytest.raises(NestConfigError, match="doorbells"):
        NestConfig.from_env()


def test_revoke_url_requires_token_placeholder() -> None:
    with pytest.raises(NestConfigError):
        NestConfig(revoke_url="https://auth.test/tokens")


def test_revoke_timeout_must_be_positive() -> None:
    with pytest.raises(NestConfigError):
        NestConfig(revoke_timeout=0)
