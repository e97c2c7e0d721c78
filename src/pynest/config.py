"""Client configuration for pynest."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pynest._constants import DEFAULT_REVOKE_TIMEOUT, REVOKE_URL_TEMPLATE
from pynest.exceptions import NestConfigError
from pynest.models.device import DeviceCategory


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_categories(value: str) -> tuple[DeviceCategory, ...]:
    categories: list[DeviceCategory] = []
    for item in value.split(","):
        name = item.strip()
        if not name:
            continue
        try:
            categories.append(DeviceCategory(name))
        except ValueError as exc:
            raise NestConfigError(f"Unknown device category {name!r}") from exc
    return tuple(categories)


@dataclasses.dataclass(frozen=True)
class NestConfig:
    """Account configuration.

    Parameters
    ----------
    access_token : str or None
        OAuth access token for the account.  May also be supplied later
        through :meth:`pynest.session.Session.authenticate`.
    revoke_url : str
        Revocation endpoint template; ``{token}`` is substituted.
    revoke_timeout : float
        Total timeout in seconds for the revocation request.
    categories : tuple of DeviceCategory
        Device collections to mirror.  Defaults to all of them.
    snapshot_trace_enabled : bool
        Log every incoming collection snapshot (redacted) at DEBUG.
    """

    access_token: str | None = None
    revoke_url: str = REVOKE_URL_TEMPLATE
    revoke_timeout: float = DEFAULT_REVOKE_TIMEOUT
    categories: tuple[DeviceCategory, ...] = tuple(DeviceCategory)
    snapshot_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if "{token}" not in self.revoke_url:
            raise NestConfigError("revoke_url must contain a '{token}' placeholder")
        if self.revoke_timeout <= 0:
            raise NestConfigError("revoke_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> NestConfig:
        """Create configuration from environment variables.

        Reads ``NEST_ACCESS_TOKEN`` and the optional ``NEST_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        NestConfig
            Populated configuration.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_CONFIG_MAP = {
            "NEST_ACCESS_TOKEN": "access_token",
            "NEST_REVOKE_URL": "revoke_url",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("NEST_REVOKE_TIMEOUT")
        if timeout_env is not None and "revoke_timeout" not in overrides:
            config_kwargs["revoke_timeout"] = float(timeout_env)

        categories_env = env.get("NEST_CATEGORIES")
        if categories_env is not None and "categories" not in overrides:
            config_kwargs["categories"] = _parse_categories(categories_env)

        if "snapshot_trace_enabled" not in overrides:
            config_kwargs["snapshot_trace_enabled"] = _env_bool(
                env.get("NEST_SNAPSHOT_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
