"""Helpers for safe debug logging.

Access tokens end up in revocation URLs and realtime records can be
large, so anything that goes to a DEBUG log passes through here first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "access_token",
        "accesstoken",
        "token",
        "credential",
        "authorization",
        "cookie",
        "password",
        "pin",
        # Camera media URLs embed short-lived auth parameters
        "web_url",
        "app_url",
        "snapshot_url",
    }
)


def mask_token(token: str | None, *, visible: int = 4) -> str:
    """Mask an access token, keeping only its last *visible* characters."""
    if not token:
        return "<none>"
    if len(token) <= visible:
        return "*" * len(token)
    return f"{'*' * 8}{token[-visible:]}"


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a redacted copy of a snapshot value suitable for debug logs.

    Snapshots are JSON trees: values under sensitive keys are replaced,
    long strings are truncated, everything else passes through.
    """
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>"
            if str(key).lower() in _SENSITIVE_VALUE_KEYS
            else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
