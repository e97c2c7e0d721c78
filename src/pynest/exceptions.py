"""Custom exception hierarchy for pynest."""

from __future__ import annotations


class NestError(Exception):
    """Base exception for all pynest errors."""


class NestConfigError(NestError):
    """Invalid or missing configuration."""


class NoCredentialError(NestError):
    """No access token was supplied or stored."""


class AuthFailureError(NestError):
    """The remote store rejected the credential exchange."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class RevocationError(NestError):
    """Revoking the access token failed (non-2xx status or transport error)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.status_code = status_code
        self.cause = cause
        super().__init__(message)


class NotFoundError(NestError):
    """No registry entry exists for the requested category/identifier."""

    def __init__(self, message: str, *, category: str = "", device_id: str = "") -> None:
        self.category = category
        self.device_id = device_id
        super().__init__(message)


class PreconditionError(NestError):
    """A command was rejected locally by a device-state rule.

    Raised before any remote write is attempted, so a rejected command
    never mutates remote state.  ``bounds`` is set to ``(min, max)`` when
    the rejection is caused by a locked temperature range.
    """

    def __init__(
        self,
        reason: str,
        *,
        bounds: tuple[float | None, float | None] | None = None,
    ) -> None:
        self.reason = reason
        self.bounds = bounds
        super().__init__(reason)


class MalformedSnapshotError(NestError):
    """A snapshot entry is missing required identity fields.

    Internal: the registry catches this and drops the entry. Partial
    records are expected from the realtime feed, so consumers never see it.
    """
