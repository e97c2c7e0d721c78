"""Collaborator interfaces and the HTTP revocation transport.

The credential exchange and the realtime store are external
collaborators; they are described here as structural protocols so that
production adapters and test doubles can be passed interchangeably.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

import aiohttp

from pynest._constants import DEFAULT_REVOKE_TIMEOUT, REVOKE_URL_TEMPLATE
from pynest._redact import mask_token
from pynest.exceptions import RevocationError

_logger = logging.getLogger(__name__)


class AuthenticatedChannel(Protocol):
    """An authenticated connection to the realtime store."""

    def on_auth_state_change(self, callback: Callable[[bool], None]) -> None:
        """Register *callback*; it receives ``True``/``False`` on auth transitions."""
        ...

    def sign_out(self) -> None:
        ...


class AuthTransport(Protocol):
    """Exchanges an access token for an authenticated channel."""

    async def exchange_credential(self, token: str) -> AuthenticatedChannel:
        """Raise any exception to signal a rejected credential."""
        ...


class RevocationTransport(Protocol):
    """Invalidates an access token remotely."""

    async def revoke(self, token: str) -> int:
        """Return the HTTP status; raise :class:`RevocationError` on transport failure."""
        ...


class RealtimeSource(Protocol):
    """Push-subscription access to the realtime store."""

    def subscribe(self, path: str) -> AsyncIterator[Any]:
        """Return an infinite stream of full snapshots of the value at *path*."""
        ...

    async def write(self, path: str, value: Any) -> None:
        ...


class HttpRevocationTransport:
    """Revokes access tokens with an HTTP ``DELETE``."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        url_template: str = REVOKE_URL_TEMPLATE,
        timeout: float = DEFAULT_REVOKE_TIMEOUT,
    ) -> None:
        self._http = http_session
        self._url_template = url_template
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def revoke(self, token: str) -> int:
        url = self._url_template.format(token=token)
        _logger.debug("DELETE %s", self._url_template.format(token=mask_token(token)))

        try:
            async with self._http.delete(url, timeout=self._timeout) as resp:
                return resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise RevocationError(f"Revocation request failed: {exc!r}", cause=exc) from exc
