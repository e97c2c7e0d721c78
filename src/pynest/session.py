"""Session state management for authenticated realtime access."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable

from pynest._constants import EVENT_AUTHENTICATED, EVENT_UNAUTHENTICATED
from pynest._events import EventEmitter
from pynest._redact import mask_token
from pynest._transport import AuthenticatedChannel, AuthTransport, RevocationTransport
from pynest.exceptions import AuthFailureError, NoCredentialError, RevocationError

_logger = logging.getLogger(__name__)


class SessionState(enum.StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class Session:
    """Owns one access token and the authenticated channel derived from it.

    Every remote read-subscription and every write calls
    :meth:`authenticate` first.  The call is idempotent and concurrent
    callers share a single in-flight credential exchange, which makes it
    the only serialization point for the shared channel.

    Parameters
    ----------
    auth_transport : AuthTransport
        Exchanges the token for an :class:`AuthenticatedChannel`.
    revocation : RevocationTransport or None
        Used by :meth:`revoke`.
    credential : str or None
        Access token; may also be supplied to :meth:`authenticate`.
    """

    def __init__(
        self,
        auth_transport: AuthTransport,
        revocation: RevocationTransport | None = None,
        *,
        credential: str | None = None,
    ) -> None:
        self._auth = auth_transport
        self._revocation = revocation
        self._credential = credential
        self._state = SessionState.UNAUTHENTICATED
        self._channel: AuthenticatedChannel | None = None
        self._inflight: asyncio.Task[None] | None = None
        # Bumped by revoke(); an exchange started under an older value is discarded.
        self._generation = 0
        self._last_notified: bool | None = None
        self._events = EventEmitter()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    @property
    def has_credential(self) -> bool:
        return bool(self._credential)

    @property
    def channel(self) -> AuthenticatedChannel | None:
        return self._channel

    @property
    def revocation(self) -> RevocationTransport | None:
        return self._revocation

    @revocation.setter
    def revocation(self, transport: RevocationTransport | None) -> None:
        self._revocation = transport

    def on(self, event: str, callback: Callable[[], None]) -> Callable[[], None]:
        """Listen for ``authenticated`` / ``unauthenticated``."""
        return self._events.on(event, callback)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def authenticate(self, credential: str | None = None) -> None:
        """Ensure the session is authenticated.

        Stores *credential* when given.  Returns immediately when already
        authenticated; joins the pending exchange when one is in flight.

        Raises
        ------
        NoCredentialError
            No token was supplied now or before.
        AuthFailureError
            The remote exchange rejected the token.
        """
        if credential:
            self._credential = credential

        if self._state == SessionState.AUTHENTICATED and self._channel is not None:
            return

        if self._inflight is None:
            if not self._credential:
                raise NoCredentialError("No access token available")
            self._state = SessionState.AUTHENTICATING
            self._inflight = asyncio.create_task(self._exchange(self._credential, self._generation))

        # Shield so a cancelled caller does not abort the exchange for the others.
        await asyncio.shield(self._inflight)

    async def _exchange(self, token: str, generation: int) -> None:
        _logger.debug("Exchanging access token %s", mask_token(token))
        try:
            channel = await self._auth.exchange_credential(token)
        except Exception as exc:
            if generation == self._generation:
                self._state = SessionState.UNAUTHENTICATED
            _logger.error("Authentication failed: %s", exc)
            raise AuthFailureError(f"Authentication failed: {exc}", cause=exc) from exc
        finally:
            if generation == self._generation:
                self._inflight = None

        if generation != self._generation:
            _logger.info("Discarding channel from an exchange that was revoked while in flight")
            self._sign_out(channel)
            raise AuthFailureError("Authentication was revoked while in flight")

        self._channel = channel
        self._state = SessionState.AUTHENTICATED
        channel.on_auth_state_change(lambda authenticated: self._on_auth_state_change(channel, authenticated))
        _logger.info("Authentication successful")
        self._notify(True)

    def _on_auth_state_change(self, channel: AuthenticatedChannel, authenticated: bool) -> None:
        if channel is not self._channel:
            return
        if authenticated:
            self._state = SessionState.AUTHENTICATED
        else:
            _logger.info("Channel reported loss of authentication")
            self._channel = None
            self._state = SessionState.UNAUTHENTICATED
        self._notify(authenticated)

    @staticmethod
    def _sign_out(channel: AuthenticatedChannel) -> None:
        try:
            channel.sign_out()
        except Exception:
            _logger.warning("Local sign-out failed", exc_info=True)

    def _notify(self, authenticated: bool) -> None:
        if self._last_notified is authenticated:
            return
        self._last_notified = authenticated
        self._events.emit(EVENT_AUTHENTICATED if authenticated else EVENT_UNAUTHENTICATED)

    # ------------------------------------------------------------------
    # Revocation
    # ------------------------------------------------------------------

    async def revoke(self) -> None:
        """Tear down the channel locally, then invalidate the token remotely.

        Local teardown always happens first, so a failing remote call
        still leaves the session signed out.

        Raises
        ------
        NoCredentialError
            There is no token to revoke.
        RevocationError
            Non-2xx status or transport failure.
        """
        channel = self._channel
        self._channel = None
        self._state = SessionState.UNAUTHENTICATED
        self._generation += 1
        self._inflight = None
        if channel is not None:
            self._sign_out(channel)
        if self._last_notified:
            self._notify(False)

        if not self._credential:
            raise NoCredentialError("No access token to revoke")
        if self._revocation is None:
            raise RevocationError("No revocation transport configured")

        try:
            status = await self._revocation.revoke(self._credential)
        except RevocationError:
            _logger.error("Failed to revoke authentication", exc_info=True)
            raise
        except Exception as exc:
            _logger.error("Failed to revoke authentication: %s", exc)
            raise RevocationError(f"Revocation failed: {exc}", cause=exc) from exc

        if not 200 <= status < 300:
            _logger.error("Failed to revoke authentication: HTTP %s", status)
            raise RevocationError(f"Revocation rejected with HTTP {status}", status_code=status)

        _logger.info("Authentication revoked")
