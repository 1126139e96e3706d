"""Session state: the current transport handle and its authentication state.

The session owns every ``httpx.AsyncClient`` it hands out. A successful login
never mutates the current client; it builds a new one carrying the session
cookie and swaps it in. Calls that already hold the previous client keep
using it (and its, possibly stale, credential) until they finish.

Logins must not interleave: the last one to finish would silently replace
the token installed by the other. ``login_lock`` serializes them.
"""

from __future__ import annotations

import asyncio
import enum
import logging

import httpx

from ._http import build_unauth_client, session_cookie
from .config import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthSession:
    """Holds the base connection parameters and the current transport.

    Args:
        base_url: Base URL of the identity service API.
        device_id: Per-installation identifier sent on every request.
        timeout: Request timeout in seconds, applied to every client built.
        transport: Optional httpx transport shared by every client built
            (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        device_id: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._device_id = device_id
        self._timeout = timeout
        self._transport = transport
        self._base_client = build_unauth_client(base_url, device_id, timeout=timeout, transport=transport)
        self._current = self._base_client
        self._state = SessionState.UNAUTHENTICATED
        self._retired: list[httpx.AsyncClient] = []
        self.current_session_id: int | None = None
        self.login_lock = asyncio.Lock()

    @property
    def base_url(self) -> httpx.URL:
        return self._base_client.base_url

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def base_client(self) -> httpx.AsyncClient:
        """Client without session credentials, used for the login exchange."""
        return self._base_client

    @property
    def transport(self) -> httpx.AsyncClient:
        """Client for session-scoped calls; authenticated once a login succeeds."""
        return self._current

    def install(self, session_token: str) -> httpx.AsyncClient:
        """Build an authenticated client for ``session_token`` and make it current.

        The new client copies the base client's URL and default headers
        (device identifier included) and adds the session cookie.
        """
        headers = self._base_client.headers.copy()
        headers["Cookie"] = session_cookie(session_token)
        client = httpx.AsyncClient(
            base_url=self._base_client.base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )

        previous = self._current
        self._current = client
        self._state = SessionState.AUTHENTICATED
        self.current_session_id = None
        if previous is not self._base_client:
            self._retired.append(previous)

        logger.debug("Installed authenticated transport for %s", self.base_url)
        return client

    def invalidate(self, client: httpx.AsyncClient | None = None) -> None:
        """Drop the session credential; the caller decides when to log in again.

        When ``client`` is given, the session is only dropped if that client is
        still current, so a 401 seen on a stale client cannot undo a newer login.
        """
        if self._state is SessionState.UNAUTHENTICATED:
            return
        if client is not None and client is not self._current:
            return
        if self._current is not self._base_client:
            self._retired.append(self._current)
        self._current = self._base_client
        self._state = SessionState.UNAUTHENTICATED
        self.current_session_id = None
        logger.info("Session for %s is no longer authenticated", self.base_url)

    async def release_retired(self) -> None:
        """Close replaced clients, keeping only the most recently replaced one open.

        A call that read ``transport`` just before a login or invalidation may
        still be using the last replaced client. Clients built on a
        caller-supplied transport share its pool and are only dropped here;
        ``aclose`` closes that transport.
        """
        stale, self._retired = self._retired[:-1], self._retired[-1:]
        if self._transport is not None:
            return
        for client in stale:
            await client.aclose()
        if stale:
            logger.debug("Closed %d replaced transport(s)", len(stale))

    async def aclose(self) -> None:
        """Release every client this session created."""
        clients = [*self._retired, self._current, self._base_client]
        self._retired = []
        closed: set[int] = set()
        for client in clients:
            if id(client) in closed:
                continue
            closed.add(id(client))
            await client.aclose()
