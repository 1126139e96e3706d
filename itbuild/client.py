"""Asynchronous client for the ItBuild identity service."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx

from ._http import decode_body, extract_session_token
from .config import (
    CLOSE_SESSIONS_PATH,
    DEFAULT_TIMEOUT_SECONDS,
    LOGIN_LOG_PATH,
    LOGIN_OPTIONS_PATH,
    LOGIN_PATH,
    RESULT_FAILURE,
    SESSIONS_PATH,
    USER_KEYS_PATH,
)
from .credentials import resolve_base_url, resolve_device_id
from .exceptions import ConfigurationError
from .result import ErrorObject, Result, err, ok
from .session import AuthSession
from .signing import sign_challenge
from .types import LoginLogEntry, LoginOptions, LoginPayload, Session, UserKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_list(item_type: Callable[[dict[str, Any]], T]) -> Callable[[Any], list[T]]:
    def parse(payload: Any) -> list[T]:
        if not isinstance(payload, list):
            raise TypeError(f"Expected a list, got {type(payload).__name__}")
        return [item_type(item) for item in payload]

    return parse


def _parse_str(payload: Any) -> str:
    if not isinstance(payload, str):
        raise TypeError(f"Expected a string, got {type(payload).__name__}")
    return payload


class ItBuildAuth:
    """Challenge-response login and session management.

    Example:
        >>> import asyncio
        >>> from itbuild import ErrorObject, ItBuildAuth
        >>>
        >>> async def main():
        ...     async with ItBuildAuth(base_url="https://api.example.com/", device_id="dev-1") as auth:
        ...         login = await auth.authenticate_with_user_key("a32be814...")
        ...         if login.error is not None:
        ...             return
        ...         sessions = await auth.get_sessions()
        ...         if sessions.error == ErrorObject.UNAUTHORIZED:
        ...             login = await auth.authenticate_with_user_key("a32be814...")
        >>>
        >>> asyncio.run(main())

    Every method returns a ``Result``; failures are reported through its
    ``error`` field and never raised. An ``UNAUTHORIZED`` error means the
    session expired or was closed; call ``authenticate_with_user_key`` again.
    Nothing is retried automatically.
    """

    def __init__(
        self,
        session: AuthSession | None = None,
        *,
        base_url: str | None = None,
        device_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session: An existing AuthSession. When omitted, one is built from
                the remaining arguments.
            base_url: API base URL. Falls back to ITBUILD_BASE_URL, then the
                config file.
            device_id: Device identifier. Falls back to ITBUILD_DEVICE_ID,
                then the config file, then a generated one.
            timeout: Request timeout in seconds (default: 30).
            transport: Optional httpx transport for every request.

        Raises:
            ConfigurationError: If no base URL is provided or configured.
        """
        if session is None:
            base_url = resolve_base_url(base_url)
            if not base_url:
                raise ConfigurationError(
                    "No base URL provided. Pass base_url, set ITBUILD_BASE_URL, or run 'itbuild auth configure'."
                )
            session = AuthSession(
                base_url,
                resolve_device_id(device_id),
                timeout=timeout,
                transport=transport,
            )
        self._session = session

    @property
    def session(self) -> AuthSession:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    async def authenticate_with_user_key(self, private_key_hex: str) -> Result[httpx.AsyncClient]:
        """Log in by signing the server's challenge with a registered private key.

        On success the session switches to a client carrying the ``sid``
        cookie, which is also returned. On failure the previous state is
        left untouched. Concurrent calls are serialized.

        Cancelling the calling task raises ``asyncio.CancelledError`` as usual;
        it is not turned into a ``Result``.
        """
        async with self._session.login_lock:
            try:
                return await self._login(private_key_hex)
            except httpx.TransportError as e:
                logger.warning("Login failed on transport: %s", e)
                return err(ErrorObject.NETWORK_ERROR)
            except Exception as e:
                logger.warning("Login failed: %s", e)
                return err(ErrorObject.generic(str(e)))

    async def _login(self, private_key_hex: str) -> Result[httpx.AsyncClient]:
        client = self._session.base_client

        response = await client.get(LOGIN_OPTIONS_PATH)
        logger.debug("GET %s -> %s", LOGIN_OPTIONS_PATH, response.status_code)
        if response.is_error:
            return err(ErrorObject.NETWORK_ERROR)
        try:
            data = decode_body(response)
            if data is None:
                return err(ErrorObject.NETWORK_ERROR)
            options = Result.from_envelope(data, LoginOptions.from_dict)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected login options payload: %s", e)
            return err(ErrorObject.SERVER_ERROR)
        if options.error is not None:
            return err(options.error, id=options.id)

        public_key, signature = sign_challenge(private_key_hex, options.result.challenge)
        payload = LoginPayload(
            challenge_id=options.result.challenge_id,
            public_key=public_key,
            signature=signature,
        )

        response = await client.post(LOGIN_PATH, json=payload.to_dict())
        # httpx persists Set-Cookie in the client's jar; the base client must stay anonymous.
        client.cookies.clear()
        logger.debug("POST %s -> %s", LOGIN_PATH, response.status_code)
        if response.status_code != httpx.codes.OK:
            return err(ErrorObject.NETWORK_ERROR)

        try:
            data = decode_body(response)
        except ValueError:
            return err(ErrorObject.SERVER_ERROR)
        if data is None:
            return err(ErrorObject.SERVER_ERROR)

        login = Result.from_envelope(data)
        if login.error is not None:
            return err(login.error, id=login.id)
        if login.result == RESULT_FAILURE:
            return err(ErrorObject.FAILURE, id=login.id)

        session_token = extract_session_token(response)
        if session_token is None:
            logger.warning("Login response carried no session cookie")
            return err(ErrorObject.AUTHENTICATION_ERROR, id=login.id)

        authed_client = self._session.install(session_token)
        await self._session.release_retired()
        logger.info("Authenticated with key %s...", public_key[:8])
        return ok(authed_client, id=login.id)

    async def _get(self, path: str, parse: Callable[[Any], T], **params: Any) -> Result[T]:
        """GET a session-scoped endpoint with the current transport."""
        client = self._session.transport
        try:
            response = await client.get(path, params=params or None)
        except httpx.TransportError as e:
            logger.warning("GET %s failed on transport: %s", path, e)
            return err(ErrorObject.NETWORK_ERROR)
        except Exception as e:
            return err(ErrorObject.generic(str(e)))

        logger.debug("GET %s -> %s", path, response.status_code)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            self._session.invalidate(client)
            return err(ErrorObject.UNAUTHORIZED)
        if response.is_error:
            return err(ErrorObject.NETWORK_ERROR)

        try:
            data = decode_body(response)
        except ValueError:
            return err(ErrorObject.SERVER_ERROR)
        if data is None:
            return err(ErrorObject.NETWORK_ERROR)

        try:
            return Result.from_envelope(data, parse)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected payload from %s: %s", path, e)
            return err(ErrorObject.SERVER_ERROR)

    async def get_user_keys(self) -> Result[list[UserKey]]:
        """List the signing keys registered for the account."""
        return await self._get(USER_KEYS_PATH, _parse_list(UserKey.from_dict))

    async def get_login_log(self) -> Result[list[LoginLogEntry]]:
        """Get the account's login history."""
        return await self._get(LOGIN_LOG_PATH, _parse_list(LoginLogEntry.from_dict))

    async def get_sessions(self) -> Result[list[Session]]:
        """List the account's live sessions; ``current`` marks this one."""
        sessions = await self._get(SESSIONS_PATH, _parse_list(Session.from_dict))
        if sessions.result is not None:
            current = next((s for s in sessions.result if s.current), None)
            if current is not None:
                self._session.current_session_id = current.id
        return sessions

    async def close_sessions(self, session_id: int | None = None) -> Result[str]:
        """Close one session, or every session but the current one.

        Args:
            session_id: Internal id of the session to close. When omitted the
                server closes all sessions except the current one.

        Returns:
            Result wrapping ``"Success"`` or ``"Failure"``. Check both
            ``error`` and ``is_success``: the server may answer a failure
            without an error object.
        """
        if session_id is None:
            closed = await self._get(CLOSE_SESSIONS_PATH, _parse_str)
        else:
            closed = await self._get(CLOSE_SESSIONS_PATH, _parse_str, id=session_id)

        if (
            closed.is_success
            and session_id is not None
            and session_id == self._session.current_session_id
        ):
            self._session.invalidate()
        return closed

    async def aclose(self) -> None:
        """Release the underlying HTTP client resources."""
        await self._session.aclose()

    async def __aenter__(self) -> ItBuildAuth:
        return self

    async def __aexit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        await self.aclose()
