"""Shared HTTP utilities: base transport construction and response parsing."""

from __future__ import annotations

from http.cookies import CookieError, SimpleCookie
from typing import Any

import httpx

from .config import DEFAULT_TIMEOUT_SECONDS, DEVICE_ID_HEADER, SESSION_COOKIE_NAME, sanitize_base_url


def build_headers(device_id: str, session_token: str | None = None) -> dict[str, str]:
    """Build default request headers, adding the session cookie when given."""
    headers = {
        "Accept": "application/json",
        DEVICE_ID_HEADER: device_id,
    }
    if session_token is not None:
        headers["Cookie"] = session_cookie(session_token)
    return headers


def session_cookie(session_token: str) -> str:
    return f"{SESSION_COOKIE_NAME}={session_token}"


def build_unauth_client(
    base_url: str,
    device_id: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client used for unauthenticated calls (login options, login)."""
    return httpx.AsyncClient(
        base_url=sanitize_base_url(base_url),
        headers=build_headers(device_id),
        timeout=timeout,
        transport=transport,
    )


def extract_session_token(response: httpx.Response) -> str | None:
    """Return the ``sid`` value from the response's Set-Cookie headers.

    Other cookies in the same header are ignored. Returns None when there is
    no Set-Cookie header or none of them carries a non-empty ``sid``.
    """
    for header in response.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        try:
            cookie.load(header)
        except CookieError:
            continue
        morsel = cookie.get(SESSION_COOKIE_NAME)
        if morsel is not None and morsel.value:
            return morsel.value
    return None


def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON response body; an empty body decodes to None.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    if not response.content:
        return None
    return response.json()
