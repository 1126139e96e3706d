"""Configuration helpers for the ItBuild Auth SDK."""

from __future__ import annotations

DEFAULT_TIMEOUT_SECONDS = 30.0

# Every request carries the device identifier, authenticated or not.
DEVICE_ID_HEADER = "device_guid"
SESSION_COOKIE_NAME = "sid"

# Endpoint paths are relative to the base URL.
LOGIN_OPTIONS_PATH = "auth/v1/login_options"
LOGIN_PATH = "auth/v1/login"
USER_KEYS_PATH = "auth/v1/user_keys"
LOGIN_LOG_PATH = "auth/v1/login_log"
SESSIONS_PATH = "auth/v1/sessions"
CLOSE_SESSIONS_PATH = "auth/v1/close_sessions"

# Envelope sentinels returned as the ``result`` payload
RESULT_SUCCESS = "Success"
RESULT_FAILURE = "Failure"

BASE_URL_ENV = "ITBUILD_BASE_URL"
DEVICE_ID_ENV = "ITBUILD_DEVICE_ID"
PRIVATE_KEY_ENV = "ITBUILD_PRIVATE_KEY"


def sanitize_base_url(url: str) -> str:
    """Ensure the base URL ends with exactly one trailing slash.

    Endpoint paths are relative, so the slash keeps any base path
    (``https://host/proxy/``) in front of them.
    """

    return url.rstrip("/") + "/"
