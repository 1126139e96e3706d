"""ItBuild Auth Python SDK - challenge-response login for the ItBuild identity service."""

from importlib.metadata import PackageNotFoundError, version

from .client import ItBuildAuth
from .exceptions import ConfigurationError, InvalidInputError, ItBuildSDKError
from .result import ErrorObject, Result, err, ok
from .session import AuthSession, SessionState
from .signing import sign_challenge
from .types import LoginLogEntry, Session, UserKey

__all__ = [
    "ItBuildAuth",
    "AuthSession",
    "SessionState",
    "Result",
    "ErrorObject",
    "ok",
    "err",
    "sign_challenge",
    "UserKey",
    "Session",
    "LoginLogEntry",
    "ItBuildSDKError",
    "ConfigurationError",
    "InvalidInputError",
]

try:
    __version__ = version("itbuild-auth")
except PackageNotFoundError:
    __version__ = "0.1.0"
