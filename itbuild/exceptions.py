"""Custom exceptions raised by the ItBuild Auth SDK.

Protocol failures are reported as ``Result`` values; these exceptions cover
misuse and configuration problems only.
"""

from __future__ import annotations


class ItBuildSDKError(Exception):
    """Base exception for all SDK specific failures."""


class ConfigurationError(ItBuildSDKError):
    """Raised when the client cannot be configured (e.g. no base URL)."""


class InvalidInputError(ItBuildSDKError, ValueError):
    """Raised when a private key or challenge cannot be decoded."""
