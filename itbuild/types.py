"""Typed records exchanged with the identity service."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# .NET emits up to 7 fractional digits; older datetime.fromisoformat wants exactly 3 or 6.
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the wire into an aware UTC datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class LoginOptions:
    """Challenge issued by ``auth/v1/login_options``."""

    challenge_id: int
    challenge: str
    rp_id: str | None = None
    timeout: int | None = None
    user_verification: str | None = None
    fido2_options: Any = None
    phone: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoginOptions:
        return cls(
            challenge_id=int(data["challenge_id"]),
            challenge=str(data["challenge"]),
            rp_id=data.get("rpId"),
            timeout=data.get("timeout"),
            user_verification=data.get("userVerification"),
            fido2_options=data.get("fido2_options"),
            phone=data.get("phone"),
        )


@dataclass(frozen=True)
class LoginPayload:
    """Signed challenge submitted to ``auth/v1/login``."""

    challenge_id: int
    public_key: str
    signature: str
    credential: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "challenge_id": self.challenge_id,
            "credential": self.credential,
            "public_key": self.public_key,
            "signature": self.signature,
        }


@dataclass
class UserKey:
    """A signing key registered for the account."""

    id: int
    public_key: str
    key_type: str
    created_at: datetime | None = None
    current: bool = False  # key used for the active session

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserKey:
        return cls(
            id=int(data["id"]),
            public_key=data.get("public_key", ""),
            key_type=data.get("key_type", ""),
            created_at=parse_timestamp(data.get("utc_create")),
            current=bool(data.get("current", False)),
        )


@dataclass
class LoginLogEntry:
    """One row of the account's login history."""

    time: datetime | None
    key_id: int
    key_sign_num: int
    ip: str | None = None
    device_info: str | None = None
    login_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoginLogEntry:
        return cls(
            time=parse_timestamp(data.get("utc_time")),
            key_id=int(data.get("key_id", 0)),
            key_sign_num=int(data.get("key_sign_num", 0)),
            ip=data.get("ip"),
            device_info=data.get("device_info"),
            login_type=data.get("login_type"),
        )


@dataclass
class Session:
    """A live server-side session."""

    id: int
    user_agent: str | None = None
    ip: str | None = None
    login_type: str | None = None
    current: bool = False  # session tied to the caller's token
    flags: int = 0
    created_at: datetime | None = None
    last_access_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            id=int(data["id"]),
            user_agent=data.get("user_agent"),
            ip=data.get("ip"),
            login_type=data.get("login_type"),
            current=bool(data.get("current", False)),
            flags=int(data.get("flags") or 0),
            created_at=parse_timestamp(data.get("utc_create")),
            last_access_at=parse_timestamp(data.get("utc_last_access")),
        )
