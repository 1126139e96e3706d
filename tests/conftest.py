"""Test configuration for ItBuild Auth SDK tests."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from itbuild import ItBuildAuth

BASE_URL = "https://auth.example.com/"
DEVICE_ID = "device-1234"

# Known-answer vector for the Ed25519 signer.
PRIVATE_KEY = "a32be8142c2680590828a64ad46c64bbbe50609de1f23d52cdd69187ad9d62ba"
CHALLENGE = "Wr2GEXAnBhvb59-QodZ-vnpD-bOYHkSq"
PUBLIC_KEY = "AgsHp5s4xWAPbL5sXrLixCNI5k7TgdxPhJtQnwyHvqY"
SIGNATURE = "xRN5OvTl21QazSWGUX-abKEl6RWWC0e6aCscdVUgrPEw21gpw33UhiX4DtomJzYuyIAIaMjt2g8eaumV4AxgCw"


def envelope(result: Any = None, error: dict[str, Any] | None = None, id: int = 0) -> dict[str, Any]:
    return {"result": result, "error": error, "id": id}


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    """Keep tests away from the real config file, keyring and environment."""
    config_path = tmp_path / ".itbuild" / "config.json"
    monkeypatch.setattr("itbuild.credentials.get_config_path", lambda: config_path)
    for var in ("ITBUILD_BASE_URL", "ITBUILD_DEVICE_ID", "ITBUILD_PRIVATE_KEY"):
        monkeypatch.delenv(var, raising=False)
    return config_path


@pytest.fixture
def make_auth() -> Callable[[Callable[[httpx.Request], Any]], ItBuildAuth]:
    """Build an ItBuildAuth whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], Any]) -> ItBuildAuth:
        return ItBuildAuth(
            base_url=BASE_URL,
            device_id=DEVICE_ID,
            transport=httpx.MockTransport(handler),
        )

    return _make


class FakeServer:
    """Minimal in-memory identity service for wire-level tests."""

    def __init__(self, token: str = "XYZ123") -> None:
        self.token = token
        self.challenge_id = 7
        self.challenge = "abc-_def"
        self.requests: list[httpx.Request] = []
        self.login_cookie = f"sid={token}; Path=/"
        self.sessions = [
            {
                "utc_create": "2024-05-01T10:00:00Z",
                "id": 11,
                "user_agent": "python-httpx",
                "ip": "10.0.0.1",
                "login_type": "user_key",
                "current": True,
                "flags": 0,
                "utc_last_access": "2024-05-01T11:00:00Z",
            },
            {
                "utc_create": "2024-04-30T09:00:00Z",
                "id": 12,
                "user_agent": "browser",
                "ip": "10.0.0.2",
                "login_type": "fido2",
                "current": False,
                "flags": 1,
                "utc_last_access": "2024-04-30T09:30:00Z",
            },
        ]

    def authorized(self, request: httpx.Request) -> bool:
        return request.headers.get("cookie") == f"sid={self.token}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/v1/login_options":
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "challenge_id": self.challenge_id,
                        "challenge": self.challenge,
                        "rpId": "auth.example.com",
                        "timeout": 60000,
                        "userVerification": "preferred",
                        "fido2_options": None,
                    }
                ),
            )
        if path == "/auth/v1/login":
            return httpx.Response(200, json=envelope("Success"), headers={"set-cookie": self.login_cookie})

        if not self.authorized(request):
            return httpx.Response(401)

        if path == "/auth/v1/sessions":
            return httpx.Response(200, json=envelope(self.sessions))
        if path == "/auth/v1/user_keys":
            return httpx.Response(
                200,
                json=envelope(
                    [
                        {
                            "utc_create": "2024-01-01T00:00:00Z",
                            "id": 3,
                            "public_key": "AgsHp5s4xWAPbL5sXrLixCNI5k7TgdxPhJtQnwyHvqY",
                            "key_type": "user_key",
                            "current": True,
                        }
                    ]
                ),
            )
        if path == "/auth/v1/login_log":
            return httpx.Response(
                200,
                json=envelope(
                    [
                        {
                            "utc_time": "2024-05-01T10:00:00.1234567+00:00",
                            "key_id": 3,
                            "key_sign_num": 42,
                            "ip": "10.0.0.1",
                            "device_info": "device-1234",
                            "login_type": "user_key",
                        }
                    ]
                ),
            )
        if path == "/auth/v1/close_sessions":
            return httpx.Response(200, json=envelope("Success"))
        return httpx.Response(404)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()
