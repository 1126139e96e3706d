"""Connection settings and private key storage for the ItBuild Auth SDK.

Non-secret settings (base URL, device id) live in ~/.itbuild/config.json with
restrictive permissions. The private key is never written to that file; it
is kept in the system keyring when one is available.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any

from .config import BASE_URL_ENV, DEVICE_ID_ENV, PRIVATE_KEY_ENV

logger = logging.getLogger(__name__)

CONFIG_DIR = ".itbuild"
CONFIG_FILE = "config.json"
KEYRING_SERVICE_NAME = "itbuild-auth"
KEYRING_USERNAME = "private_key"


def get_config_path() -> Path:
    return Path.home() / CONFIG_DIR / CONFIG_FILE


def load_config() -> dict[str, Any] | None:
    """Load config from ~/.itbuild/config.json.

    Returns None if file doesn't exist, is corrupt, or is not a dict.
    """
    config_path = get_config_path()
    if not config_path.exists():
        return None
    try:
        data = json.loads(config_path.read_text())
        if not isinstance(data, dict):
            return None
        return data
    except (json.JSONDecodeError, OSError):
        return None


def save_config(*, base_url: str | None = None, device_id: str | None = None) -> None:
    """Merge settings into ~/.itbuild/config.json with an atomic write.

    - Directory: 0700 (owner read/write/execute only)
    - File: 0600 (owner read/write only)
    """
    data = load_config() or {}
    if base_url is not None:
        data["base_url"] = base_url
    if device_id is not None:
        data["device_id"] = device_id

    config_path = get_config_path()
    config_dir = config_path.parent
    config_dir.mkdir(parents=True, exist_ok=True)
    os.chmod(config_dir, 0o700)

    fd, tmp_path = tempfile.mkstemp(dir=config_dir, prefix=".config_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(data, indent=2))
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, config_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def clear_config() -> None:
    """Delete the config file if it exists."""
    config_path = get_config_path()
    if config_path.exists():
        config_path.unlink()


def _config_value(key: str) -> str | None:
    config = load_config()
    value = config.get(key) if config else None
    if isinstance(value, str) and value.strip():
        return value
    return None


def resolve_base_url(base_url: str | None = None) -> str | None:
    """Resolve the API base URL: explicit > ITBUILD_BASE_URL > config file."""
    return base_url or os.environ.get(BASE_URL_ENV) or _config_value("base_url")


def resolve_device_id(device_id: str | None = None, *, persist: bool = True) -> str:
    """Resolve the device id: explicit > ITBUILD_DEVICE_ID > config file.

    When none is found a random one is generated and, if ``persist`` is set,
    saved so the installation keeps the same identifier.
    """
    resolved = device_id or os.environ.get(DEVICE_ID_ENV) or _config_value("device_id")
    if resolved:
        return resolved

    generated = str(uuid.uuid4())
    if persist:
        try:
            save_config(device_id=generated)
        except OSError as e:
            logger.warning("Could not persist generated device id: %s", e)
    return generated


def get_stored_private_key() -> str | None:
    """Read the private key from the system keyring, if available."""
    try:
        import keyring

        return keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME)
    except Exception as e:
        logger.debug("Keyring unavailable: %s", e)
        return None


def store_private_key(private_key_hex: str) -> bool:
    """Store the private key in the system keyring. Returns False if unavailable."""
    try:
        import keyring

        keyring.set_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME, private_key_hex)
        return True
    except Exception as e:
        logger.debug("Keyring unavailable: %s", e)
        return False


def delete_private_key() -> bool:
    """Remove the private key from the system keyring. Returns False if nothing was removed."""
    try:
        import keyring

        keyring.delete_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME)
        return True
    except Exception as e:
        logger.debug("Keyring unavailable: %s", e)
        return False


def resolve_private_key(private_key_hex: str | None = None) -> str | None:
    """Resolve the private key: explicit > ITBUILD_PRIVATE_KEY > system keyring.

    Returns None if no key is found (caller decides error behavior).
    """
    if private_key_hex and private_key_hex.strip():
        return private_key_hex.strip()

    env_key = os.environ.get(PRIVATE_KEY_ENV)
    if env_key and env_key.strip():
        return env_key.strip()

    return get_stored_private_key()
