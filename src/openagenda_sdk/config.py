"""Credential configuration from the environment.

Credentials are read from environment variables:
    OPENAGENDA_PUBLIC_KEY   - public key, sent with every request
    OPENAGENDA_SECRET_KEY   - secret key, needed for create/update/delete

A ``.env`` file is loaded on import (``OPENAGENDA_ENV_FILE`` or ``./.env``).
Only ``OPENAGENDA_*`` keys are taken from it, and variables already
present in the environment take precedence.
"""

import os
from pathlib import Path

PUBLIC_KEY_VAR = "OPENAGENDA_PUBLIC_KEY"
SECRET_KEY_VAR = "OPENAGENDA_SECRET_KEY"
ENV_FILE_VAR = "OPENAGENDA_ENV_FILE"
ENV_PREFIX = "OPENAGENDA_"

ENV_FILE = Path(os.environ.get(ENV_FILE_VAR, ".env"))


def _parse_line(line: str) -> tuple[str, str] | None:
    """Split a ``KEY=value`` line, ignoring comments and ``export`` prefixes."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    line = line.removeprefix("export ").lstrip()
    key, sep, value = line.partition("=")
    if not sep or not key.strip():
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key.strip(), value


def load_env_file(env_path: Path, prefix: str = ENV_PREFIX) -> dict[str, str]:
    """Copy ``prefix``-named variables from a .env file into ``os.environ``.

    Other keys in the file are left alone, as are variables that are
    already set.

    Args:
        env_path: Path to .env file.
        prefix: Only keys starting with this are loaded.

    Returns:
        Dictionary of loaded variables.
    """
    if not env_path.is_file():
        return {}

    with open(env_path) as f:
        pairs = [pair for pair in map(_parse_line, f) if pair]

    loaded = {
        key: value
        for key, value in pairs
        if key.startswith(prefix) and key not in os.environ
    }
    os.environ.update(loaded)
    return loaded


def get_public_key() -> str | None:
    return os.environ.get(PUBLIC_KEY_VAR) or None


def get_secret_key() -> str | None:
    return os.environ.get(SECRET_KEY_VAR) or None


def get_credential_status() -> dict:
    """Get status of the configured credentials.

    Returns:
        Dictionary with credential status.
    """
    return {
        "env_file": str(ENV_FILE),
        "env_file_exists": ENV_FILE.is_file(),
        "public_key": bool(get_public_key()),
        "secret_key": bool(get_secret_key()),
    }


_loaded = load_env_file(ENV_FILE)
