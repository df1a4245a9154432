"""Centralized API and credential configuration.

Credentials are read from the environment:
    VIMEO_CLIENT_ID       - OAuth 2 client identifier
    VIMEO_CLIENT_SECRET   - OAuth 2 client secret
    VIMEO_ACCESS_TOKEN    - Optional pre-authorized access token

This module auto-loads a .env file from the current working directory on
import. Variables already set in the environment take precedence.
"""

import os
from pathlib import Path

from vimeo_utils import __version__

VIMEO_HOSTNAME = "api.vimeo.com"
API_BASE_URL = f"https://{VIMEO_HOSTNAME}"

AUTH_ENDPOINTS = {
    "authorization": "/oauth/authorize",
    "access_token": "/oauth/access_token",
    "client_credentials": "/oauth/authorize/client",
}

DEFAULT_HEADERS = {
    "Accept": "application/vnd.vimeo.*+json;version=3.4",
    "User-Agent": f"vimeo-utils/{__version__}",
}

DEFAULT_SCOPE = "public"

# Methods that carry a body and default to a JSON content type
JSON_BODY_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})

# Delays (ms) between attempts after a transient transfer fault
UPLOAD_RETRY_DELAYS = (0, 1000, 3000, 5000)

ENV_FILE = Path.cwd() / ".env"

CLIENT_ID_VAR = "VIMEO_CLIENT_ID"
CLIENT_SECRET_VAR = "VIMEO_CLIENT_SECRET"
ACCESS_TOKEN_VAR = "VIMEO_ACCESS_TOKEN"


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Split a KEY=value line, ignoring blanks, comments and `export `."""
    line = line.strip()
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, _, value = line.partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key.strip(), value


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load VIMEO_* and other variables from a .env file.

    Variables already present in the environment are left untouched.

    Returns:
        Dictionary of variables this call added to the environment.
    """
    if not env_path.is_file():
        return {}

    loaded = {}
    for raw in env_path.read_text().splitlines():
        entry = _parse_env_line(raw)
        if entry is None:
            continue
        key, value = entry
        if key and key not in os.environ:
            os.environ[key] = value
            loaded[key] = value
    return loaded


def get_env_credentials() -> dict[str, str | None]:
    """Get credentials configured through the environment."""
    return {
        "client_id": os.environ.get(CLIENT_ID_VAR),
        "client_secret": os.environ.get(CLIENT_SECRET_VAR),
        "access_token": os.environ.get(ACCESS_TOKEN_VAR),
    }


def get_credential_status() -> dict:
    """Get status of all configured credentials.

    Returns:
        Dictionary with credential status.
    """
    return {
        "env_file": ENV_FILE.exists(),
        "vimeo": {name: bool(value) for name, value in get_env_credentials().items()},
    }


# Auto-load .env on import
_loaded = _load_env_file(ENV_FILE)
