"""
Configuration settings for the Drive text-file proxy
"""

import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

# Use find_dotenv() to locate .env regardless of the current working directory.
# Falls back to an explicit path relative to this file (project root) if not found.
_dotenv_path = find_dotenv(usecwd=True) or str(Path(__file__).resolve().parent.parent.parent / ".env")
load_dotenv(_dotenv_path)

# Numeric settings that failed to parse, reported by validate_config_dependencies().
_UNPARSABLE: dict[str, str] = {}


def _number_env(name: str, default, cast=int):
    """Read a numeric env var without failing at import; bad values fall back to default."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        _UNPARSABLE[name] = raw
        return default


# ============================================
# Environment-based Configuration
# ============================================


class Config:
    """
    Centralized configuration loaded from environment variables.
    Edit .env file to change these values.
    """

    # Google OAuth client (server-side secret, never sent to the browser)
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "").strip()
    GOOGLE_CLIENT_SECRET: str = os.getenv("GOOGLE_CLIENT_SECRET", "").strip()
    REDIRECT_URI: str = os.getenv("REDIRECT_URI", "").strip()

    # Browser origin allowed for credentialed CORS; the OAuth callback redirects here.
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "").strip()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0").strip()
    PORT: int = _number_env("PORT", 0)

    # Outbound calls to Google
    PROVIDER_TIMEOUT_SECONDS: float = _number_env("PROVIDER_TIMEOUT_SECONDS", 30.0, float)
    # Read-only calls only; writes and the code exchange are never retried.
    PROVIDER_RETRIES: int = _number_env("PROVIDER_RETRIES", 2)
    LIST_PAGE_SIZE: int = _number_env("LIST_PAGE_SIZE", 10)


# Singleton instance
config = Config()

REQUIRED_ENV_VARS = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "REDIRECT_URI", "FRONTEND_URL", "PORT")


def validate_env_for_app() -> None:
    """
    Validate required env vars for the proxy service. Call at startup.
    Raises SystemExit with clear message if any required var is missing.
    """
    missing = [k for k in REQUIRED_ENV_VARS if not os.getenv(k, "").strip()]
    if missing:
        msg = f"Missing required env vars: {', '.join(missing)}. Set them in .env or environment."
        raise SystemExit(msg)

    errors = validate_config_dependencies()
    if errors:
        raise SystemExit("Invalid configuration: " + "; ".join(errors))


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_config_dependencies() -> list[str]:
    """Return cross-field configuration errors (empty list when valid)."""
    errors: list[str] = []

    for name, raw in _UNPARSABLE.items():
        errors.append(f"{name} must be a number, got {raw!r}")

    if config.REDIRECT_URI and not _is_http_url(config.REDIRECT_URI):
        errors.append(f"REDIRECT_URI must be an http(s) URL, got {config.REDIRECT_URI!r}")
    if config.FRONTEND_URL and not _is_http_url(config.FRONTEND_URL):
        errors.append(f"FRONTEND_URL must be an http(s) URL, got {config.FRONTEND_URL!r}")

    if "PORT" not in _UNPARSABLE and not 0 < config.PORT < 65536:
        errors.append(f"PORT must be between 1 and 65535, got {config.PORT}")
    if config.PROVIDER_TIMEOUT_SECONDS <= 0:
        errors.append("PROVIDER_TIMEOUT_SECONDS must be positive")
    if config.PROVIDER_RETRIES < 0:
        errors.append("PROVIDER_RETRIES must be zero or greater")
    if not 1 <= config.LIST_PAGE_SIZE <= 1000:
        errors.append(f"LIST_PAGE_SIZE must be between 1 and 1000, got {config.LIST_PAGE_SIZE}")

    return errors


# ============================================
# Static values
# ============================================

APP_TITLE = "Drive Notes"
