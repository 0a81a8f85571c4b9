"""
Environment-backed settings.

Values are read on each call so tests can patch the environment.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def raw_database_url() -> str:
    # Empty string means "not configured"; core.db decides how to fail.
    return _env_str("DATABASE_URL")


def pool_min_size() -> int:
    return max(0, _env_int("DB_POOL_MIN_SIZE", 1))


def pool_max_size() -> int:
    return max(1, pool_min_size(), _env_int("DB_POOL_MAX_SIZE", 5))


def connect_timeout() -> float:
    return _env_float("DB_CONNECT_TIMEOUT", 10.0)


def command_timeout() -> float:
    return _env_float("DB_COMMAND_TIMEOUT", 30.0)


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
