"""
Configuration — environment-driven settings.

    from storesync.config import Settings, configure_logging

    configure_logging()
    settings = Settings.from_env()

Values come from the process environment, optionally seeded from a `.env`
file. Every key has a `STORESYNC_` name and a short legacy alias.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

DEFAULT_USER_AGENT = "FarmingApp/1.0 (Python Sync Client)"


# ═══════════════════════════════════════════════════════════════════════════════
# Env helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    value = _get_env(*keys)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(*keys: str, default: float) -> float:
    value = _get_env(*keys)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Runtime settings.

    Durations are in seconds. `max_retries` counts retries after the first
    attempt, so a GET is tried at most `1 + max_retries` times.
    """

    base_url: str = "http://localhost:5000"
    timeout: float = 60.0
    max_retries: int = 3
    retry_delay: float = 1.0
    order_attempts: int = 2
    order_retry_delay: float = 1.0
    health_timeout: float = 10.0
    db_url: str = "sqlite+aiosqlite:///storesync.db"
    namespace: str = "AgriMart"
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, env_file: str | None = None) -> Settings:
        load_dotenv(env_file)
        d = cls()
        return cls(
            base_url=(_get_env("STORESYNC_BASE_URL", "API_BASE_URL", default=d.base_url) or d.base_url).rstrip("/"),
            timeout=_get_float("STORESYNC_TIMEOUT", "API_TIMEOUT", default=d.timeout),
            max_retries=max(0, _get_int("STORESYNC_MAX_RETRIES", "MAX_RETRIES", default=d.max_retries)),
            retry_delay=_get_float("STORESYNC_RETRY_DELAY", "RETRY_DELAY", default=d.retry_delay),
            order_attempts=max(1, _get_int("STORESYNC_ORDER_ATTEMPTS", default=d.order_attempts)),
            order_retry_delay=_get_float("STORESYNC_ORDER_RETRY_DELAY", default=d.order_retry_delay),
            health_timeout=_get_float("STORESYNC_HEALTH_TIMEOUT", default=d.health_timeout),
            db_url=_get_env("STORESYNC_DB_URL", "DATABASE_URL", default=d.db_url) or d.db_url,
            namespace=_get_env("STORESYNC_NAMESPACE", default=d.namespace) or d.namespace,
            user_agent=_get_env("STORESYNC_USER_AGENT", default=d.user_agent) or d.user_agent,
        )


def configure_logging(level: int | str | None = None) -> None:
    """Install the package log format on the root logger."""
    if level is None:
        level = _get_env("STORESYNC_LOG_LEVEL", "LOG_LEVEL", default="INFO") or "INFO"
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = (
    "Settings",
    "configure_logging",
    "LOG_FORMAT",
    "DEFAULT_USER_AGENT",
)
