"""Runtime configuration helpers sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import FrozenSet, Tuple


_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}

DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5000",
)


def parse_duration(value: str | None, default: timedelta) -> timedelta:
    """Parse '30m', '7d', '12h', '45s' or a bare number of minutes.

    Falls back to ``default`` on blank, malformed or non-positive input.
    """
    raw = (value or "").strip().lower()
    if not raw:
        return default
    unit = "m"
    if raw[-1] in _DURATION_UNITS:
        unit = raw[-1]
        raw = raw[:-1]
    try:
        amount = int(raw)
    except ValueError:
        return default
    if amount <= 0:
        return default
    return timedelta(**{_DURATION_UNITS[unit]: amount})


def _int_env(name: str, default: int, *, minimum: int = 0) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default
    return value if value >= minimum else default


def _normalize_list_env(var_name: str) -> FrozenSet[str]:
    raw = os.getenv(var_name, "")
    values = set()
    for entry in raw.split(","):
        cleaned = entry.strip().strip('"').strip("'")
        if cleaned:
            values.add(cleaned.lower())
    return frozenset(values)


@dataclass(frozen=True)
class AuthSettings:
    jwt_secret: str
    jwt_algorithm: str
    jwt_expires_in: timedelta
    max_login_attempts: int
    lockout_duration: timedelta
    admin_emails: FrozenSet[str]


@dataclass(frozen=True)
class RateLimitSettings:
    max_requests: int
    window: timedelta

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0


@dataclass(frozen=True)
class AppSettings:
    environment: str
    cors_origins: Tuple[str, ...]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=None)
def get_auth_settings() -> AuthSettings:
    """Return cached authentication settings; raises if JWT_SECRET is missing."""
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET environment variable is not set")
    return AuthSettings(
        jwt_secret=secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_in=parse_duration(os.getenv("JWT_EXPIRES_IN"), timedelta(days=7)),
        max_login_attempts=_int_env("MAX_LOGIN_ATTEMPTS", 5, minimum=1),
        lockout_duration=parse_duration(os.getenv("LOCKOUT_TIME"), timedelta(minutes=30)),
        admin_emails=_normalize_list_env("ADMIN_EMAILS"),
    )


@lru_cache(maxsize=None)
def get_rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings(
        max_requests=_int_env("RATE_LIMIT_MAX_REQUESTS", 100),
        window=parse_duration(os.getenv("RATE_LIMIT_WINDOW"), timedelta(minutes=15)),
    )


@lru_cache(maxsize=None)
def get_app_settings() -> AppSettings:
    origins = tuple(
        o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()
    )
    return AppSettings(
        environment=os.getenv("APP_ENV", "development").strip().lower(),
        cors_origins=origins or DEFAULT_CORS_ORIGINS,
    )


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_auth_settings.cache_clear()
    get_rate_limit_settings.cache_clear()
    get_app_settings.cache_clear()
