"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (API key,
Geocoding endpoint, timeouts, cache and rate limiter settings).
"""

from __future__ import annotations

import os
from typing import Literal, Optional, Union

from core.models import CacheOptions, RateLimiterOptions


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str) -> Optional[str]:
    raw = (os.environ.get(name) or "").strip()
    return raw or None


# Geocoding API
GOOGLE_MAPS_API_KEY = (os.environ.get("GOOGLE_MAPS_API_KEY") or "").strip()
GEOCODER_BASE_URL = os.environ.get(
    "GEOCODER_BASE_URL", "https://maps.googleapis.com/maps/api/geocode/json"
).strip()
GEOCODER_TIMEOUT = _env_float("GEOCODER_TIMEOUT", 10.0)
GEOCODER_LANGUAGE = _env_str("GEOCODER_LANGUAGE")
GEOCODER_REGION = _env_str("GEOCODER_REGION")

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# Cache
CACHE_ENABLED = _env_bool("CACHE_ENABLED", True)
CACHE_TTL_SECONDS = _env_float("CACHE_TTL_SECONDS", 3600.0)
CACHE_MAX_SIZE = _env_int("CACHE_MAX_SIZE", 1000)

# Rate limiter
RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
RATE_LIMIT_MAX_REQUESTS = _env_int("RATE_LIMIT_MAX_REQUESTS", 50)
RATE_LIMIT_INTERVAL = _env_float("RATE_LIMIT_INTERVAL", 1.0)
RATE_LIMIT_QUEUE = _env_bool("RATE_LIMIT_QUEUE", True)
RATE_LIMIT_MAX_QUEUE_SIZE = _env_int("RATE_LIMIT_MAX_QUEUE_SIZE", 100)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip()


def cache_options() -> Union[CacheOptions, Literal[False]]:
    if not CACHE_ENABLED:
        return False
    return CacheOptions(ttl_seconds=CACHE_TTL_SECONDS, max_size=CACHE_MAX_SIZE)


def rate_limiter_options() -> Union[RateLimiterOptions, Literal[False]]:
    if not RATE_LIMIT_ENABLED:
        return False
    return RateLimiterOptions(
        max_requests=RATE_LIMIT_MAX_REQUESTS,
        interval_seconds=RATE_LIMIT_INTERVAL,
        queue=RATE_LIMIT_QUEUE,
        max_queue_size=RATE_LIMIT_MAX_QUEUE_SIZE,
    )
