"""Factory building a GeocodingClient from the environment configuration.

Exposes create_geocoding_client which wires API key, endpoint, timeouts,
cache and rate limiter options from config; keyword overrides win.
"""

from __future__ import annotations

from typing import Any

import config

from .client import GeocodingClient


def create_geocoding_client(**overrides: Any) -> GeocodingClient:
    kwargs: dict[str, Any] = {
        "api_key": config.GOOGLE_MAPS_API_KEY,
        "base_url": config.GEOCODER_BASE_URL,
        "timeout": config.GEOCODER_TIMEOUT,
        "verify": config.HTTP_VERIFY,
        "language": config.GEOCODER_LANGUAGE,
        "region": config.GEOCODER_REGION,
        "cache": config.cache_options(),
        "rate_limiter": config.rate_limiter_options(),
    }
    kwargs.update(overrides)
    return GeocodingClient(**kwargs)
