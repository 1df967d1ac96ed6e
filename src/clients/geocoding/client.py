"""Geocoding client module: forward and reverse geocoding with caching and throttling.

This module provides a small async client for the Google Geocoding API. Every
call goes through a core.gate.RequestGate, so repeated lookups are answered
from a TTL cache and the calls that do reach the API are throttled by a
token-bucket RateLimiter.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from core.cache import create_cache_key
from core.clock import Clock, system_clock
from core.errors import ExternalServiceError
from core.gate import CacheConfig, RateLimiterConfig, RequestGate
from core.models import (
    Bounds,
    CacheStats,
    GeocodeRequest,
    GeocodeResult,
    LatLng,
    RateLimiterStats,
    ReverseGeocodeRequest,
)

from .inputs import LatLngLike, QueryParts, geocode_query, normalize_api_key, reverse_geocode_query
from .responses import parse_geocode_response


class GeocodingClient:
    """Async Google Geocoding client.

    Purpose:
      - geocode(address=..., components=...) -> List[GeocodeResult]
      - reverse_geocode(latlng=...) -> List[GeocodeResult]
      - get_coordinates(address) / get_address(latlng) convenience lookups

    Key behavior:
      - Identical lookups are served from the cache (the API key is never
        part of the cache key); empty answers are not cached.
      - Calls that reach the API take a rate limiter token first; when the
        bucket is empty callers wait in FIFO order or get RateLimitExceeded.
      - cache=False / rate_limiter=False switch either layer off.
    """

    DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
    JSON_ACCEPT = "application/json"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        verify: bool = True,
        language: Optional[str] = None,
        region: Optional[str] = None,
        cache: CacheConfig = None,
        rate_limiter: RateLimiterConfig = None,
        clock: Clock = system_clock,
    ) -> None:
        self._api_key = normalize_api_key(api_key)
        self._base_url = (base_url or self.DEFAULT_BASE_URL).strip()
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._language = language
        self._region = region

        self._gate = RequestGate(cache=cache, rate_limiter=rate_limiter, clock=clock)

    async def __aenter__(self) -> "GeocodingClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.dispose()

    @property
    def gate(self) -> RequestGate:
        return self._gate

    async def geocode(
        self,
        request: Optional[GeocodeRequest] = None,
        *,
        address: Optional[str] = None,
        components: Optional[Mapping[str, str]] = None,
        bounds: Optional[Bounds] = None,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[GeocodeResult]:
        """Geocode an address and/or component filters to results (possibly empty)."""
        req = request or GeocodeRequest(
            address=address,
            components=components,
            bounds=bounds,
            language=language,
            region=region,
        )
        parts = geocode_query(req, language=self._language, region=self._region)
        return await self._gated_request(parts)

    async def reverse_geocode(
        self,
        request: Optional[ReverseGeocodeRequest] = None,
        *,
        latlng: Optional[LatLngLike] = None,
        result_type: Sequence[str] = (),
        location_type: Sequence[str] = (),
        language: Optional[str] = None,
    ) -> List[GeocodeResult]:
        """Reverse geocode coordinates to results (possibly empty)."""
        req = request or ReverseGeocodeRequest(
            latlng=latlng,  # type: ignore[arg-type]
            result_type=tuple(result_type or ()),
            location_type=tuple(location_type or ()),
            language=language,
        )
        parts = reverse_geocode_query(req, language=self._language)
        return await self._gated_request(parts)

    async def get_coordinates(self, address: str) -> Optional[LatLng]:
        results = await self.geocode(address=address)
        if not results:
            return None
        return results[0].geometry.location

    async def get_address(self, latlng: LatLngLike) -> Optional[str]:
        results = await self.reverse_geocode(latlng=latlng)
        if not results:
            return None
        return results[0].formatted_address

    def clear_cache(self) -> None:
        self._gate.clear_cache()

    def cache_stats(self) -> CacheStats:
        return self._gate.cache_stats()

    def rate_limiter_stats(self) -> RateLimiterStats:
        return self._gate.rate_limiter_stats()

    def dispose(self) -> None:
        self._gate.dispose()

    # --- HTTP helpers ---

    async def _gated_request(self, parts: QueryParts) -> List[GeocodeResult]:
        params, key_fields = parts
        query = {**params, "key": self._api_key}

        async def produce() -> List[GeocodeResult]:
            return await self._request(query)

        results = await self._gate.fetch(create_cache_key(key_fields), produce)
        # Callers get their own list; the cached one stays untouched
        return list(results)

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Accept": self.JSON_ACCEPT},
            timeout=self._timeout,
            verify=self._verify,
        )

    async def _request(self, params: Dict[str, str]) -> List[GeocodeResult]:
        try:
            async with self._create_client() as client:
                resp = await client.get(self._base_url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceError("Request timed out") from e
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise ExternalServiceError("Request failed: response is not valid JSON") from e

        if not isinstance(data, Mapping):
            raise ExternalServiceError("Request failed: unexpected response payload")

        try:
            return parse_geocode_response(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalServiceError(f"Request failed: malformed result ({e})") from e
