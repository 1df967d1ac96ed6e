"""Immutable dataclasses shared by the gate, the geocoding client and the tools.

Includes the option models for the cache and the rate limiter, the request
models accepted by the client (GeocodeRequest, ReverseGeocodeRequest) and
the result models returned from the Geocoding API.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Tuple


GeocodingStatus = Literal[
    "OK",
    "ZERO_RESULTS",
    "OVER_DAILY_LIMIT",
    "OVER_QUERY_LIMIT",
    "REQUEST_DENIED",
    "INVALID_REQUEST",
    "UNKNOWN_ERROR",
]

LocationType = Literal["ROOFTOP", "RANGE_INTERPOLATED", "GEOMETRIC_CENTER", "APPROXIMATE"]


@dataclass(frozen=True)
class CacheOptions:
    ttl_seconds: float = 3600.0
    max_size: int = 1000


@dataclass(frozen=True)
class RateLimiterOptions:
    max_requests: int = 50
    interval_seconds: float = 1.0
    queue: bool = True
    max_queue_size: int = 100


@dataclass(frozen=True)
class CacheStats:
    size: int
    enabled: bool


@dataclass(frozen=True)
class RateLimiterStats:
    available_tokens: int
    queue_size: int
    enabled: bool


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    northeast: LatLng
    southwest: LatLng


@dataclass(frozen=True)
class GeocodeRequest:
    """Request model for forward geocoding.

    Either address or components must be given.
    """

    address: Optional[str] = None
    components: Optional[Mapping[str, str]] = None
    bounds: Optional[Bounds] = None
    language: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class ReverseGeocodeRequest:
    latlng: LatLng
    result_type: Tuple[str, ...] = ()
    location_type: Tuple[str, ...] = ()
    language: Optional[str] = None


@dataclass(frozen=True)
class AddressComponent:
    long_name: str
    short_name: str
    types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlusCode:
    global_code: str
    compound_code: Optional[str] = None


@dataclass(frozen=True)
class Geometry:
    location: LatLng
    location_type: str
    viewport: Bounds
    bounds: Optional[Bounds] = None


@dataclass(frozen=True)
class GeocodeResult:
    address_components: Tuple[AddressComponent, ...]
    formatted_address: str
    geometry: Geometry
    place_id: str
    types: Tuple[str, ...] = ()
    plus_code: Optional[PlusCode] = None
    postcode_localities: Optional[Tuple[str, ...]] = None
    partial_match: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        return {k: v for k, v in out.items() if v is not None}
