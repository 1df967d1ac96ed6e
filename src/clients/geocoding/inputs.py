from __future__ import annotations

import numbers
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from core.errors import ValidationError
from core.models import Bounds, GeocodeRequest, LatLng, ReverseGeocodeRequest

LatLngLike = Union[LatLng, Mapping[str, Any], Sequence[Any]]

# (query params without the API key, fields that make up the cache key)
QueryParts = Tuple[Dict[str, str], Dict[str, Any]]


def normalize_api_key(api_key: Optional[str]) -> str:
    key = (api_key or "").strip()
    if not key:
        raise ValidationError("API key is required")
    return key


def normalize_address(address: Optional[str]) -> Optional[str]:
    s = (address or "").strip()
    return s or None


def normalize_components(components: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
    if not components:
        return None
    return {str(k): str(v) for k, v in components.items()}


def _is_number(v: Any) -> bool:
    # bool is an int subclass but never a coordinate
    return isinstance(v, numbers.Real) and not isinstance(v, bool)


def normalize_latlng(latlng: Optional[LatLngLike]) -> LatLng:
    """Coerce a LatLng, {"lat", "lng"} mapping or (lat, lng) pair and range-check it."""
    if isinstance(latlng, LatLng):
        lat, lng = latlng.lat, latlng.lng
    elif isinstance(latlng, Mapping):
        lat, lng = latlng.get("lat"), latlng.get("lng")
    elif isinstance(latlng, Sequence) and not isinstance(latlng, str) and len(latlng) == 2:
        lat, lng = latlng[0], latlng[1]
    else:
        lat = lng = None

    if not (_is_number(lat) and _is_number(lng)):
        raise ValidationError("Valid latitude and longitude are required")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError("Valid latitude and longitude are required")

    return LatLng(lat=float(lat), lng=float(lng))


def _format_latlng(p: LatLng) -> str:
    return f"{p.lat},{p.lng}"


def _format_bounds(b: Bounds) -> str:
    return f"{_format_latlng(b.southwest)}|{_format_latlng(b.northeast)}"


def geocode_query(
    request: GeocodeRequest,
    *,
    language: Optional[str] = None,
    region: Optional[str] = None,
) -> QueryParts:
    address = normalize_address(request.address)
    components = normalize_components(request.components)
    if address is None and components is None:
        raise ValidationError("Either address or components is required for geocoding")

    # Per-request values override client defaults
    language = request.language or language
    region = request.region or region

    params: Dict[str, str] = {}
    if address is not None:
        params["address"] = address
    if language:
        params["language"] = language
    if region:
        params["region"] = region
    if components is not None:
        params["components"] = "|".join(f"{k}:{v}" for k, v in components.items())
    if request.bounds is not None:
        params["bounds"] = _format_bounds(request.bounds)

    key_fields = {
        "type": "geocode",
        "address": address,
        "language": language,
        "region": region,
        "components": components,
        "bounds": request.bounds,
    }
    return params, key_fields


def reverse_geocode_query(request: ReverseGeocodeRequest, *, language: Optional[str] = None) -> QueryParts:
    latlng = normalize_latlng(request.latlng)
    language = request.language or language

    params: Dict[str, str] = {"latlng": _format_latlng(latlng)}
    if language:
        params["language"] = language
    if request.result_type:
        params["result_type"] = "|".join(request.result_type)
    if request.location_type:
        params["location_type"] = "|".join(request.location_type)

    key_fields = {
        "type": "reverse",
        "latlng": latlng,
        "language": language,
        "result_type": list(request.result_type) or None,
        "location_type": list(request.location_type) or None,
    }
    return params, key_fields
