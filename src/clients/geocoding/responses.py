"""Map Geocoding API payloads to result models or errors.

The API always answers HTTP 200 with a JSON body whose "status" field tells
success from failure; this module turns that status into the right
exception and the snake_case results into frozen dataclasses.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from core.errors import ApiKeyError, GeocodingError, InvalidRequestError
from core.models import (
    AddressComponent,
    Bounds,
    GeocodeResult,
    Geometry,
    LatLng,
    PlusCode,
)


def parse_geocode_response(data: Mapping[str, Any]) -> List[GeocodeResult]:
    status = str(data.get("status") or "UNKNOWN_ERROR")
    message: Optional[str] = data.get("error_message")

    if status == "OK":
        return [to_geocode_result(r) for r in data.get("results") or []]

    if status == "ZERO_RESULTS":
        return []

    if status in ("OVER_DAILY_LIMIT", "OVER_QUERY_LIMIT"):
        raise ApiKeyError(message or "API quota exceeded", status)

    if status == "REQUEST_DENIED":
        raise ApiKeyError(message or "Request denied - check your API key", status)

    if status == "INVALID_REQUEST":
        raise InvalidRequestError(message or "Invalid request")

    raise GeocodingError(message or "An unknown error occurred", status)


def _latlng(raw: Mapping[str, Any]) -> LatLng:
    return LatLng(lat=float(raw["lat"]), lng=float(raw["lng"]))


def _bounds(raw: Optional[Mapping[str, Any]]) -> Optional[Bounds]:
    if not raw:
        return None
    return Bounds(northeast=_latlng(raw["northeast"]), southwest=_latlng(raw["southwest"]))


def _plus_code(raw: Optional[Mapping[str, Any]]) -> Optional[PlusCode]:
    if not raw:
        return None
    return PlusCode(global_code=raw["global_code"], compound_code=raw.get("compound_code"))


def to_geocode_result(raw: Mapping[str, Any]) -> GeocodeResult:
    geometry = raw["geometry"]
    localities = raw.get("postcode_localities")
    return GeocodeResult(
        address_components=tuple(
            AddressComponent(
                long_name=c["long_name"],
                short_name=c["short_name"],
                types=tuple(c.get("types") or ()),
            )
            for c in raw.get("address_components") or []
        ),
        formatted_address=raw.get("formatted_address", ""),
        geometry=Geometry(
            location=_latlng(geometry["location"]),
            location_type=geometry.get("location_type", ""),
            viewport=_bounds(geometry["viewport"]),
            bounds=_bounds(geometry.get("bounds")),
        ),
        place_id=raw.get("place_id", ""),
        types=tuple(raw.get("types") or ()),
        plus_code=_plus_code(raw.get("plus_code")),
        postcode_localities=tuple(localities) if localities is not None else None,
        partial_match=raw.get("partial_match"),
    )
