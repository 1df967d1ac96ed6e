"""MCP tool that reverse geocodes a latitude/longitude pair to addresses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from clients.geocoding import GeocodingClient, create_geocoding_client
from core.models import LatLng


def register(mcp: FastMCP, *, geocoding_client: Optional[GeocodingClient] = None) -> None:
    client = geocoding_client or create_geocoding_client()

    @mcp.tool(name="reverse_geocode")
    async def reverse_geocode(
        lat: float,
        lng: float,
        result_type: Optional[List[str]] = None,
        location_type: Optional[List[str]] = None,
        language: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Reverse geocode coordinates to a list of address results.

        Parameters:
          - lat / lng: coordinates in degrees (-90..90 / -180..180).
          - result_type: optional result type filters, e.g. ["street_address"].
          - location_type: optional location type filters, e.g. ["ROOFTOP"].
          - language: result language (defaults to the server setting).
        """
        results = await client.reverse_geocode(
            latlng=LatLng(lat=lat, lng=lng),
            result_type=result_type or (),
            location_type=location_type or (),
            language=language,
        )
        return [r.to_dict() for r in results]
