"""MCP tool that geocodes an address (or component filters) to locations.

Registers the 'geocode' tool which validates inputs and delegates to a
GeocodingClient, so repeated lookups hit the cache and upstream calls are
rate limited.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from clients.geocoding import GeocodingClient, create_geocoding_client
from core.errors import ValidationError


def register(mcp: FastMCP, *, geocoding_client: Optional[GeocodingClient] = None) -> None:
    client = geocoding_client or create_geocoding_client()

    @mcp.tool(name="geocode")
    async def geocode(
        address: Optional[str] = None,
        components: Optional[Dict[str, str]] = None,
        language: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Geocode an address to coordinates and address details.

        Parameters:
          - address: free-form address, e.g. "1600 Amphitheatre Parkway".
          - components: component filters, e.g. {"country": "US", "postal_code": "94043"}.
          - language: result language (defaults to the server setting).
          - region: region bias as a ccTLD code (defaults to the server setting).

        Returns:
          A list of result objects (empty when nothing matched).

        Raises:
          ValidationError when neither address nor components is given;
          RateLimitExceeded when the request cannot be admitted; Geocoding
          API and network errors otherwise.
        """
        if not (address and address.strip()) and not components:
            raise ValidationError("Either address or components is required for geocoding")

        results = await client.geocode(
            address=address,
            components=components,
            language=language,
            region=region,
        )
        return [r.to_dict() for r in results]
