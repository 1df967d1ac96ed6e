"""MCP tool reporting cache and rate limiter state of the geocoding client."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from clients.geocoding import GeocodingClient, create_geocoding_client


def register(mcp: FastMCP, *, geocoding_client: Optional[GeocodingClient] = None) -> None:
    client = geocoding_client or create_geocoding_client()

    @mcp.tool(name="geocoder_stats")
    async def geocoder_stats() -> Dict[str, Any]:
        """Return cache size and available rate limiter tokens / queue length."""
        return {
            "cache": asdict(client.cache_stats()),
            "rate_limiter": asdict(client.rate_limiter_stats()),
        }
