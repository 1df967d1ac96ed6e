"""Server bootstrap for the Geocode MCP service.

Creates the FastMCP instance, builds one shared GeocodingClient (and with it
the cache and rate limiter), registers the tools and starts the MCP server
(stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from clients.geocoding import create_geocoding_client
from config import LOG_LEVEL
from core.logging import configure_logging

from tools.geocode import register as register_geocode
from tools.reverse_geocode import register as register_reverse_geocode
from tools.geocoder_stats import register as register_geocoder_stats

mcp = FastMCP("geocode-mcp")


def register_tools() -> None:
    # One client: all tools share the same cache and rate limiter
    geocoding_client = create_geocoding_client()

    register_geocode(mcp, geocoding_client=geocoding_client)
    register_reverse_geocode(mcp, geocoding_client=geocoding_client)
    register_geocoder_stats(mcp, geocoding_client=geocoding_client)


register_tools()


def main() -> None:
    configure_logging(LOG_LEVEL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
