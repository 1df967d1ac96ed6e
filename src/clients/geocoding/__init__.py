from .client import GeocodingClient
from .factory import create_geocoding_client

__all__ = ["GeocodingClient", "create_geocoding_client"]
