import pytest

from core.errors import ValidationError
from core.models import (
    AddressComponent,
    Bounds,
    CacheStats,
    GeocodeResult,
    Geometry,
    LatLng,
    RateLimiterStats,
)
from tools import geocode as geocode_tool
from tools import geocoder_stats as stats_tool
from tools import reverse_geocode as reverse_tool


RESULT = GeocodeResult(
    address_components=(AddressComponent(long_name="Paris", short_name="Paris", types=("locality",)),),
    formatted_address="Paris, France",
    geometry=Geometry(
        location=LatLng(48.8566, 2.3522),
        location_type="APPROXIMATE",
        viewport=Bounds(northeast=LatLng(48.9, 2.5), southwest=LatLng(48.8, 2.2)),
    ),
    place_id="place-1",
    types=("locality", "political"),
)


class FakeGeocodingClient:
    def __init__(self):
        self.calls = []

    async def geocode(self, **kwargs):
        self.calls.append(("geocode", kwargs))
        return [RESULT]

    async def reverse_geocode(self, **kwargs):
        self.calls.append(("reverse_geocode", kwargs))
        return [RESULT]

    def cache_stats(self):
        return CacheStats(size=3, enabled=True)

    def rate_limiter_stats(self):
        return RateLimiterStats(available_tokens=47, queue_size=0, enabled=True)


@pytest.mark.asyncio
async def test_geocode_tool_validates_missing_inputs(dummy_mcp):
    geocode_tool.register(dummy_mcp, geocoding_client=FakeGeocodingClient())
    fn = dummy_mcp.tools["geocode"]

    with pytest.raises(ValidationError):
        await fn(address="  ")


@pytest.mark.asyncio
async def test_geocode_tool_delegates_and_serializes(dummy_mcp):
    client = FakeGeocodingClient()
    geocode_tool.register(dummy_mcp, geocoding_client=client)
    fn = dummy_mcp.tools["geocode"]

    out = await fn(address="Paris", language="fr")

    assert client.calls == [
        ("geocode", {"address": "Paris", "components": None, "language": "fr", "region": None})
    ]
    assert out[0]["formatted_address"] == "Paris, France"
    assert out[0]["geometry"]["location"] == {"lat": 48.8566, "lng": 2.3522}
    assert "plus_code" not in out[0]


@pytest.mark.asyncio
async def test_reverse_geocode_tool_builds_latlng(dummy_mcp):
    client = FakeGeocodingClient()
    reverse_tool.register(dummy_mcp, geocoding_client=client)
    fn = dummy_mcp.tools["reverse_geocode"]

    out = await fn(lat=48.8566, lng=2.3522, result_type=["locality"])

    name, kwargs = client.calls[0]
    assert name == "reverse_geocode"
    assert kwargs["latlng"] == LatLng(48.8566, 2.3522)
    assert kwargs["result_type"] == ["locality"]
    assert kwargs["location_type"] == ()
    assert out[0]["place_id"] == "place-1"


@pytest.mark.asyncio
async def test_geocoder_stats_tool(dummy_mcp):
    stats_tool.register(dummy_mcp, geocoding_client=FakeGeocodingClient())
    fn = dummy_mcp.tools["geocoder_stats"]

    assert await fn() == {
        "cache": {"size": 3, "enabled": True},
        "rate_limiter": {"available_tokens": 47, "queue_size": 0, "enabled": True},
    }
