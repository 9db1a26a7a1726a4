import httpx
import pytest

from checkout_engine.errors import GeocodingError
from checkout_engine.models.order import DeliveryAddress
from checkout_engine.services.geocoding import GoogleGeocoder, StaticGeocoder, format_address

ADDRESS = DeliveryAddress(street="2150 W Broadway", city="Vancouver", province="BC", postal_code="V6K 1A1")


def geocode_result(lat, lng, country="CA"):
    return {
        "status": "OK",
        "results": [{
            "geometry": {"location": {"lat": lat, "lng": lng}},
            "address_components": [{"short_name": country, "types": ["country", "political"]}],
        }],
    }


def geocoder_for(handler) -> GoogleGeocoder:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleGeocoder(api_key="test-key", api_url="https://geo.test/json", country="CA", http_client=client)


def test_format_address():
    assert format_address(ADDRESS) == "2150 W Broadway, Vancouver, BC V6K 1A1, Canada"


async def test_geocode_match():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json=geocode_result(49.2636, -123.1386))

    geocoder = geocoder_for(handler)
    coordinates = await geocoder.geocode(ADDRESS)
    await geocoder.close()

    assert (coordinates.lat, coordinates.lng) == (49.2636, -123.1386)
    assert seen["key"] == "test-key"
    assert seen["components"] == "country:CA"


async def test_no_match():
    geocoder = geocoder_for(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
    with pytest.raises(GeocodingError, match="Address not found"):
        await geocoder.geocode(ADDRESS)


async def test_foreign_address_rejected():
    geocoder = geocoder_for(lambda request: httpx.Response(200, json=geocode_result(47.6, -122.3, country="US")))
    with pytest.raises(GeocodingError, match="Address must be in CA"):
        await geocoder.geocode(ADDRESS)


async def test_service_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(GeocodingError, match="Failed to connect"):
        await geocoder_for(handler).geocode(ADDRESS)


async def test_server_error():
    geocoder = geocoder_for(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(GeocodingError, match="Failed to connect"):
        await geocoder.geocode(ADDRESS)


async def test_missing_key():
    geocoder = GoogleGeocoder(api_key="", http_client=httpx.AsyncClient())
    geocoder.api_key = None
    with pytest.raises(GeocodingError, match="not configured"):
        await geocoder.geocode(ADDRESS)
    await geocoder.close()


async def test_static_geocoder_lookup():
    from .conftest import FAR_AWAY, NEARBY

    geocoder = StaticGeocoder(known={"v1y1a1": FAR_AWAY}, default=NEARBY)
    far = await geocoder.geocode(ADDRESS.model_copy(update={"postal_code": "V1Y 1A1"}))
    assert far == FAR_AWAY
    assert await geocoder.geocode(ADDRESS) == NEARBY

    with pytest.raises(GeocodingError):
        await StaticGeocoder().geocode(ADDRESS)
