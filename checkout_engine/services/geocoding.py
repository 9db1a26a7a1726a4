"""
Geocoding client

Turns a delivery address into coordinates using a Google Geocoding
API compatible endpoint.
"""

import logging
from typing import Optional, Protocol

import httpx

from ..core.config import Settings, settings
from ..errors import GeocodingError
from ..models.delivery import Coordinates
from ..models.order import DeliveryAddress

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def geocode(self, address: DeliveryAddress) -> Coordinates:
        ...


def format_address(address: DeliveryAddress) -> str:
    """Single-line address string for the geocoding query"""
    return (
        f"{address.street}, {address.city}, {address.province} "
        f"{address.postal_code}, {address.country}"
    )


class GoogleGeocoder:
    """Client for the Google Geocoding API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        country: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize geocoder.

        Args:
            api_key: Geocoding API key (defaults to settings)
            api_url: Endpoint URL (defaults to settings)
            country: ISO country code results must fall in
            http_client: Shared client; one is created when omitted
        """
        self.api_key = api_key or settings.geocoding_api_key
        self.api_url = api_url or settings.geocoding_api_url
        self.country = country or settings.geocoding_country
        self._http_client = http_client or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def geocode(self, address: DeliveryAddress) -> Coordinates:
        """
        Geocode an address.

        Raises:
            GeocodingError: Not configured, service unreachable, no match,
                or the match is outside the configured country
        """
        if not self.api_key:
            raise GeocodingError("Geocoding API key is not configured")

        params = {
            "address": format_address(address),
            "key": self.api_key,
            "components": f"country:{self.country}",
        }

        try:
            response = await self._http_client.get(self.api_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed: {e}")
            raise GeocodingError("Failed to connect to geocoding service") from e

        if response.status_code >= 400:
            logger.error(f"Geocoding failed: {response.status_code} - {response.text}")
            raise GeocodingError("Failed to connect to geocoding service")

        data = response.json()
        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.info(f"No geocoding match ({data.get('status')}) for {params['address']}")
            raise GeocodingError("Address not found. Please check and try again.")

        result = results[0]
        country = next(
            (
                c.get("short_name")
                for c in result.get("address_components", [])
                if "country" in c.get("types", [])
            ),
            None,
        )
        if country != self.country:
            raise GeocodingError(f"Address must be in {self.country}")

        location = result["geometry"]["location"]
        return Coordinates(lat=location["lat"], lng=location["lng"])


class StaticGeocoder:
    """Geocoder with fixed answers, for development without an API key"""

    def __init__(self, known: Optional[dict[str, Coordinates]] = None, default: Optional[Coordinates] = None):
        self.known = {k.upper(): v for k, v in (known or {}).items()}
        self.default = default

    async def geocode(self, address: DeliveryAddress) -> Coordinates:
        key = address.postal_code.replace(" ", "").upper()
        coordinates = self.known.get(key, self.default)
        if coordinates is None:
            raise GeocodingError("Address not found. Please check and try again.")
        return coordinates


def create_geocoder(config: Optional[Settings] = None) -> Geocoder:
    """Google geocoder when credentials exist, otherwise a static downtown-Vancouver one"""
    config = config or settings
    if config.geocoding_configured:
        return GoogleGeocoder(config.geocoding_api_key, config.geocoding_api_url, config.geocoding_country)
    logger.warning("Geocoding API key not set - using static geocoder")
    return StaticGeocoder(default=Coordinates(lat=49.2827, lng=-123.1207))
