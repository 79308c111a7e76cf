"""Address geocoding against the Google Maps Geocoding API."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from donation_api.config import settings
from donation_api.core.exceptions import GeocodeError

logger = logging.getLogger(__name__)

GEOCODE_PATH = "/maps/api/geocode/json"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class Coordinates:
    """Latitude/longitude pair."""

    lat: float
    lng: float


def _compact(value: Any) -> str:
    """Render an address component with all whitespace removed."""
    if value is None:
        return ""
    return _WHITESPACE.sub("", str(value))


class GeocodeClient:
    """Resolves street addresses to coordinates.

    Each lookup is a single GET against the provider. Failures are never
    papered over with default coordinates.

    Args:
        api_key: Provider API key (defaults to GOOGLE_MAPS_API_KEY)
        base_url: Provider base URL (defaults to GEOCODE_BASE_URL)
        timeout: Request timeout in seconds; None keeps the httpx default
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.geocode_api_key
        self.base_url = (base_url or settings.geocode_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.geocode_timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load async HTTP client."""
        if self._client is None:
            kwargs: Dict[str, Any] = {"base_url": self.base_url}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    def build_query(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str],
        zip: Optional[Any],
    ) -> Dict[str, str]:
        """Build the provider query parameters for an address.

        Raises:
            GeocodeError: If neither street address nor city is given
        """
        street = _compact(address)
        town = _compact(city)
        if not street and not town:
            raise GeocodeError("address and city are required for geocoding")

        parts = [part for part in (street, town, _compact(zip)) if part]
        params = {"address": ",".join(parts), "key": self.api_key}

        region = _compact(state)
        if region:
            params["components"] = f"administrative_area:{region}"
        return params

    async def resolve(
        self,
        address: Optional[str],
        city: Optional[str],
        state: Optional[str],
        zip: Optional[Any],
    ) -> Coordinates:
        """Resolve an address to coordinates.

        Args:
            address: Street address
            city: City name
            state: State or administrative area
            zip: Postal code

        Returns:
            Coordinates: Location of the first provider result

        Raises:
            GeocodeError: On transport failure, provider error or malformed response
        """
        params = self.build_query(address, city, state, zip)

        try:
            response = await self.client.get(GEOCODE_PATH, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocode request failed: {e}")
            raise GeocodeError(f"geocode request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Geocode response is not JSON: {e}")
            raise GeocodeError("geocode response is not valid JSON") from e

        return self._parse(data)

    @staticmethod
    def _parse(data: Any) -> Coordinates:
        """Extract the first result's location from a provider payload."""
        if not isinstance(data, dict):
            raise GeocodeError("malformed geocode response")

        status = data.get("status", "OK")
        if status != "OK":
            message = data.get("error_message") or status
            logger.error(f"Geocode provider returned {status}: {message}")
            raise GeocodeError(f"geocode lookup failed: {message}")

        try:
            location = data["results"][0]["geometry"]["location"]
            return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeocodeError("malformed geocode response") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
