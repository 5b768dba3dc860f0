"""Address geocoding via the Geoapify search API."""

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

import httpx

from housewipe.config import GeocodingSettings
from housewipe.models.pydantic_models import Coordinates

logger = logging.getLogger(__name__)

_PARENTHESISED = re.compile(r"\([^)]*\)")
_WHITESPACE = re.compile(r"\s+")


def clean_address(address: str) -> str:
    """Strip parenthesised unit notes and collapse whitespace.

    Example:
        "12 Main St (Unit 4),  Moncton" -> "12 Main St , Moncton"
    """
    return _WHITESPACE.sub(" ", _PARENTHESISED.sub("", address)).strip()


class Geocoder(Protocol):
    """Resolves a free-form address to coordinates."""

    async def geocode(self, address: str) -> Coordinates | None: ...


class GeoapifyGeocoder:
    """Async Geoapify client.

    Usage:
        async with GeoapifyGeocoder(api_key) as geocoder:
            coords = await geocoder.geocode("12 Main St, Moncton, NB, Canada")
    """

    BASE_URL = "https://api.geoapify.com/v1/geocode/search"

    def __init__(
        self,
        api_key: str,
        country_code: str = "ca",
        timeout: float = 10.0,
        base_url: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._country_code = country_code
        self._timeout = timeout
        self._base_url = base_url or self.BASE_URL
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GeoapifyGeocoder":
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def geocode(self, address: str) -> Coordinates | None:
        """Look up the best match for an address.

        Args:
            address: Free-form address text.

        Returns:
            Coordinates of the first result, or None when nothing matched or
            the request failed.
        """
        assert self._client is not None, "Geocoder not initialized. Use 'async with'."

        text = clean_address(address)
        if not text:
            return None

        params = {
            "text": text,
            "filter": f"countrycode:{self._country_code}",
            "limit": 1,
            "apiKey": self._api_key,
        }
        try:
            response = await self._client.get(self._base_url, params=params)
            response.raise_for_status()
            return _first_feature_coordinates(response.json())
        except httpx.HTTPError as e:
            logger.warning("Geocoding request failed for %r: %s", text, e)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("Unexpected geocoding response for %r: %s", text, e)
        return None


def _first_feature_coordinates(data: dict[str, Any]) -> Coordinates | None:
    features = data.get("features") or []
    if not features:
        return None
    # GeoJSON order is [lng, lat]
    lng, lat = features[0]["geometry"]["coordinates"][:2]
    return Coordinates(lat=lat, lng=lng)


@asynccontextmanager
async def open_geocoder(settings: GeocodingSettings) -> AsyncIterator[Geocoder | None]:
    """Open the configured geocoder, or yield None when geocoding is off.

    Geocoding needs both ``enabled`` and an API key.
    """
    if not settings.enabled:
        yield None
        return
    if not settings.api_key:
        logger.warning("Geocoding enabled but no API key configured; skipping")
        yield None
        return

    async with GeoapifyGeocoder(
        settings.api_key,
        country_code=settings.country_code,
        timeout=settings.timeout_seconds,
    ) as geocoder:
        yield geocoder
