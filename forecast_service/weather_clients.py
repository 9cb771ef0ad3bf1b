"""
OpenWeatherMap client.

We intentionally separate API logic from the service and FastAPI endpoints:
- easier to test in isolation (respx mocks the transport)
- the service only ever sees a parsed JSON payload or an exception
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from .errors import ProviderUnavailable
from .settings import ProviderConfig

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """
    OpenWeatherMap wrapper.

    Endpoint used:
    - 5-day forecast (3-hour increments), resolved by city name:
        /data/2.5/forecast?q=...&lang=...&units=metric&appid=KEY

    One request per call. No retries: a failed call fails the request.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.base = config.base_url.rstrip("/")

    async def forecast(self, city: str, lang: str) -> Dict[str, Any]:
        """
        Retrieves the raw 5-day / 3-hour forecast payload for a city.

        Raises ProviderUnavailable when the call fails or the body is empty.
        """
        params = {
            "q": city,
            "lang": lang,
            "units": self.config.units,
            "appid": self.config.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_s) as client:
                r = await client.get(f"{self.base}/data/2.5/forecast", params=params)
        except httpx.HTTPError as e:
            logger.error("Forecast request for %s failed: %s", city, e)
            raise ProviderUnavailable(f"Failed to fetch weather data for {city!r}: {e}") from e

        if r.status_code != 200:
            raise ProviderUnavailable(f"Forecast failed ({r.status_code}): {r.text}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderUnavailable("Forecast response was not valid JSON") from e

        if not data:
            raise ProviderUnavailable("Failed to fetch weather data: empty response")
        return data
