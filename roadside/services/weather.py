import asyncio
import logging
import time
from typing import Optional, Protocol

import httpx

from roadside.core.config import settings
from roadside.core.exceptions import UpstreamUnavailable
from roadside.core.metrics import weather_lookups, weather_lookup_duration

logger = logging.getLogger(__name__)

CLEAR = "clear"


class WeatherClient:
    """Coarse weather condition lookup against an OpenWeatherMap-style API.

    ``current_condition`` never raises: any provider problem degrades to
    ``"clear"`` so pricing and ETA estimation keep working.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.WEATHER_API_KEY
        self.base_url = base_url or settings.WEATHER_API_URL
        self.timeout = timeout if timeout is not None else settings.WEATHER_TIMEOUT
        self._transport = transport

    async def fetch_condition(self, latitude: float, longitude: float) -> str:
        """Return the lowercased primary condition or raise UpstreamUnavailable."""
        if not self.api_key:
            raise UpstreamUnavailable("Weather API key is not configured")

        try:
            return await asyncio.wait_for(
                self._request(latitude, longitude),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise UpstreamUnavailable(f"Weather lookup timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Weather request failed: {e}")

    async def _request(self, latitude: float, longitude: float) -> str:
        params = {"lat": latitude, "lon": longitude, "appid": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.base_url, params=params)

        if not 200 <= response.status_code < 300:
            raise UpstreamUnavailable(f"Weather provider returned status {response.status_code}")

        try:
            return str(response.json()["weather"][0]["main"]).lower()
        except (ValueError, KeyError, IndexError, TypeError):
            raise UpstreamUnavailable("Weather provider returned an unexpected payload")

    async def current_condition(self, latitude: float, longitude: float) -> str:
        start_time = time.time()
        try:
            condition = await self.fetch_condition(latitude, longitude)
        except UpstreamUnavailable as e:
            weather_lookups.labels(outcome="fallback").inc()
            logger.warning(f"Weather unavailable at ({latitude}, {longitude}), assuming clear: {e.message}")
            return CLEAR
        finally:
            weather_lookup_duration.observe(time.time() - start_time)

        weather_lookups.labels(outcome="ok").inc()
        return condition


class WeatherLookup(Protocol):
    async def current_condition(self, latitude: float, longitude: float) -> str: ...


async def condition_at(weather: WeatherLookup, latitude: float, longitude: float) -> str:
    """Weather category at a point; any lookup failure is treated as clear."""
    try:
        condition = await weather.current_condition(latitude, longitude)
    except Exception as e:
        weather_lookups.labels(outcome="fallback").inc()
        logger.warning(f"Weather lookup failed at ({latitude}, {longitude}), assuming clear: {e}")
        return CLEAR
    return (condition or CLEAR).lower()
