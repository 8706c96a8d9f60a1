"""Open-Meteo current weather connector and its TTL cache."""

from typing import Any

from attrs import define, field
import httpx

from deezify.config import get_logger, resilient_operation, settings
from deezify.domain.entities import (
    WeatherPayload,
    WeatherQuery,
    WeatherUnits,
    map_weather_code,
)
from deezify.domain.errors import NotFound, UpstreamMalformed
from deezify.infrastructure.cache import AsyncTTLCache
from deezify.infrastructure.connectors.base_connector import request_json

logger = get_logger(__name__).bind(service="open_meteo")

OPEN_METEO_BASE_URL = "https://api.open-meteo.com/v1/forecast"

UNIT_PARAMS: dict[WeatherUnits, dict[str, str]] = {
    WeatherUnits.METRIC: {"temperature_unit": "celsius", "windspeed_unit": "kmh"},
    WeatherUnits.IMPERIAL: {"temperature_unit": "fahrenheit", "windspeed_unit": "mph"},
}


def build_weather_params(query: WeatherQuery) -> dict[str, str]:
    return {
        "latitude": str(query.latitude),
        "longitude": str(query.longitude),
        "current_weather": "true",
        "timezone": query.timezone,
        **UNIT_PARAMS[query.units],
    }


@define(slots=True)
class OpenMeteoConnector:
    client: httpx.AsyncClient = field(repr=False)
    connector_name: str = "open_meteo"

    @resilient_operation("open_meteo_current_weather")
    async def fetch_current_weather(self, query: WeatherQuery) -> WeatherPayload:
        """Fetch current conditions for a location.

        Raises:
            UpstreamUnavailable: Open-Meteo unreachable
            UpstreamRejected: Non-2xx status
            NotFound: Response has no current_weather section
        """
        payload = await request_json(
            self.client,
            "GET",
            OPEN_METEO_BASE_URL,
            service=self.connector_name,
            label="Open-Meteo",
            params=build_weather_params(query),
        )
        if not isinstance(payload, dict):
            raise UpstreamMalformed(
                "Open-Meteo returned an unexpected payload", service=self.connector_name
            )

        current: dict[str, Any] | None = payload.get("current_weather")
        if not current:
            raise NotFound(
                "No current weather data for the provided coordinates",
                service=self.connector_name,
            )

        code = current.get("weathercode")
        return WeatherPayload(
            temperature=current.get("temperature"),
            weather_code=code,
            observed_at=current.get("time"),
            units=query.units,
            kind=map_weather_code(code),
        )


@define(slots=True)
class WeatherCache:
    """Five minute cache over current weather, keyed by the full query."""

    connector: OpenMeteoConnector
    capacity: int = field(factory=lambda: settings.weather.cache_capacity)
    ttl_seconds: float = field(factory=lambda: settings.weather.cache_ttl_seconds)
    _cache: AsyncTTLCache[str, WeatherPayload] = field(init=False, repr=False)

    def __attrs_post_init__(self) -> None:
        self._cache = AsyncTTLCache(
            lookup=self._lookup,
            capacity=self.capacity,
            ttl=self.ttl_seconds,
            name="weather cache",
        )

    @property
    def cache(self) -> AsyncTTLCache[str, WeatherPayload]:
        return self._cache

    async def get(self, query: WeatherQuery) -> WeatherPayload:
        return await self._cache.get(query.cache_key())

    async def _lookup(self, key: str) -> WeatherPayload:
        return await self.connector.fetch_current_weather(WeatherQuery.from_cache_key(key))
