"""Weather domain entities and the weather code taxonomy."""

import json
from enum import StrEnum
from typing import Any

from attrs import define, field, validators


class WeatherUnits(StrEnum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class WeatherKind(StrEnum):
    """Closed set of conditions the display layer knows how to draw."""

    CLEAR = "clear"
    MOSTLY_CLEAR = "mostly-clear"
    PARTLY_CLOUDY = "partly-cloudy"
    OVERCAST = "overcast"
    FOG = "fog"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    FREEZING_RAIN = "freezing-rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"


# WMO weather interpretation codes as reported by Open-Meteo
WEATHER_KIND_BY_CODE: dict[int, WeatherKind] = {
    0: WeatherKind.CLEAR,
    1: WeatherKind.MOSTLY_CLEAR,
    2: WeatherKind.PARTLY_CLOUDY,
    3: WeatherKind.OVERCAST,
    45: WeatherKind.FOG,
    48: WeatherKind.FOG,
    51: WeatherKind.DRIZZLE,
    53: WeatherKind.DRIZZLE,
    55: WeatherKind.DRIZZLE,
    56: WeatherKind.DRIZZLE,
    57: WeatherKind.DRIZZLE,
    61: WeatherKind.RAIN,
    63: WeatherKind.RAIN,
    65: WeatherKind.RAIN,
    66: WeatherKind.FREEZING_RAIN,
    67: WeatherKind.FREEZING_RAIN,
    71: WeatherKind.SNOW,
    73: WeatherKind.SNOW,
    75: WeatherKind.SNOW,
    77: WeatherKind.SNOW,
    80: WeatherKind.RAIN,
    81: WeatherKind.RAIN,
    82: WeatherKind.RAIN,
    85: WeatherKind.SNOW,
    86: WeatherKind.SNOW,
    95: WeatherKind.THUNDERSTORM,
    96: WeatherKind.THUNDERSTORM,
    99: WeatherKind.THUNDERSTORM,
}


def map_weather_code(code: int | None) -> WeatherKind:
    """Map a weather code to its kind. Unknown and missing codes are clear."""
    if code is None:
        return WeatherKind.CLEAR
    return WEATHER_KIND_BY_CODE.get(code, WeatherKind.CLEAR)


@define(frozen=True, slots=True)
class WeatherQuery:
    """Coordinates and display preferences for a current weather lookup."""

    latitude: float = field(
        converter=float, validator=[validators.ge(-90), validators.le(90)]
    )
    longitude: float = field(
        converter=float, validator=[validators.ge(-180), validators.le(180)]
    )
    timezone: str = field(default="auto", converter=str.strip)
    units: WeatherUnits = field(default=WeatherUnits.METRIC, converter=WeatherUnits)

    def cache_key(self) -> str:
        return json.dumps(
            [self.latitude, self.longitude, self.timezone, self.units.value]
        )

    @classmethod
    def from_cache_key(cls, key: str) -> "WeatherQuery":
        latitude, longitude, timezone, units = json.loads(key)
        return cls(
            latitude=latitude, longitude=longitude, timezone=timezone, units=units
        )


@define(frozen=True, slots=True)
class WeatherPayload:
    """Current conditions at the queried location."""

    units: WeatherUnits
    kind: WeatherKind
    temperature: float | None = None
    weather_code: int | None = None
    observed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "weatherCode": self.weather_code,
            "observedAt": self.observed_at,
            "units": self.units.value,
            "kind": self.kind.value,
        }
