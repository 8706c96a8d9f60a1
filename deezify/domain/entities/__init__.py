"""Core domain entities for derived playlists and weather lookups."""

from .playlist import (
    FALLBACK_ID_PREFIX,
    AccessToken,
    CatalogPlaylistSnapshot,
    CatalogTrack,
    DerivedPlaylist,
    DerivedPlaylistCacheEntry,
    MatchedTrack,
    fallback_track,
)
from .weather import (
    WEATHER_KIND_BY_CODE,
    WeatherKind,
    WeatherPayload,
    WeatherQuery,
    WeatherUnits,
    map_weather_code,
)

__all__ = [
    "FALLBACK_ID_PREFIX",
    "WEATHER_KIND_BY_CODE",
    "AccessToken",
    "CatalogPlaylistSnapshot",
    "CatalogTrack",
    "DerivedPlaylist",
    "DerivedPlaylistCacheEntry",
    "MatchedTrack",
    "WeatherKind",
    "WeatherPayload",
    "WeatherQuery",
    "WeatherUnits",
    "fallback_track",
    "map_weather_code",
]
