"""Upstream service connectors: Spotify, Deezer and Open-Meteo."""

from .base_connector import BatchProcessor, request_json
from .deezer import DeezerConnector, DeezerMatchCache, build_match_cache_key
from .open_meteo import OpenMeteoConnector, WeatherCache
from .spotify import SpotifyConnector, SpotifyTokenProvider, playlist_web_url

__all__ = [
    "BatchProcessor",
    "DeezerConnector",
    "DeezerMatchCache",
    "OpenMeteoConnector",
    "SpotifyConnector",
    "SpotifyTokenProvider",
    "WeatherCache",
    "build_match_cache_key",
    "playlist_web_url",
    "request_json",
]
