"""Application services - the query operations exposed to collaborators."""

from .query_services import MusicService, WeatherService, resolve_playlist_id

__all__ = ["MusicService", "WeatherService", "resolve_playlist_id"]
