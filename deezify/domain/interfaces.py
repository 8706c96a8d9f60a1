"""Protocols the application layer depends on.

The infrastructure caches implement these; tests substitute fakes.
"""

from typing import Protocol, runtime_checkable

from deezify.domain.entities import DerivedPlaylist, WeatherPayload, WeatherQuery


@runtime_checkable
class DerivedPlaylistSourceProtocol(Protocol):
    async def get(self, playlist_id: str) -> DerivedPlaylist:
        """Return the derived playlist for a Spotify playlist id."""
        ...


@runtime_checkable
class WeatherSourceProtocol(Protocol):
    async def get(self, query: WeatherQuery) -> WeatherPayload:
        """Return current weather for the query."""
        ...
