"""Read-only query services consumed by the presentation layer.

These are the two operations collaborators call: get_playlist and
get_weather. Both return plain immutable payloads and raise the typed errors
from deezify.domain.errors; rendering an "unavailable" state on failure is
the caller's job.
"""

from attrs import define, field

from deezify.config import get_logger, settings
from deezify.domain.entities import DerivedPlaylist, WeatherPayload, WeatherQuery
from deezify.domain.errors import ConfigurationError
from deezify.domain.interfaces import (
    DerivedPlaylistSourceProtocol,
    WeatherSourceProtocol,
)

logger = get_logger(__name__)


def resolve_playlist_id(playlist_id: str | None, default_playlist_id: str | None) -> str:
    """Pick the requested playlist id, falling back to the configured default.

    Raises:
        ConfigurationError: Neither id is set
    """
    resolved = (playlist_id or "").strip() or (default_playlist_id or "").strip()
    if not resolved:
        raise ConfigurationError("Spotify playlist id is not configured")
    return resolved


@define(slots=True)
class MusicService:
    """Serves derived playlists for a requested or default playlist id."""

    playlists: DerivedPlaylistSourceProtocol
    default_playlist_id: str | None = field(
        factory=lambda: settings.music.default_playlist_id
    )

    async def get_playlist(self, playlist_id: str | None = None) -> DerivedPlaylist:
        resolved = resolve_playlist_id(playlist_id, self.default_playlist_id)
        with logger.contextualize(operation="get_playlist", playlist_id=resolved):
            return await self.playlists.get(resolved)


@define(slots=True)
class WeatherService:
    """Serves current weather for validated coordinates."""

    weather: WeatherSourceProtocol

    async def get_weather(self, query: WeatherQuery) -> WeatherPayload:
        with logger.contextualize(operation="get_weather", query=query.cache_key()):
            return await self.weather.get(query)
