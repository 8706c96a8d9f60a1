"""Composition root wiring one HTTP client, every cache and the query services.

Each cache is an explicitly constructed object owned by the AppContainer,
so a process normally builds exactly one container and shares it.

Usage:
    async with create_container() as container:
        playlist = await container.music.get_playlist()
"""

from typing import Self

from attrs import define
import httpx

from deezify.application.services import MusicService, WeatherService
from deezify.config import Settings, get_logger, settings as default_settings
from deezify.infrastructure.connectors import (
    DeezerConnector,
    DeezerMatchCache,
    OpenMeteoConnector,
    SpotifyConnector,
    SpotifyTokenProvider,
    WeatherCache,
)
from deezify.infrastructure.services import DerivedPlaylistCache

logger = get_logger(__name__)


@define(slots=True)
class AppContainer:
    """Owns the shared HTTP client and all process-wide caches."""

    http_client: httpx.AsyncClient
    token_provider: SpotifyTokenProvider
    spotify: SpotifyConnector
    match_cache: DeezerMatchCache
    playlist_cache: DerivedPlaylistCache
    weather_cache: WeatherCache
    music: MusicService
    weather: WeatherService

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_http_client(
    config: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=config.http.timeout_seconds,
        headers={"User-Agent": config.http.user_agent},
        transport=transport,
    )


def create_container(
    config: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContainer:
    """Build the full object graph from settings.

    Args:
        config: Settings to use, defaults to the process-wide settings
        transport: Optional httpx transport, used by tests to fake upstreams
    """
    config = config or default_settings
    http_client = create_http_client(config, transport)

    token_provider = SpotifyTokenProvider(
        client=http_client,
        client_id=config.credentials.spotify_client_id,
        client_secret=config.credentials.spotify_client_secret,
        ttl_seconds=config.music.token_ttl_seconds,
    )
    spotify = SpotifyConnector(client=http_client, token_provider=token_provider)
    match_cache = DeezerMatchCache(
        connector=DeezerConnector(client=http_client),
        capacity=config.music.match_cache_capacity,
        ttl_seconds=config.music.match_cache_ttl_seconds,
        concurrency_limit=config.music.match_concurrency,
    )
    playlist_cache = DerivedPlaylistCache(
        spotify=spotify,
        matcher=match_cache,
        capacity=config.music.playlist_cache_capacity,
    )
    weather_cache = WeatherCache(
        connector=OpenMeteoConnector(client=http_client),
        capacity=config.weather.cache_capacity,
        ttl_seconds=config.weather.cache_ttl_seconds,
    )

    logger.debug("Created application container")

    return AppContainer(
        http_client=http_client,
        token_provider=token_provider,
        spotify=spotify,
        match_cache=match_cache,
        playlist_cache=playlist_cache,
        weather_cache=weather_cache,
        music=MusicService(
            playlists=playlist_cache,
            default_playlist_id=config.music.default_playlist_id,
        ),
        weather=WeatherService(weather=weather_cache),
    )
