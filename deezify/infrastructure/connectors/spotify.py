"""Spotify Web API connector with domain model conversion.

This module talks to the Spotify Web API directly over httpx using the
client-credentials flow, which only grants access to public catalog data.

Key components:
- SpotifyTokenProvider: Single-slot, 50 minute cache for the bearer token
- SpotifyConnector: Playlist metadata, fully paginated track listing and
  the lightweight snapshot id check
- Conversion utilities: Transform Spotify API responses to domain models

Every call fetches the token through the provider, so concurrent requests
during a token miss share a single token request.
"""

import base64
from typing import Any
from urllib.parse import quote
from uuid import uuid4

from attrs import define, field
import httpx

from deezify.config import get_logger, resilient_operation, settings
from deezify.domain.entities import AccessToken, CatalogPlaylistSnapshot, CatalogTrack
from deezify.domain.errors import ConfigurationError, UpstreamMalformed
from deezify.infrastructure.cache import AsyncTTLCache
from deezify.infrastructure.connectors.base_connector import request_json

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")

SPOTIFY_API_BASE = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_PLAYLIST_WEB_URL = "https://open.spotify.com/playlist/{playlist_id}"
TOKEN_CACHE_KEY = "token"


def resolve_spotify_url(url: str) -> str:
    """Resolve API-relative paths; pagination cursors are already absolute."""
    return url if url.startswith("http") else f"{SPOTIFY_API_BASE}{url}"


def playlist_web_url(playlist_id: str) -> str:
    return SPOTIFY_PLAYLIST_WEB_URL.format(playlist_id=playlist_id)


@define(slots=True)
class SpotifyTokenProvider:
    """Caches one client-credentials access token.

    Credentials default to the configured values and are trimmed before use.
    """

    client: httpx.AsyncClient = field(repr=False)
    client_id: str | None = field(default=None, repr=False)
    client_secret: str | None = field(default=None, repr=False)
    ttl_seconds: float = field(factory=lambda: settings.music.token_ttl_seconds)
    _cache: AsyncTTLCache[str, AccessToken] = field(init=False, repr=False)

    def __attrs_post_init__(self) -> None:
        if self.client_id is None:
            self.client_id = settings.credentials.spotify_client_id
        if self.client_secret is None:
            self.client_secret = settings.credentials.spotify_client_secret

        self._cache = AsyncTTLCache(
            lookup=self._fetch_access_token,
            capacity=1,
            ttl=self.ttl_seconds,
            name="spotify token cache",
        )

    @property
    def cache(self) -> AsyncTTLCache[str, AccessToken]:
        return self._cache

    async def get(self) -> AccessToken:
        """Return a valid access token, requesting one on a cache miss.

        Raises:
            ConfigurationError: Client id or secret is not configured
            UpstreamUnavailable: Token endpoint unreachable
            UpstreamRejected: Token endpoint returned a non-2xx status
            UpstreamMalformed: Response had no usable access_token
        """
        return await self._cache.get(TOKEN_CACHE_KEY)

    @resilient_operation("spotify_token_fetch")
    async def _fetch_access_token(self, _key: str) -> AccessToken:
        client_id = (self.client_id or "").strip()
        client_secret = (self.client_secret or "").strip()

        if not client_id or not client_secret:
            raise ConfigurationError("Spotify client credentials are not configured")

        basic_auth = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
        logger.debug("Requesting Spotify access token")

        payload = await request_json(
            self.client,
            "POST",
            SPOTIFY_TOKEN_URL,
            service="spotify",
            label="Spotify token endpoint",
            headers={"Authorization": f"Basic {basic_auth}"},
            data={"grant_type": "client_credentials"},
        )

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise UpstreamMalformed(
                "Spotify token response did not include an access token",
                service="spotify",
            )

        return AccessToken(value=token.strip())


@define(slots=True)
class SpotifyConnector:
    """Read-only Spotify playlist client.

    Stateless apart from the shared HTTP client and token provider.
    """

    client: httpx.AsyncClient = field(repr=False)
    token_provider: SpotifyTokenProvider
    connector_name: str = "spotify"

    async def _get_json(
        self,
        url: str,
        token: AccessToken,
        *,
        label: str,
        not_found_message: str | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        payload = await request_json(
            self.client,
            "GET",
            resolve_spotify_url(url),
            service=self.connector_name,
            label=label,
            not_found_message=not_found_message,
            headers={"Authorization": token.authorization_header},
            params=params,
        )
        if not isinstance(payload, dict):
            raise UpstreamMalformed(
                f"{label} returned an unexpected payload", service=self.connector_name
            )
        return payload

    @resilient_operation("spotify_snapshot_fetch")
    async def fetch_snapshot_id(self, playlist_id: str) -> str | None:
        """Fetch only the playlist's snapshot id.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            Trimmed snapshot id, or None if absent or blank

        Raises:
            NotFound: The playlist does not exist
            UpstreamRejected: Any other non-2xx status
        """
        token = await self.token_provider.get()
        payload = await self._get_json(
            f"/playlists/{quote(playlist_id, safe='')}",
            token,
            label="Spotify playlist snapshot",
            not_found_message="Spotify playlist not found",
            params={"fields": "snapshot_id"},
        )
        return clean_snapshot_id(payload.get("snapshot_id"))

    @resilient_operation("spotify_playlist_fetch")
    async def fetch_playlist_data(self, playlist_id: str) -> CatalogPlaylistSnapshot:
        """Fetch playlist metadata and every page of tracks.

        Pages are followed one at a time in cursor order because the derived
        playlist matches tracks by index.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            Complete snapshot with playable tracks in playlist order
        """
        token = await self.token_provider.get()
        raw_playlist = await self._get_json(
            f"/playlists/{quote(playlist_id, safe='')}",
            token,
            label="Spotify playlist endpoint",
            not_found_message="Spotify playlist not found",
        )

        if not raw_playlist.get("id") or not raw_playlist.get("name"):
            raise UpstreamMalformed(
                "Spotify playlist response missing expected fields",
                service=self.connector_name,
            )

        first_page = raw_playlist.get("tracks") or {}
        tracks = extract_catalog_tracks(first_page.get("items") or [])

        cursor = first_page.get("next")
        page_count = 1
        while cursor:
            page = await self._get_json(cursor, token, label="Spotify playlist page")
            tracks.extend(extract_catalog_tracks(page.get("items") or []))
            cursor = page.get("next")
            page_count += 1

        logger.info(
            f"Fetched Spotify playlist with {len(tracks)} playable tracks",
            playlist_id=playlist_id,
            pages=page_count,
        )

        return convert_spotify_playlist(raw_playlist, tracks)


# -----------------------------------------------------------------------------
# Conversion utilities
# -----------------------------------------------------------------------------


def clean_snapshot_id(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def extract_catalog_track(item: dict[str, Any] | None) -> CatalogTrack | None:
    """Convert one playlist item, or return None if it is not a playable track."""
    track = item.get("track") if isinstance(item, dict) else None
    if not track or track.get("is_local") or track.get("type") != "track":
        return None

    name = (track.get("name") or "").strip()
    if not name:
        return None

    artists = []
    for artist in track.get("artists") or []:
        artist_name = ((artist or {}).get("name") or "").strip()
        if artist_name:
            artists.append(artist_name)

    return CatalogTrack(
        id=track.get("id") or f"unknown-{uuid4().hex}",
        name=name,
        artists=artists,
        external_url=(track.get("external_urls") or {}).get("spotify"),
        duration_ms=track.get("duration_ms"),
    )


def extract_catalog_tracks(items: list[dict[str, Any]]) -> list[CatalogTrack]:
    """Convert a page of playlist items, silently dropping unplayable ones."""
    return [
        track for track in (extract_catalog_track(item) for item in items) if track
    ]


def convert_spotify_playlist(
    raw_playlist: dict[str, Any], tracks: list[CatalogTrack]
) -> CatalogPlaylistSnapshot:
    """Convert a Spotify playlist response and its collected tracks to a snapshot."""
    images = raw_playlist.get("images") or []
    image_url = (images[0] or {}).get("url") if images else None

    return CatalogPlaylistSnapshot(
        id=raw_playlist["id"],
        name=raw_playlist["name"],
        description=raw_playlist.get("description"),
        external_url=(raw_playlist.get("external_urls") or {}).get("spotify"),
        image_url=image_url,
        owner_name=(raw_playlist.get("owner") or {}).get("display_name"),
        snapshot_id=clean_snapshot_id(raw_playlist.get("snapshot_id")),
        tracks=tracks,
    )
