"""Derived playlist cache with snapshot-driven invalidation.

Entries never expire by time. Every read of a cached playlist first asks
Spotify for the playlist's current snapshot id, a single cheap request, and
only rebuilds the playlist when that id has changed.
"""

from attrs import define, field

from deezify.config import get_logger, settings
from deezify.domain.entities import (
    CatalogPlaylistSnapshot,
    DerivedPlaylist,
    DerivedPlaylistCacheEntry,
    MatchedTrack,
    fallback_track,
)
from deezify.infrastructure.cache import AsyncTTLCache
from deezify.infrastructure.connectors.deezer import DeezerMatchCache
from deezify.infrastructure.connectors.spotify import SpotifyConnector, playlist_web_url

logger = get_logger(__name__).bind(service="playlist_cache")


def assemble_derived_playlist(
    playlist_id: str,
    snapshot: CatalogPlaylistSnapshot,
    matches: list[MatchedTrack | None],
) -> DerivedPlaylist:
    """Combine a catalog snapshot with per-index Deezer matches.

    Unmatched indices get a fallback entry built from the Spotify track, so
    the result has exactly one track per catalog track, in order.
    """
    if len(matches) != len(snapshot.tracks):
        raise ValueError(
            f"Got {len(matches)} match results for {len(snapshot.tracks)} tracks"
        )

    tracks = [
        matched if matched is not None else fallback_track(track, snapshot.image_url)
        for track, matched in zip(snapshot.tracks, matches, strict=True)
    ]

    return DerivedPlaylist(
        id=snapshot.id,
        name=snapshot.name,
        description=snapshot.description,
        external_url=snapshot.external_url or playlist_web_url(playlist_id),
        image_url=snapshot.image_url,
        curator_name=snapshot.owner_name,
        tracks=tracks,
        total_tracks=len(tracks),
    )


@define(slots=True)
class DerivedPlaylistCache:
    """Playlist id -> DerivedPlaylistCacheEntry, revalidated by snapshot id."""

    spotify: SpotifyConnector
    matcher: DeezerMatchCache
    capacity: int = field(factory=lambda: settings.music.playlist_cache_capacity)
    _cache: AsyncTTLCache[str, DerivedPlaylistCacheEntry] = field(
        init=False, repr=False
    )

    def __attrs_post_init__(self) -> None:
        self._cache = AsyncTTLCache(
            lookup=self._derive,
            capacity=self.capacity,
            ttl=None,
            name="derived playlist cache",
        )

    @property
    def cache(self) -> AsyncTTLCache[str, DerivedPlaylistCacheEntry]:
        return self._cache

    async def get(self, playlist_id: str) -> DerivedPlaylist:
        """Return the derived playlist, rebuilding it if Spotify reports a change.

        Raises:
            NotFound: The playlist does not exist on Spotify
            ConfigurationError: Spotify credentials are missing
            UpstreamError: Any other upstream failure
        """
        cached = self._cache.get_if_present(playlist_id)
        if cached is None:
            entry = await self._cache.get(playlist_id)
            return entry.playlist

        latest_snapshot_id = await self.spotify.fetch_snapshot_id(playlist_id)

        # Another caller may have rebuilt or evicted the entry meanwhile
        current = self._cache.get_if_present(playlist_id)
        if current is not None and current.snapshot_id == latest_snapshot_id:
            logger.debug("Playlist unchanged, serving cached copy", playlist_id=playlist_id)
            return current.playlist

        if current is not None:
            logger.info(
                "Playlist snapshot changed, rebuilding",
                playlist_id=playlist_id,
                cached_snapshot=current.snapshot_id,
                latest_snapshot=latest_snapshot_id,
            )
            self._cache.invalidate(playlist_id)
        entry = await self._cache.get(playlist_id)
        return entry.playlist

    async def _derive(self, playlist_id: str) -> DerivedPlaylistCacheEntry:
        snapshot = await self.spotify.fetch_playlist_data(playlist_id)
        matches = await self.matcher.match_tracks(snapshot.tracks)
        playlist = assemble_derived_playlist(playlist_id, snapshot, matches)

        logger.info(
            "Derived playlist '{}' with {} tracks",
            playlist.name,
            playlist.total_tracks,
            playlist_id=playlist_id,
            snapshot_id=snapshot.snapshot_id,
            previews=sum(1 for track in playlist.tracks if track.preview_url),
        )
        return DerivedPlaylistCacheEntry(snapshot_id=snapshot.snapshot_id, playlist=playlist)
