"""Playlist-related domain entities.

Pure playlist and track representations with no I/O. Every entity is an
immutable value object; cache entries are replaced wholesale on refresh.
"""

from typing import Any

from attrs import define, field, validators


@define(frozen=True, slots=True)
class AccessToken:
    """Bearer token for the Spotify Web API."""

    value: str = field(validator=validators.min_len(1))

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"


@define(frozen=True, slots=True)
class CatalogTrack:
    """Playable track as listed in a Spotify playlist."""

    id: str
    name: str = field(validator=validators.min_len(1))
    artists: list[str] = field(factory=list)
    external_url: str | None = None
    duration_ms: int | None = None


@define(frozen=True, slots=True)
class CatalogPlaylistSnapshot:
    """One complete fetch of playlist metadata and every track page.

    Attributes:
        snapshot_id: Spotify version token, changes whenever membership or
            order changes
        tracks: Playable tracks in playlist order, pagination fully drained
    """

    id: str
    name: str
    description: str | None = None
    external_url: str | None = None
    image_url: str | None = None
    owner_name: str | None = None
    snapshot_id: str | None = None
    tracks: list[CatalogTrack] = field(factory=list)


@define(frozen=True, slots=True)
class MatchedTrack:
    """Track enriched with Deezer preview data.

    Also used for fallback entries when Deezer has no match, in which case
    preview_url is None and the id carries the FALLBACK_ID_PREFIX.
    """

    id: str
    name: str
    artists: list[str] = field(factory=list)
    external_url: str | None = None
    preview_url: str | None = None
    duration_ms: int | None = None
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artists": list(self.artists),
            "externalUrl": self.external_url,
            "previewUrl": self.preview_url,
            "durationMs": self.duration_ms,
            "imageUrl": self.image_url,
        }


FALLBACK_ID_PREFIX = "primary:"


def fallback_track(track: CatalogTrack, image_url: str | None) -> MatchedTrack:
    """Build the stand-in entry for a catalog track with no Deezer match."""
    return MatchedTrack(
        id=f"{FALLBACK_ID_PREFIX}{track.id}",
        name=track.name,
        artists=list(track.artists),
        external_url=track.external_url,
        preview_url=None,
        duration_ms=track.duration_ms,
        image_url=image_url,
    )


def _total_matches_tracks(instance: "DerivedPlaylist", attribute, value: int) -> None:
    if value != len(instance.tracks):
        raise ValueError(
            f"total_tracks={value} does not match {len(instance.tracks)} tracks"
        )


@define(frozen=True, slots=True)
class DerivedPlaylist:
    """Spotify playlist enriched track-by-track with Deezer preview data.

    tracks[i] is always derived from the i-th catalog track of the snapshot
    it was built from.
    """

    id: str
    name: str
    external_url: str
    tracks: list[MatchedTrack] = field(factory=list)
    description: str | None = None
    image_url: str | None = None
    curator_name: str | None = None
    total_tracks: int = field(validator=_total_matches_tracks)

    @total_tracks.default
    def _default_total_tracks(self) -> int:
        return len(self.tracks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "externalUrl": self.external_url,
            "imageUrl": self.image_url,
            "curatorName": self.curator_name,
            "totalTracks": self.total_tracks,
            "tracks": [track.to_dict() for track in self.tracks],
        }


@define(frozen=True, slots=True)
class DerivedPlaylistCacheEntry:
    """Cached unit for the derived playlist cache.

    The snapshot id is the invalidation key, not a timestamp.
    """

    snapshot_id: str | None
    playlist: DerivedPlaylist
