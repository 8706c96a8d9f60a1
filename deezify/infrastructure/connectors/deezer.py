"""Deezer search connector and the per-track match cache.

Deezer's public search API needs no authentication and returns 30 second
preview URLs, which is the only reason Deezer is consulted at all.

Key components:
- DeezerConnector: Runs a search for one (name, artists) pair and picks the
  best candidate using deezify.domain.matching
- DeezerMatchCache: 256 entry, 30 minute cache over DeezerConnector keyed by
  name and artists, with bounded fan-out for whole playlists
"""

import json
from typing import Any

from attrs import define, field
import httpx

from deezify.config import get_logger, resilient_operation, settings
from deezify.domain.entities import CatalogTrack, MatchedTrack
from deezify.domain.errors import UpstreamMalformed
from deezify.domain.matching import (
    build_artist_list,
    build_search_query,
    pick_cover_image,
    select_best_candidate,
)
from deezify.infrastructure.cache import AsyncTTLCache
from deezify.infrastructure.connectors.base_connector import (
    BatchProcessor,
    request_json,
)

logger = get_logger(__name__).bind(service="deezer")

DEEZER_API_BASE = "https://api.deezer.com"
SEARCH_LIMIT = 5


@define(slots=True)
class DeezerConnector:
    """Thin client for the Deezer track search endpoint."""

    client: httpx.AsyncClient = field(repr=False)
    connector_name: str = "deezer"

    @resilient_operation("deezer_track_search")
    async def search_tracks(self, query: str, limit: int = SEARCH_LIMIT) -> list[dict[str, Any]]:
        """Search Deezer and return raw candidates in Deezer's relevance order."""
        payload = await request_json(
            self.client,
            "GET",
            f"{DEEZER_API_BASE}/search",
            service=self.connector_name,
            label="Deezer search",
            params={"q": query, "limit": str(limit)},
        )
        if not isinstance(payload, dict):
            raise UpstreamMalformed(
                "Deezer search returned an unexpected payload",
                service=self.connector_name,
            )
        return [candidate for candidate in payload.get("data") or [] if candidate]

    async def find_match(self, name: str, artists: list[str]) -> MatchedTrack | None:
        """Find the best Deezer track for a Spotify track.

        Returns:
            The converted match, or None when Deezer has no usable candidate
        """
        query = build_search_query(name, artists)
        candidates = await self.search_tracks(query)

        chosen = select_best_candidate(candidates, name, artists)
        if chosen is None or not chosen.get("id") or not chosen.get("title"):
            logger.debug("No Deezer match", track=name, candidates=len(candidates))
            return None

        return convert_deezer_track(chosen)


def convert_deezer_track(candidate: dict[str, Any]) -> MatchedTrack:
    """Convert a raw Deezer search result to a MatchedTrack."""
    duration = candidate.get("duration")
    return MatchedTrack(
        id=str(candidate["id"]),
        name=candidate["title"],
        artists=build_artist_list(candidate),
        external_url=candidate.get("link"),
        preview_url=candidate.get("preview"),
        duration_ms=duration * 1000 if duration is not None else None,
        image_url=pick_cover_image(candidate.get("album")),
    )


def build_match_cache_key(track: CatalogTrack) -> str:
    """Deterministic key from the track name and artists in their listed order."""
    return json.dumps({"name": track.name, "artists": list(track.artists)})


@define(slots=True)
class DeezerMatchCache:
    """Caches Deezer matches per (name, artists), including "no match" results.

    A None result is a valid outcome and is cached like any other value.
    Upstream failures are not cached.
    """

    connector: DeezerConnector
    capacity: int = field(factory=lambda: settings.music.match_cache_capacity)
    ttl_seconds: float = field(factory=lambda: settings.music.match_cache_ttl_seconds)
    concurrency_limit: int = field(factory=lambda: settings.music.match_concurrency)
    _cache: AsyncTTLCache[str, MatchedTrack | None] = field(init=False, repr=False)
    _batch_processor: BatchProcessor[CatalogTrack, MatchedTrack | None] = field(
        init=False, repr=False
    )

    def __attrs_post_init__(self) -> None:
        self._cache = AsyncTTLCache(
            lookup=self._lookup,
            capacity=self.capacity,
            ttl=self.ttl_seconds,
            name="deezer match cache",
        )
        self._batch_processor = BatchProcessor(
            concurrency_limit=self.concurrency_limit,
            logger_instance=logger,
        )

    @property
    def cache(self) -> AsyncTTLCache[str, MatchedTrack | None]:
        return self._cache

    async def get(self, track: CatalogTrack) -> MatchedTrack | None:
        return await self._cache.get(build_match_cache_key(track))

    async def match_tracks(self, tracks: list[CatalogTrack]) -> list[MatchedTrack | None]:
        """Match every track, returning results aligned with the input by index."""
        results = await self._batch_processor.process(tracks, self.get)
        matched = sum(1 for result in results if result is not None)
        logger.info(f"Matched {matched}/{len(tracks)} tracks on Deezer")
        return results

    async def _lookup(self, key: str) -> MatchedTrack | None:
        search_key = json.loads(key)
        return await self.connector.find_match(search_key["name"], search_key["artists"])
