"""Fake upstream services for httpx.MockTransport and raw payload builders."""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from attrs import define, field
import httpx

Responder = (
    httpx.Response
    | Callable[[httpx.Request], httpx.Response]
    | Callable[[httpx.Request], Awaitable[httpx.Response]]
)


@define
class UpstreamRouter:
    """Routes requests by (method, host, path) and records every call.

    A route may hold a single responder or a list, consumed one per call with
    the last one repeating.
    """

    routes: dict[tuple[str, str, str], list[Responder]] = field(factory=dict)
    requests: list[httpx.Request] = field(factory=list)
    calls: dict[tuple[str, str, str], int] = field(factory=lambda: defaultdict(int))

    def add(self, method: str, url: str, *responders: Responder) -> "UpstreamRouter":
        parsed = httpx.URL(url)
        self.routes[(method.upper(), parsed.host, parsed.path)] = list(responders)
        return self

    def count(self, method: str, url: str) -> int:
        parsed = httpx.URL(url)
        return self.calls[(method.upper(), parsed.host, parsed.path)]

    def requests_to(self, url: str) -> list[httpx.Request]:
        parsed = httpx.URL(url)
        return [
            r
            for r in self.requests
            if r.url.host == parsed.host and r.url.path == parsed.path
        ]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.host, request.url.path)
        self.requests.append(request)
        responders = self.routes.get(key)
        if not responders:
            return httpx.Response(599, text=f"No fake route for {key}")

        index = min(self.calls[key], len(responders) - 1)
        self.calls[key] += 1
        responder = responders[index]

        if isinstance(responder, httpx.Response):
            return responder
        result = responder(request)
        if isinstance(result, httpx.Response):
            return result
        return await result

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


TOKEN_URL = "https://accounts.spotify.com/api/token"
DEEZER_SEARCH_URL = "https://api.deezer.com/search"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


def playlist_url(playlist_id: str) -> str:
    return f"https://api.spotify.com/v1/playlists/{playlist_id}"


def token_response(token: str = "test-token") -> httpx.Response:
    return httpx.Response(
        200, json={"access_token": token, "token_type": "Bearer", "expires_in": 3600}
    )


def spotify_track_item(
    track_id: str | None,
    name: str | None,
    artists: list[str] | None = None,
    *,
    duration_ms: int | None = 180_000,
    is_local: bool = False,
    item_type: str = "track",
) -> dict[str, Any]:
    return {
        "added_at": "2024-01-01T00:00:00Z",
        "track": {
            "id": track_id,
            "name": name,
            "type": item_type,
            "is_local": is_local,
            "duration_ms": duration_ms,
            "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
            "artists": [{"name": artist} for artist in artists or []],
        },
    }


def spotify_playlist_payload(
    playlist_id: str,
    items: list[dict[str, Any]],
    *,
    name: str = "Test Playlist",
    snapshot_id: str | None = "S1",
    next_url: str | None = None,
    image_url: str | None = "https://i.scdn.co/image/cover",
    external_url: str | None = None,
) -> dict[str, Any]:
    return {
        "id": playlist_id,
        "name": name,
        "description": "A playlist for tests",
        "snapshot_id": snapshot_id,
        "external_urls": {"spotify": external_url} if external_url else {},
        "images": [{"url": image_url}] if image_url else [],
        "owner": {"display_name": "Curator"},
        "tracks": {"items": items, "next": next_url},
    }


def deezer_candidate(
    track_id: int | None,
    title: str | None,
    artist: str | None,
    *,
    contributors: list[str] | None = None,
    duration: int | None = 200,
    preview: str | None = None,
    cover_sizes: dict[str, str] | None = None,
) -> dict[str, Any]:
    return {
        "id": track_id,
        "title": title,
        "link": f"https://www.deezer.com/track/{track_id}",
        "duration": duration,
        "preview": preview if preview is not None else f"https://cdn.deezer.test/{track_id}.mp3",
        "artist": {"id": 1, "name": artist} if artist else None,
        "contributors": [{"id": i, "name": n} for i, n in enumerate(contributors or [])],
        "album": cover_sizes
        if cover_sizes is not None
        else {
            "cover": "https://e-cdns.test/cover.jpg",
            "cover_medium": "https://e-cdns.test/cover_medium.jpg",
            "cover_big": "https://e-cdns.test/cover_big.jpg",
            "cover_xl": "https://e-cdns.test/cover_xl.jpg",
        },
    }
