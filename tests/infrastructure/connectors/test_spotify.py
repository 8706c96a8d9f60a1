"""Tests for the Spotify token provider and playlist connector."""

import asyncio
import base64

import httpx
import pytest

from deezify.domain.errors import (
    ConfigurationError,
    NotFound,
    UpstreamMalformed,
    UpstreamRejected,
    UpstreamUnavailable,
)
from deezify.infrastructure.connectors.spotify import (
    SpotifyConnector,
    SpotifyTokenProvider,
    clean_snapshot_id,
    extract_catalog_track,
)
from tests.fixtures.upstreams import (
    TOKEN_URL,
    playlist_url,
    spotify_playlist_payload,
    spotify_track_item,
    token_response,
)


@pytest.fixture
def token_provider(http_client):
    return SpotifyTokenProvider(
        client=http_client, client_id="client-id", client_secret="secret", ttl_seconds=3000
    )


@pytest.fixture
def spotify(http_client, token_provider):
    return SpotifyConnector(client=http_client, token_provider=token_provider)


class TestTokenProvider:
    """Test client-credentials token acquisition and caching."""

    async def test_requests_token_with_basic_auth(self, router, token_provider):
        router.add("POST", TOKEN_URL, token_response("tok-1"))

        token = await token_provider.get()

        assert token.value == "tok-1"
        assert token.authorization_header == "Bearer tok-1"
        (request,) = router.requests_to(TOKEN_URL)
        expected = base64.b64encode(b"client-id:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.content == b"grant_type=client_credentials"

    async def test_token_is_cached(self, router, token_provider):
        router.add("POST", TOKEN_URL, token_response())

        await token_provider.get()
        await token_provider.get()

        assert router.count("POST", TOKEN_URL) == 1

    async def test_concurrent_misses_share_one_request(self, router, token_provider):
        router.add("POST", TOKEN_URL, token_response())

        tokens = await asyncio.gather(*(token_provider.get() for _ in range(10)))

        assert {t.value for t in tokens} == {"test-token"}
        assert router.count("POST", TOKEN_URL) == 1

    async def test_token_refreshed_after_ttl(self, router, http_client, clock):
        router.add("POST", TOKEN_URL, token_response("old"), token_response("new"))
        provider = SpotifyTokenProvider(
            client=http_client, client_id="id", client_secret="secret", ttl_seconds=3000
        )
        provider.cache.clock = clock

        assert (await provider.get()).value == "old"
        clock.advance(3000)
        assert (await provider.get()).value == "new"

    async def test_credentials_are_trimmed(self, router, http_client):
        router.add("POST", TOKEN_URL, token_response())
        provider = SpotifyTokenProvider(
            client=http_client, client_id="  id  ", client_secret=" secret\n"
        )

        await provider.get()

        (request,) = router.requests_to(TOKEN_URL)
        expected = base64.b64encode(b"id:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.parametrize(("client_id", "client_secret"), [("", "secret"), ("id", "   ")])
    async def test_missing_credentials(self, router, http_client, client_id, client_secret):
        provider = SpotifyTokenProvider(
            client=http_client, client_id=client_id, client_secret=client_secret
        )

        with pytest.raises(ConfigurationError):
            await provider.get()
        assert router.requests == []

    async def test_missing_access_token_is_malformed(self, router, token_provider):
        router.add("POST", TOKEN_URL, httpx.Response(200, json={"token_type": "Bearer"}))

        with pytest.raises(UpstreamMalformed):
            await token_provider.get()

    async def test_rejected_token_request_is_not_cached(self, router, token_provider):
        router.add(
            "POST",
            TOKEN_URL,
            httpx.Response(401, json={"error": "invalid_client"}),
            token_response("second-try"),
        )

        with pytest.raises(UpstreamRejected) as exc_info:
            await token_provider.get()
        assert exc_info.value.status_code == 401

        assert (await token_provider.get()).value == "second-try"

    async def test_unreachable_token_endpoint(self, router, token_provider):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        router.add("POST", TOKEN_URL, refuse)

        with pytest.raises(UpstreamUnavailable):
            await token_provider.get()


class TestFetchSnapshotId:
    async def test_requests_only_the_snapshot_field(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("abc123"), httpx.Response(200, json={"snapshot_id": " S2 "}))

        assert await spotify.fetch_snapshot_id("abc123") == "S2"

        (request,) = router.requests_to(playlist_url("abc123"))
        assert request.url.params["fields"] == "snapshot_id"
        assert request.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.parametrize("payload", [{}, {"snapshot_id": ""}, {"snapshot_id": "   "}])
    async def test_absent_snapshot_is_none(self, router, spotify, payload):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("abc123"), httpx.Response(200, json=payload))

        assert await spotify.fetch_snapshot_id("abc123") is None

    async def test_unknown_playlist(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("nope"), httpx.Response(404, json={"error": {}}))

        with pytest.raises(NotFound):
            await spotify.fetch_snapshot_id("nope")

    async def test_server_error_is_rejected(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("abc123"), httpx.Response(503))

        with pytest.raises(UpstreamRejected):
            await spotify.fetch_snapshot_id("abc123")


class TestFetchPlaylistData:
    """Test metadata conversion, filtering and pagination."""

    async def test_converts_playlist_metadata(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add(
            "GET",
            playlist_url("abc123"),
            httpx.Response(
                200,
                json=spotify_playlist_payload(
                    "abc123",
                    [spotify_track_item("t1", "Song A", ["Artist X"])],
                    name="Focus",
                    external_url="https://open.spotify.com/playlist/abc123",
                ),
            ),
        )

        snapshot = await spotify.fetch_playlist_data("abc123")

        assert snapshot.id == "abc123"
        assert snapshot.name == "Focus"
        assert snapshot.snapshot_id == "S1"
        assert snapshot.owner_name == "Curator"
        assert snapshot.image_url == "https://i.scdn.co/image/cover"
        assert snapshot.external_url == "https://open.spotify.com/playlist/abc123"
        assert [t.id for t in snapshot.tracks] == ["t1"]
        assert snapshot.tracks[0].artists == ["Artist X"]

    async def test_follows_every_page_in_order(self, router, spotify):
        next_page = "https://api.spotify.com/v1/playlists/abc123/tracks?offset=2&limit=2"
        last_page = "https://api.spotify.com/v1/playlists/abc123/tracks?offset=4&limit=2"
        pages_url = "https://api.spotify.com/v1/playlists/abc123/tracks"

        def page(request):
            offset = request.url.params["offset"]
            if offset == "2":
                return httpx.Response(
                    200,
                    json={
                        "items": [
                            spotify_track_item("t3", "Three"),
                            spotify_track_item("t4", "Four"),
                        ],
                        "next": last_page,
                    },
                )
            return httpx.Response(
                200, json={"items": [spotify_track_item("t5", "Five")], "next": None}
            )

        router.add("POST", TOKEN_URL, token_response())
        router.add(
            "GET",
            playlist_url("abc123"),
            httpx.Response(
                200,
                json=spotify_playlist_payload(
                    "abc123",
                    [spotify_track_item("t1", "One"), spotify_track_item("t2", "Two")],
                    next_url=next_page,
                ),
            ),
        )
        router.add("GET", pages_url, page)

        snapshot = await spotify.fetch_playlist_data("abc123")

        assert [t.id for t in snapshot.tracks] == ["t1", "t2", "t3", "t4", "t5"]
        assert router.count("GET", pages_url) == 2
        # One token serves the whole pagination run
        assert router.count("POST", TOKEN_URL) == 1

    async def test_unplayable_items_are_dropped(self, router, spotify):
        items = [
            spotify_track_item("t1", "Keep"),
            spotify_track_item("ep1", "Podcast", item_type="episode"),
            spotify_track_item("local", "Local File", is_local=True),
            spotify_track_item("blank", "   "),
            {"added_at": "2024-01-01T00:00:00Z", "track": None},
            spotify_track_item("t2", "Also Keep"),
        ]
        router.add("POST", TOKEN_URL, token_response())
        router.add(
            "GET",
            playlist_url("abc123"),
            httpx.Response(200, json=spotify_playlist_payload("abc123", items)),
        )

        snapshot = await spotify.fetch_playlist_data("abc123")

        assert [t.id for t in snapshot.tracks] == ["t1", "t2"]

    async def test_missing_name_is_malformed(self, router, spotify):
        payload = spotify_playlist_payload("abc123", [])
        del payload["name"]
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("abc123"), httpx.Response(200, json=payload))

        with pytest.raises(UpstreamMalformed):
            await spotify.fetch_playlist_data("abc123")

    async def test_invalid_json_is_malformed(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("abc123"), httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamMalformed):
            await spotify.fetch_playlist_data("abc123")

    async def test_unknown_playlist(self, router, spotify):
        router.add("POST", TOKEN_URL, token_response())
        router.add("GET", playlist_url("nope"), httpx.Response(404))

        with pytest.raises(NotFound):
            await spotify.fetch_playlist_data("nope")


class TestConversion:
    def test_artist_names_trimmed_and_blank_dropped(self):
        item = spotify_track_item("t1", " Song ", ["  A  ", "", "B"])
        track = extract_catalog_track(item)

        assert track.name == "Song"
        assert track.artists == ["A", "B"]
        assert track.duration_ms == 180_000

    def test_missing_id_gets_generated_placeholder(self):
        track = extract_catalog_track(spotify_track_item(None, "Song"))
        assert track.id.startswith("unknown-")

    def test_not_a_dict(self):
        assert extract_catalog_track(None) is None

    @pytest.mark.parametrize(("raw", "expected"), [(" S1 ", "S1"), ("", None), (None, None), (42, None)])
    def test_clean_snapshot_id(self, raw, expected):
        assert clean_snapshot_id(raw) == expected
