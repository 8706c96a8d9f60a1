"""Tests for domain entities and their invariants."""

import attrs
import pytest

from deezify.domain.entities import (
    CatalogTrack,
    DerivedPlaylist,
    MatchedTrack,
    WeatherKind,
    WeatherPayload,
    WeatherQuery,
    WeatherUnits,
    fallback_track,
    map_weather_code,
)


class TestDerivedPlaylist:
    def test_total_tracks_defaults_to_track_count(self):
        playlist = DerivedPlaylist(
            id="p1",
            name="Playlist",
            external_url="https://open.spotify.com/playlist/p1",
            tracks=[MatchedTrack(id="1", name="One"), MatchedTrack(id="2", name="Two")],
        )
        assert playlist.total_tracks == 2

    def test_total_tracks_must_match_tracks(self):
        with pytest.raises(ValueError, match="total_tracks"):
            DerivedPlaylist(
                id="p1",
                name="Playlist",
                external_url="https://open.spotify.com/playlist/p1",
                tracks=[MatchedTrack(id="1", name="One")],
                total_tracks=3,
            )

    def test_is_immutable(self):
        playlist = DerivedPlaylist(id="p1", name="Playlist", external_url="u")
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            playlist.name = "Renamed"

    def test_to_dict_uses_wire_field_names(self):
        playlist = DerivedPlaylist(
            id="p1",
            name="Playlist",
            external_url="u",
            curator_name="Curator",
            tracks=[MatchedTrack(id="1", name="One", preview_url="https://p")],
        )
        payload = playlist.to_dict()
        assert payload["totalTracks"] == 1
        assert payload["curatorName"] == "Curator"
        assert payload["tracks"][0]["previewUrl"] == "https://p"


class TestFallbackTrack:
    def test_fallback_carries_catalog_data_without_preview(self):
        track = CatalogTrack(
            id="sp1",
            name="Song B",
            artists=["Artist"],
            external_url="https://open.spotify.com/track/sp1",
            duration_ms=123_000,
        )
        fallback = fallback_track(track, "https://playlist/cover.jpg")

        assert fallback.id == "primary:sp1"
        assert fallback.preview_url is None
        assert fallback.image_url == "https://playlist/cover.jpg"
        assert fallback.duration_ms == 123_000
        assert fallback.artists == ["Artist"]
        assert fallback.external_url == "https://open.spotify.com/track/sp1"

    def test_catalog_track_requires_name(self):
        with pytest.raises(ValueError):
            CatalogTrack(id="x", name="")


class TestWeatherCodeMapping:
    @pytest.mark.parametrize(
        ("code", "kind"),
        [
            (0, WeatherKind.CLEAR),
            (1, WeatherKind.MOSTLY_CLEAR),
            (2, WeatherKind.PARTLY_CLOUDY),
            (3, WeatherKind.OVERCAST),
            (48, WeatherKind.FOG),
            (55, WeatherKind.DRIZZLE),
            (63, WeatherKind.RAIN),
            (67, WeatherKind.FREEZING_RAIN),
            (86, WeatherKind.SNOW),
            (95, WeatherKind.THUNDERSTORM),
            (99, WeatherKind.THUNDERSTORM),
        ],
    )
    def test_known_codes(self, code, kind):
        assert map_weather_code(code) is kind

    def test_unknown_code_is_clear(self):
        assert map_weather_code(9999) is WeatherKind.CLEAR

    def test_missing_code_is_clear(self):
        assert map_weather_code(None) is WeatherKind.CLEAR

    def test_taxonomy_has_ten_kinds(self):
        assert len(WeatherKind) == 10


class TestWeatherQuery:
    def test_defaults(self):
        query = WeatherQuery(latitude=52.37, longitude=4.89)
        assert query.timezone == "auto"
        assert query.units is WeatherUnits.METRIC

    def test_timezone_is_trimmed_and_units_coerced(self):
        query = WeatherQuery(
            latitude=0, longitude=0, timezone=" Europe/Amsterdam ", units="imperial"
        )
        assert query.timezone == "Europe/Amsterdam"
        assert query.units is WeatherUnits.IMPERIAL

    @pytest.mark.parametrize(("lat", "lon"), [(90.1, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_out_of_range_coordinates_rejected(self, lat, lon):
        with pytest.raises(ValueError):
            WeatherQuery(latitude=lat, longitude=lon)

    def test_cache_key_distinguishes_units(self):
        metric = WeatherQuery(latitude=1, longitude=2)
        imperial = WeatherQuery(latitude=1, longitude=2, units="imperial")
        assert metric.cache_key() != imperial.cache_key()

    def test_cache_key_restores_query(self):
        query = WeatherQuery(latitude=52.37, longitude=4.89, timezone="Europe/Amsterdam")
        assert WeatherQuery.from_cache_key(query.cache_key()) == query

    def test_payload_to_dict(self):
        payload = WeatherPayload(
            units=WeatherUnits.METRIC,
            kind=WeatherKind.RAIN,
            temperature=12.5,
            weather_code=61,
            observed_at="2024-05-01T12:00",
        )
        assert payload.to_dict() == {
            "temperature": 12.5,
            "weatherCode": 61,
            "observedAt": "2024-05-01T12:00",
            "units": "metric",
            "kind": "rain",
        }
