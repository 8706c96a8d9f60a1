"""Deezify domain layer - pure business logic with no I/O."""

from . import entities, errors, matching

from .entities import (
    CatalogPlaylistSnapshot,
    CatalogTrack,
    DerivedPlaylist,
    MatchedTrack,
    WeatherPayload,
    WeatherQuery,
)
from .errors import (
    ConfigurationError,
    DeezifyError,
    NotFound,
    UpstreamError,
    UpstreamMalformed,
    UpstreamRejected,
    UpstreamUnavailable,
)
from .matching import normalize, select_best_candidate

__all__ = [
    # Modules
    "entities",
    "errors",
    "matching",
    # Key domain types
    "CatalogPlaylistSnapshot",
    "CatalogTrack",
    "DerivedPlaylist",
    "MatchedTrack",
    "WeatherPayload",
    "WeatherQuery",
    # Errors
    "ConfigurationError",
    "DeezifyError",
    "NotFound",
    "UpstreamError",
    "UpstreamMalformed",
    "UpstreamRejected",
    "UpstreamUnavailable",
    # Matching
    "normalize",
    "select_best_candidate",
]
