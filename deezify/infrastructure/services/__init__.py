"""Infrastructure services composing connectors into cached pipelines."""

from .derived_playlist_cache import DerivedPlaylistCache, assemble_derived_playlist

__all__ = ["DerivedPlaylistCache", "assemble_derived_playlist"]
