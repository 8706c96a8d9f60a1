"""Track matching algorithms with zero external dependencies."""

from .algorithms import (
    build_artist_list,
    build_search_query,
    is_preferred_candidate,
    normalize,
    pick_cover_image,
    select_best_candidate,
)

__all__ = [
    "build_artist_list",
    "build_search_query",
    "is_preferred_candidate",
    "normalize",
    "pick_cover_image",
    "select_best_candidate",
]
