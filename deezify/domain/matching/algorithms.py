"""Pure algorithms for matching Spotify tracks to Deezer search results.

These functions contain no I/O. Candidates are the raw track objects from the
Deezer search API, matching keys are the output of normalize() and are never
shown to users.
"""

from typing import Any
import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(value: str) -> str:
    """Fold case, diacritics and punctuation so near-identical strings compare equal.

    >>> normalize("Café") == normalize("cafe")
    True
    >>> normalize("Rock & Roll!!")
    'rockroll'
    """
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped)


def build_search_query(name: str, artists: list[str]) -> str:
    """Build a Deezer advanced search query for a track."""
    primary_artist = artists[0] if artists else ""
    if primary_artist:
        return f'artist:"{primary_artist}" track:"{name}"'
    return f'track:"{name}"'


def build_artist_list(candidate: dict[str, Any]) -> list[str]:
    """Collect the main artist and contributors, de-duplicated in first-seen order."""
    names: dict[str, None] = {}

    artist = candidate.get("artist") or {}
    if artist.get("name"):
        names[artist["name"]] = None

    for contributor in candidate.get("contributors") or []:
        if contributor and contributor.get("name"):
            names[contributor["name"]] = None

    return list(names)


def is_preferred_candidate(
    candidate: dict[str, Any],
    normalized_name: str,
    normalized_artists: list[str],
) -> bool:
    """Check whether a candidate's title and artists match the query exactly."""
    title = candidate.get("title") if candidate else None
    if not title or normalize(title) != normalized_name:
        return False

    if not normalized_artists:
        return True

    candidate_artists = {normalize(name) for name in build_artist_list(candidate)}
    return any(artist in candidate_artists for artist in normalized_artists)


def select_best_candidate(
    candidates: list[dict[str, Any]],
    name: str,
    artists: list[str],
) -> dict[str, Any] | None:
    """Pick the best Deezer candidate for a track.

    Prefers the first candidate whose normalized title equals the track name
    and which shares at least one normalized artist (any title match counts
    when the track has no artists). Otherwise falls back to Deezer's own top
    result, even if its title differs.

    Returns:
        The chosen raw candidate, or None when there are no candidates
    """
    if not candidates:
        return None

    normalized_name = normalize(name)
    normalized_artists = [n for n in (normalize(a) for a in artists) if n]

    for candidate in candidates:
        if is_preferred_candidate(candidate, normalized_name, normalized_artists):
            return candidate

    return candidates[0]


def pick_cover_image(album: dict[str, Any] | None) -> str | None:
    """Return the largest available album cover URL."""
    if not album:
        return None
    for size in ("cover_xl", "cover_big", "cover_medium", "cover"):
        if album.get(size):
            return album[size]
    return None
