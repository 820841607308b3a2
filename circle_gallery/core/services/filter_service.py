"""Local search and aggregate helpers over already-loaded entities.

Listing filters are applied by the server; these helpers only narrow or count
what the client already holds (quick search while typing, selection totals).
"""

from __future__ import annotations

from collections.abc import Iterable

from circle_gallery.core.models import Album, Photo


def filter_photos_by_search(photos: Iterable[Photo], query: str) -> list[Photo]:
    """Return photos whose title, filename or tags contain `query` (case-insensitive)."""
    needle = query.strip().casefold()
    if not needle:
        return list(photos)
    result: list[Photo] = []
    for photo in photos:
        haystack = [photo.title or "", photo.filename, *photo.tags]
        if any(needle in text.casefold() for text in haystack):
            result.append(photo)
    return result


def filter_albums_by_search(albums: Iterable[Album], query: str) -> list[Album]:
    needle = query.strip().casefold()
    if not needle:
        return list(albums)
    return [
        a
        for a in albums
        if needle in a.name.casefold() or needle in (a.description or "").casefold()
    ]


def total_size(photos: Iterable[Photo]) -> int:
    return sum(p.size for p in photos)


def count_favorites(photos: Iterable[Photo]) -> int:
    return sum(1 for p in photos if p.is_favorite)


def count_shared(photos: Iterable[Photo]) -> int:
    return sum(1 for p in photos if p.is_shared)


def count_in_album(photos: Iterable[Photo], album_id: str) -> int:
    return sum(1 for p in photos if p.album_id == album_id)
