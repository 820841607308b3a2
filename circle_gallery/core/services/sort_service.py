"""Client-side ordering of loaded photos and albums.

The server decides *which* entities are listed; this service only decides the
order they are shown in. Missing values always sort last regardless of
direction, and inputs are never mutated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from circle_gallery.core.models import Album, Photo, SortBy, SortOrder

T = TypeVar("T")

_PHOTO_KEYS: dict[SortBy, Callable[[Photo], Any]] = {
    SortBy.CREATED_AT: lambda p: p.created_at,
    SortBy.NAME: lambda p: (p.title or p.filename or "").casefold() or None,
    SortBy.SIZE: lambda p: p.size,
}

_ALBUM_KEYS: dict[SortBy, Callable[[Album], Any]] = {
    SortBy.CREATED_AT: lambda a: a.created_at,
    SortBy.NAME: lambda a: a.name.casefold() or None,
    SortBy.SIZE: lambda a: a.photo_count,
}


class SortService:
    """Provides stable sorting for photo and album collections."""

    def sort_photos(
        self, photos: Iterable[Photo], sort_by: SortBy, order: SortOrder = SortOrder.DESC
    ) -> list[Photo]:
        return self._sort(photos, _PHOTO_KEYS[SortBy(sort_by)], SortOrder(order))

    def sort_albums(
        self, albums: Iterable[Album], sort_by: SortBy, order: SortOrder = SortOrder.DESC
    ) -> list[Album]:
        return self._sort(albums, _ALBUM_KEYS[SortBy(sort_by)], SortOrder(order))

    @staticmethod
    def _sort(items: Iterable[T], key: Callable[[T], Any], order: SortOrder) -> list[T]:
        """Sort `items` by `key`, keeping entries whose key is None at the end.

        Args:
            items: Entities to order.
            key: Extracts the comparable value from one entity.
            order: Ascending or descending direction for present values.
        """
        present: list[tuple[Any, T]] = []
        missing: list[T] = []
        for item in items:
            value = key(item)
            if value is None:
                missing.append(item)
            else:
                present.append((value, item))

        present.sort(key=lambda x: x[0], reverse=order is SortOrder.DESC)
        return [item for _, item in present] + missing
