"""Core service interfaces.

`GalleryGateway` is the capability the state container is built around. It is
passed into the view-model at construction time so tests can substitute an
in-memory fake for the HTTP implementation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from circle_gallery.core.models import Album, GalleryFilters, GalleryStats, Photo, PhotoPage, Scope


class GalleryGateway(Protocol):
    """Scope-aware CRUD surface over the remote gallery API.

    Listing calls (`fetch_photos`, `fetch_albums`, `get_stats`) degrade to empty
    results on failure. Every mutating call raises a `GalleryError` instead.
    """

    async def fetch_photos(
        self, scope: Scope, filters: GalleryFilters, album_id: str | None = None
    ) -> PhotoPage:
        """List photos of `scope`, narrowed by `filters` and one album level."""
        raise NotImplementedError

    async def fetch_albums(self, scope: Scope, parent_id: str | None = None) -> list[Album]:
        """List one level of the album tree; root level when `parent_id` is None."""
        raise NotImplementedError

    async def create_album(
        self,
        scope: Scope,
        name: str,
        description: str | None = None,
        parent_id: str | None = None,
        color: str | None = None,
        cover_photo_id: str | None = None,
    ) -> Album:
        raise NotImplementedError

    async def toggle_favorite(self, photo_id: str) -> bool:
        """Flip the favorite flag server-side and return the resulting state."""
        raise NotImplementedError

    async def move_to_album(self, photo_id: str, album_id: str | None) -> Photo:
        """Move a photo into `album_id`, or to the scope root when None."""
        raise NotImplementedError

    async def update_photo(self, photo_id: str, updates: Mapping[str, Any]) -> Photo:
        raise NotImplementedError

    async def delete_photo(self, photo_id: str) -> None:
        raise NotImplementedError

    async def set_album_cover(self, album_id: str, photo_id: str) -> None:
        raise NotImplementedError

    async def update_album(self, album_id: str, updates: Mapping[str, Any]) -> Album:
        raise NotImplementedError

    async def delete_album(self, album_id: str) -> None:
        raise NotImplementedError

    async def get_stats(self, scope: Scope | None = None) -> GalleryStats:
        """Aggregate counters for `scope`; personal when None."""
        raise NotImplementedError
