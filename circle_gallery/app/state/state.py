"""Immutable snapshot of everything the gallery UI renders from."""

from __future__ import annotations

from dataclasses import dataclass

from circle_gallery.core.errors import ErrorKind
from circle_gallery.core.models import (
    Album,
    GalleryFilters,
    GalleryMode,
    GalleryStats,
    Photo,
    Scope,
    ViewMode,
)


@dataclass(frozen=True)
class GalleryState:
    """Gallery state tree.

    `selected_album` is always the last entry of `current_album_path`, or None
    when the path is empty.
    """

    mode: GalleryMode = GalleryMode.PERSONAL
    circle_id: str | None = None
    photos: tuple[Photo, ...] = ()
    albums: tuple[Album, ...] = ()
    selected_photos: tuple[str, ...] = ()
    selected_album: Album | None = None
    current_album_path: tuple[Album, ...] = ()
    is_loading: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None
    filters: GalleryFilters = GalleryFilters()
    view_mode: ViewMode = ViewMode.PHOTOS
    stats: GalleryStats | None = None

    @property
    def scope(self) -> Scope:
        """Scope implied by the current mode."""
        if self.mode is GalleryMode.CIRCLE and self.circle_id:
            return Scope.circle(self.circle_id)
        return Scope.personal()

    @property
    def current_album_id(self) -> str | None:
        return self.selected_album.id if self.selected_album else None


INITIAL_STATE = GalleryState()
