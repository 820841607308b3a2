"""Pure transition function for the gallery state tree.

`reduce(state, action)` never mutates its input and never performs I/O. Every
network call happens in the view-model; this module only decides what the
state looks like once a call has settled.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from circle_gallery.app.state import actions as a
from circle_gallery.app.state.state import GalleryState
from circle_gallery.core.models import FilterType, GalleryFilters, SortBy, SortOrder
from circle_gallery.core.services.album_tree import replace_in_path, truncate_at

_FILTER_COERCERS = {
    "type": FilterType,
    "search_query": str,
    "sort_by": SortBy,
    "sort_order": SortOrder,
}


def merge_filters(filters: GalleryFilters, changes: Mapping[str, Any]) -> GalleryFilters:
    """Shallow-merge `changes` into `filters`, coercing enum-valued fields.

    Raises:
        KeyError: If a key does not name a filter field.
        ValueError: If a value is not valid for its field.
    """
    coerced: dict[str, Any] = {}
    for key, value in changes.items():
        if key not in _FILTER_COERCERS:
            raise KeyError(key)
        coerced[key] = _FILTER_COERCERS[key](value)
    return replace(filters, **coerced)


def _with_path(state: GalleryState, path: tuple) -> GalleryState:
    """Set the breadcrumb and keep `selected_album` pinned to its last entry."""
    return replace(state, current_album_path=path, selected_album=path[-1] if path else None)


# pylint: disable-next=too-many-return-statements,too-many-branches
def reduce(state: GalleryState, action: a.GalleryAction) -> GalleryState:
    """Return the state that results from applying `action` to `state`."""
    if isinstance(action, a.SetMode):
        return replace(
            state,
            mode=action.mode,
            circle_id=action.circle_id,
            photos=(),
            albums=(),
            selected_photos=(),
            selected_album=None,
            current_album_path=(),
            stats=None,
        )
    if isinstance(action, a.SetLoading):
        return replace(state, is_loading=action.is_loading)
    if isinstance(action, a.SetError):
        kind = action.kind if action.message is not None else None
        return replace(state, error=action.message, error_kind=kind)
    if isinstance(action, a.SetPhotos):
        return replace(state, photos=tuple(action.photos))
    if isinstance(action, a.SetAlbums):
        return replace(state, albums=tuple(action.albums))
    if isinstance(action, a.SetStats):
        return replace(state, stats=action.stats)

    if isinstance(action, a.AddPhoto):
        return replace(state, photos=(action.photo, *state.photos))
    if isinstance(action, a.UpdatePhoto):
        photos = tuple(action.photo if p.id == action.photo.id else p for p in state.photos)
        return replace(state, photos=photos)
    if isinstance(action, a.PatchPhotoFavorite):
        photos = tuple(
            replace(p, is_favorite=action.is_favorite) if p.id == action.photo_id else p
            for p in state.photos
        )
        return replace(state, photos=photos)
    if isinstance(action, a.DeletePhoto):
        return replace(
            state,
            photos=tuple(p for p in state.photos if p.id != action.photo_id),
            selected_photos=tuple(i for i in state.selected_photos if i != action.photo_id),
        )

    if isinstance(action, a.AddAlbum):
        return replace(state, albums=(action.album, *state.albums))
    if isinstance(action, a.UpdateAlbum):
        album = action.album
        albums = tuple(album if x.id == album.id else x for x in state.albums)
        return _with_path(
            replace(state, albums=albums), replace_in_path(state.current_album_path, album)
        )
    if isinstance(action, a.DeleteAlbum):
        albums = tuple(x for x in state.albums if x.id != action.album_id)
        return _with_path(
            replace(state, albums=albums),
            truncate_at(state.current_album_path, action.album_id),
        )

    if isinstance(action, a.TogglePhotoSelection):
        if action.photo_id in state.selected_photos:
            selected = tuple(i for i in state.selected_photos if i != action.photo_id)
        else:
            selected = (*state.selected_photos, action.photo_id)
        return replace(state, selected_photos=selected)
    if isinstance(action, a.SelectAllPhotos):
        return replace(state, selected_photos=tuple(p.id for p in state.photos))
    if isinstance(action, a.ClearSelection):
        return replace(state, selected_photos=())

    if isinstance(action, a.PushAlbumPath):
        return _with_path(state, (*state.current_album_path, action.album))
    if isinstance(action, a.PopAlbumPath):
        if not state.current_album_path:
            return state
        return _with_path(state, state.current_album_path[:-1])
    if isinstance(action, a.ResetAlbumPath):
        return _with_path(state, ())

    if isinstance(action, a.UpdateFilters):
        return replace(state, filters=merge_filters(state.filters, action.changes))
    if isinstance(action, a.SetViewMode):
        return replace(state, view_mode=action.view_mode)
    return state
