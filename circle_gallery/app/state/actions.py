"""Closed set of state transitions understood by the gallery reducer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from circle_gallery.core.errors import ErrorKind
from circle_gallery.core.models import Album, GalleryMode, GalleryStats, Photo, ViewMode


@dataclass(frozen=True)
class SetMode:
    mode: GalleryMode
    circle_id: str | None = None


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool


@dataclass(frozen=True)
class SetError:
    message: str | None
    kind: ErrorKind | None = None


@dataclass(frozen=True)
class SetPhotos:
    photos: tuple[Photo, ...]


@dataclass(frozen=True)
class SetAlbums:
    albums: tuple[Album, ...]


@dataclass(frozen=True)
class SetStats:
    stats: GalleryStats


@dataclass(frozen=True)
class AddPhoto:
    photo: Photo


@dataclass(frozen=True)
class UpdatePhoto:
    photo: Photo


@dataclass(frozen=True)
class PatchPhotoFavorite:
    photo_id: str
    is_favorite: bool


@dataclass(frozen=True)
class DeletePhoto:
    photo_id: str


@dataclass(frozen=True)
class AddAlbum:
    album: Album


@dataclass(frozen=True)
class UpdateAlbum:
    album: Album


@dataclass(frozen=True)
class DeleteAlbum:
    album_id: str


@dataclass(frozen=True)
class TogglePhotoSelection:
    photo_id: str


@dataclass(frozen=True)
class SelectAllPhotos:
    pass


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class PushAlbumPath:
    album: Album


@dataclass(frozen=True)
class PopAlbumPath:
    pass


@dataclass(frozen=True)
class ResetAlbumPath:
    pass


@dataclass(frozen=True)
class UpdateFilters:
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class SetViewMode:
    view_mode: ViewMode


GalleryAction = Union[
    SetMode,
    SetLoading,
    SetError,
    SetPhotos,
    SetAlbums,
    SetStats,
    AddPhoto,
    UpdatePhoto,
    PatchPhotoFavorite,
    DeletePhoto,
    AddAlbum,
    UpdateAlbum,
    DeleteAlbum,
    TogglePhotoSelection,
    SelectAllPhotos,
    ClearSelection,
    PushAlbumPath,
    PopAlbumPath,
    ResetAlbumPath,
    UpdateFilters,
    SetViewMode,
]
