"""Core domain models for gallery photos, albums and query scopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

PERSONAL_CIRCLE_ID = ""


class GalleryMode(str, Enum):
    """Which data partition the gallery is showing."""

    PERSONAL = "personal"
    CIRCLE = "circle"


class ViewMode(str, Enum):
    PHOTOS = "photos"
    ALBUMS = "albums"
    GRID = "grid"
    LIST = "list"


class FilterType(str, Enum):
    """Server-side narrowing applied to photo listings."""

    ALL = "all"
    FAVORITES = "favorites"
    SHARED = "shared"
    RECENT = "recent"
    PHOTOS = "photos"
    VIDEOS = "videos"


class SortBy(str, Enum):
    CREATED_AT = "created_at"
    NAME = "name"
    SIZE = "size"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Scope:
    """Data partition targeted by a gateway call.

    A scope without `circle_id` is the personal partition of the current user.
    """

    circle_id: str | None = None

    @classmethod
    def personal(cls) -> Scope:
        return cls()

    @classmethod
    def circle(cls, circle_id: str) -> Scope:
        if not circle_id:
            raise ValueError("circle scope requires a circle id")
        return cls(circle_id=circle_id)

    @property
    def is_personal(self) -> bool:
        return not self.circle_id

    def __str__(self) -> str:
        return "personal" if self.is_personal else f"circle/{self.circle_id}"


@dataclass(frozen=True)
class Photo:
    """A single media asset as seen by the client."""

    id: str
    uri: str
    filename: str
    thumbnail: str = ""
    title: str | None = None
    size: int = 0
    width: int = 0
    height: int = 0
    created_at: datetime | None = None
    album_id: str | None = None
    circle_id: str = PERSONAL_CIRCLE_ID
    is_favorite: bool = False
    uploaded_by: str = ""
    uploader_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_shared(self) -> bool:
        """True when the photo lives in a circle scope."""
        return bool(self.circle_id)

    @property
    def tags(self) -> frozenset[str]:
        raw = self.metadata.get("tags") or ()
        return frozenset(str(tag) for tag in raw)


@dataclass(frozen=True)
class Album:
    """A named, possibly nested, photo container."""

    id: str
    name: str
    description: str | None = None
    color: str | None = None
    cover_photo: str | None = None
    photo_count: int = 0
    parent_id: str | None = None
    circle_id: str = PERSONAL_CIRCLE_ID
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    members: frozenset[str] = frozenset()

    @property
    def is_shared(self) -> bool:
        """True when the album lives in a circle scope."""
        return bool(self.circle_id)


@dataclass(frozen=True)
class GalleryFilters:
    """Declared listing intent; changing it never triggers a reload by itself."""

    type: FilterType = FilterType.ALL
    search_query: str = ""
    sort_by: SortBy = SortBy.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


@dataclass(frozen=True)
class GalleryStats:
    total_photos: int = 0
    total_videos: int = 0
    total_size: int = 0
    album_count: int = 0
    favorite_count: int = 0
    recent_count: int = 0


@dataclass(frozen=True)
class PhotoPage:
    """One listing result: the photos returned plus the server-side total."""

    items: tuple[Photo, ...] = ()
    total: int = 0
