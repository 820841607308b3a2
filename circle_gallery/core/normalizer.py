"""Mapping of raw API payloads onto the canonical `Photo`/`Album` shapes.

The server is inconsistent about field names (`uri` vs `url`, `coverPhoto`
vs `coverPhotoUrl`, `photoCount` vs `mediaCount`, ...). Everything here is
pure: a dict goes in, a frozen model comes out. Missing optional fields get
sane defaults; a missing `id` is the only hard failure.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from loguru import logger

from circle_gallery.core.errors import PayloadError
from circle_gallery.core.models import Album, GalleryStats, Photo, PhotoPage

T = TypeVar("T")


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first truthy value among `keys`, else None."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        logger.warning("Invalid integer field: {}", value)
        return 0


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch milliseconds into a datetime.

    Returns None if the value is empty or invalid.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning("Invalid epoch timestamp: {}", value)
            return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Invalid timestamp: {}", value)
        return None
    # Server timestamps without an offset are UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_id(data: Mapping[str, Any], entity: str) -> str:
    if not isinstance(data, Mapping):
        raise PayloadError(entity, f"expected an object, got {type(data).__name__}")
    raw_id = data.get("id")
    if raw_id is None or raw_id == "":
        raise PayloadError(entity, "missing id")
    return str(raw_id)


def normalize_photo(data: Mapping[str, Any]) -> Photo:
    """Build a `Photo` from a server payload."""
    photo_id = _require_id(data, "photo")
    metadata = data.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        metadata = {}
    uri = _first(data, "uri", "url") or ""
    uploaded_by = _first(data, "uploadedBy", "uploaderId") or ""
    return Photo(
        id=photo_id,
        uri=uri,
        thumbnail=_first(data, "thumbnail", "thumbnailUrl") or uri,
        filename=_first(data, "filename", "originalName") or "",
        title=_first(data, "title", "description"),
        size=_as_int(data.get("size")),
        width=_as_int(data.get("width") or metadata.get("width")),
        height=_as_int(data.get("height") or metadata.get("height")),
        created_at=parse_timestamp(_first(data, "createdAt", "uploadedAt")),
        album_id=_first(data, "albumId", "folderId"),
        circle_id=str(data.get("circleId") or ""),
        is_favorite=bool(data.get("isFavorite", False)),
        uploaded_by=str(uploaded_by),
        uploader_name=data.get("uploaderName"),
        metadata=dict(metadata),
    )


def normalize_album(data: Mapping[str, Any]) -> Album:
    """Build an `Album` from a server payload."""
    album_id = _require_id(data, "album")
    members = data.get("members") or ()
    if not isinstance(members, (list, tuple, set, frozenset)):
        members = ()
    return Album(
        id=album_id,
        name=str(data.get("name") or ""),
        description=data.get("description"),
        color=data.get("color"),
        cover_photo=_first(data, "coverPhoto", "coverPhotoUrl", "coverImage"),
        photo_count=_as_int(_first(data, "photoCount", "mediaCount", "itemCount")),
        parent_id=data.get("parentId") or None,
        circle_id=str(data.get("circleId") or ""),
        created_at=parse_timestamp(data.get("createdAt")),
        updated_at=parse_timestamp(data.get("updatedAt")),
        created_by=_first(data, "createdBy", "ownerId"),
        members=frozenset(str(m) for m in members),
    )


def normalize_stats(data: Mapping[str, Any] | None) -> GalleryStats:
    """Build `GalleryStats`, zero-filling any missing counter."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise PayloadError("stats", f"expected an object, got {type(data).__name__}")
    return GalleryStats(
        total_photos=_as_int(data.get("totalPhotos")),
        total_videos=_as_int(data.get("totalVideos")),
        total_size=_as_int(data.get("totalSize")),
        album_count=_as_int(data.get("albumCount")),
        favorite_count=_as_int(data.get("favoriteCount")),
        recent_count=_as_int(data.get("recentCount")),
    )


def _normalize_list(
    items: Any, entity: str, normalize: Callable[[Mapping[str, Any]], T]
) -> list[T]:
    """Normalize each record of a listing, skipping the ones that are malformed.

    Raises:
        PayloadError: `items` is not a list.
    """
    if items is None:
        return []
    if not isinstance(items, list):
        raise PayloadError(f"{entity} list", f"expected a list, got {type(items).__name__}")
    records: list[T] = []
    for index, raw in enumerate(items):
        try:
            records.append(normalize(raw))
        except PayloadError as ex:
            logger.warning("Skipping {} #{}: {}", entity, index, ex.message)
    return records


def normalize_photos(items: Any) -> list[Photo]:
    return _normalize_list(items, "photo", normalize_photo)


def normalize_albums(items: Any) -> list[Album]:
    return _normalize_list(items, "album", normalize_album)


def normalize_photo_page(body: Mapping[str, Any]) -> PhotoPage:
    """Build a `PhotoPage` from a listing envelope; `total` falls back to the item count."""
    items = tuple(normalize_photos(body.get("photos")))
    return PhotoPage(items=items, total=_as_int(body.get("total")) or len(items))
