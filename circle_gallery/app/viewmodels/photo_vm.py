"""Lightweight view model wrappers around `Photo` and `Album`."""

from __future__ import annotations

from dataclasses import dataclass

from circle_gallery.core.models import Album, Photo
from circle_gallery.infrastructure.utils import format_date, format_datetime, format_file_size


@dataclass(frozen=True)
class PhotoVM:
    """Expose convenient properties for bindings/templates."""

    record: Photo
    is_selected: bool = False

    @property
    def display_name(self) -> str:
        """Title, then filename, then a placeholder."""
        return self.record.title or self.record.filename or "Untitled Photo"

    @property
    def thumbnail_url(self) -> str:
        return self.record.thumbnail or self.record.uri

    @property
    def size_text(self) -> str:
        return format_file_size(self.record.size)

    @property
    def dimensions_text(self) -> str:
        """`W × H`, or empty when the server did not report dimensions."""
        if not (self.record.width and self.record.height):
            return ""
        return f"{self.record.width} × {self.record.height}"

    @property
    def created_text(self) -> str:
        return format_datetime(self.record.created_at)

    @property
    def camera(self) -> str:
        return str(self.record.metadata.get("camera") or "Unknown")


@dataclass(frozen=True)
class AlbumVM:
    record: Album

    @property
    def display_name(self) -> str:
        return self.record.name or "Untitled Album"

    @property
    def cover_url(self) -> str:
        return self.record.cover_photo or ""

    @property
    def count_text(self) -> str:
        count = self.record.photo_count
        return f"{count} photo" if count == 1 else f"{count} photos"

    @property
    def date_text(self) -> str:
        return format_date(self.record.created_at)
