# tests/conftest.py
# Shared fixtures: entity factories and an in-memory gateway fake

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import pytest

from circle_gallery.app.viewmodels.gallery_vm import GalleryVM
from circle_gallery.core.models import Album, GalleryFilters, GalleryStats, Photo, PhotoPage, Scope


def make_photo(photo_id: str, **fields: Any) -> Photo:
    defaults: dict[str, Any] = {
        "uri": f"https://cdn.test/{photo_id}.jpg",
        "filename": f"{photo_id}.jpg",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(fields)
    return Photo(id=photo_id, **defaults)


def make_album(album_id: str, name: str | None = None, **fields: Any) -> Album:
    return Album(id=album_id, name=name or album_id.upper(), **fields)


class FakeGateway:
    """Records every call and answers from in-memory data.

    Set `fail[<method name>]` to an exception to make that method raise it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.fail: dict[str, BaseException] = {}
        self.photos: list[Photo] = []
        self.albums: list[Album] = []
        self.stats = GalleryStats()
        self.favorite_result = True
        self.next_album: Album | None = None

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        if name in self.fail:
            raise self.fail[name]

    def calls_to(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]

    async def fetch_photos(
        self, scope: Scope, filters: GalleryFilters, album_id: str | None = None
    ) -> PhotoPage:
        self._record("fetch_photos", scope, filters, album_id)
        return PhotoPage(items=tuple(self.photos), total=len(self.photos))

    async def fetch_albums(self, scope: Scope, parent_id: str | None = None) -> list[Album]:
        self._record("fetch_albums", scope, parent_id)
        return list(self.albums)

    async def create_album(self, scope: Scope, name: str, **kwargs: Any) -> Album:
        self._record("create_album", scope, name, **kwargs)
        if self.next_album is not None:
            return self.next_album
        return make_album(
            "new", name, parent_id=kwargs.get("parent_id"), circle_id=scope.circle_id or ""
        )

    async def toggle_favorite(self, photo_id: str) -> bool:
        self._record("toggle_favorite", photo_id)
        return self.favorite_result

    async def move_to_album(self, photo_id: str, album_id: str | None) -> Photo:
        self._record("move_to_album", photo_id, album_id)
        return make_photo(photo_id, album_id=album_id)

    async def update_photo(self, photo_id: str, updates: Mapping[str, Any]) -> Photo:
        self._record("update_photo", photo_id, dict(updates))
        return make_photo(photo_id, **updates)

    async def delete_photo(self, photo_id: str) -> None:
        self._record("delete_photo", photo_id)

    async def set_album_cover(self, album_id: str, photo_id: str) -> None:
        self._record("set_album_cover", album_id, photo_id)

    async def update_album(self, album_id: str, updates: Mapping[str, Any]) -> Album:
        self._record("update_album", album_id, dict(updates))
        current = next((x for x in self.albums if x.id == album_id), make_album(album_id))
        return replace(current, **updates)

    async def delete_album(self, album_id: str) -> None:
        self._record("delete_album", album_id)

    async def get_stats(self, scope: Scope | None = None) -> GalleryStats:
        self._record("get_stats", scope)
        return self.stats


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def vm(gateway: FakeGateway) -> GalleryVM:
    return GalleryVM(gateway)
