"""ViewModel orchestrating gallery API calls and state transitions.

`GalleryVM` is the imperative shell around the pure reducer: each async
operation calls the injected gateway and, once the call has settled,
dispatches exactly one state transition. Local state never changes ahead of
server confirmation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from loguru import logger

from circle_gallery.app.state import actions as a
from circle_gallery.app.state.reducer import merge_filters, reduce
from circle_gallery.app.state.state import INITIAL_STATE, GalleryState
from circle_gallery.app.viewmodels.photo_vm import AlbumVM, PhotoVM
from circle_gallery.core.errors import ValidationError, error_kind_of
from circle_gallery.core.models import Album, GalleryMode, Photo, Scope, ViewMode
from circle_gallery.core.services.album_tree import is_child_of_path_end, would_create_cycle
from circle_gallery.core.services.filter_service import (
    count_favorites,
    count_in_album,
    count_shared,
    filter_albums_by_search,
    filter_photos_by_search,
    total_size,
)
from circle_gallery.core.services.interfaces import GalleryGateway
from circle_gallery.core.services.sort_service import SortService

Listener = Callable[[GalleryState], None]

_PHOTOS = "photos"
_ALBUMS = "albums"
_STATS = "stats"


class GalleryVM:
    """Gallery state container.

    Owns one `GalleryState` snapshot and replaces it on every dispatch. Loads
    carry a per-collection generation token so that a slow response cannot
    overwrite the result of a newer request or leak across a mode switch.
    """

    def __init__(
        self,
        gateway: GalleryGateway,
        sorter: SortService | None = None,
        initial_state: GalleryState | None = None,
    ) -> None:
        """Create a GalleryVM.

        Args:
            gateway: Remote gallery API (see `GalleryGateway`).
            sorter: Sorting service (defaults to `SortService`).
            initial_state: Starting snapshot, mostly useful in tests.
        """
        self._gateway = gateway
        self._sorter = sorter or SortService()
        self._state = initial_state or INITIAL_STATE
        self._listeners: list[Listener] = []
        self._generations: dict[str, int] = {_PHOTOS: 0, _ALBUMS: 0, _STATS: 0}
        self._in_flight = 0

    # ------------------------------------------------------------------ #
    # Store plumbing
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> GalleryState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: a.GalleryAction) -> GalleryState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _next_generation(self, collection: str) -> int:
        self._generations[collection] += 1
        return self._generations[collection]

    def _is_current(self, collection: str, token: int) -> bool:
        return self._generations[collection] == token

    def _begin_loading(self) -> None:
        self._in_flight += 1
        self.dispatch(a.SetLoading(True))
        self.dispatch(a.SetError(None))

    def _end_loading(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        if self._in_flight == 0:
            self.dispatch(a.SetLoading(False))

    def _fail(self, message: str, ex: BaseException) -> None:
        self.dispatch(a.SetError(message, error_kind_of(ex)))

    @contextmanager
    def _reporting(self, message: str) -> Iterator[None]:
        """Record a failed mutation in the state, then let the error propagate."""
        try:
            yield
        except Exception as ex:
            logger.error("{}: {}", message, ex)
            self._fail(message, ex)
            raise

    # ------------------------------------------------------------------ #
    # Mode
    # ------------------------------------------------------------------ #

    def set_mode(self, mode: GalleryMode | str, circle_id: str | None = None) -> None:
        """Switch data source; everything loaded for the old scope is dropped."""
        mode = GalleryMode(mode)
        if mode is GalleryMode.CIRCLE and not circle_id:
            raise ValidationError("Circle mode requires a circle id", field="circle_id")
        if mode is GalleryMode.PERSONAL:
            circle_id = None
        for collection in self._generations:
            self._next_generation(collection)
        self.dispatch(a.SetMode(mode, circle_id))
        logger.info("Gallery mode set to {}", self._state.scope)

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    async def _load_photos(self, scope: Scope, failure_message: str) -> None:
        token = self._next_generation(_PHOTOS)
        filters = self._state.filters
        album_id = self._state.current_album_id
        self._begin_loading()
        try:
            page = await self._gateway.fetch_photos(scope, filters, album_id)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("{}: {}", failure_message, ex)
            if self._is_current(_PHOTOS, token):
                self._fail(failure_message, ex)
        else:
            if self._is_current(_PHOTOS, token):
                self.dispatch(a.SetPhotos(page.items))
                logger.info(
                    "Loaded {} of {} photos from {} (album={})",
                    len(page.items),
                    page.total,
                    scope,
                    album_id,
                )
            else:
                logger.debug("Discarding stale photo listing for {} (generation {})", scope, token)
        finally:
            self._end_loading()

    async def _load_albums(self, scope: Scope, failure_message: str) -> None:
        token = self._next_generation(_ALBUMS)
        parent_id = self._state.current_album_id
        self._begin_loading()
        try:
            albums = await self._gateway.fetch_albums(scope, parent_id)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("{}: {}", failure_message, ex)
            if self._is_current(_ALBUMS, token):
                self._fail(failure_message, ex)
        else:
            if self._is_current(_ALBUMS, token):
                self.dispatch(a.SetAlbums(tuple(albums)))
                logger.info("Loaded {} albums from {} (parent={})", len(albums), scope, parent_id)
            else:
                logger.debug("Discarding stale album listing for {} (generation {})", scope, token)
        finally:
            self._end_loading()

    async def load_personal_photos(self) -> None:
        await self._load_photos(Scope.personal(), "Failed to load personal photos")

    async def load_personal_albums(self) -> None:
        await self._load_albums(Scope.personal(), "Failed to load personal albums")

    async def load_circle_photos(self, circle_id: str) -> None:
        await self._load_photos(Scope.circle(circle_id), "Failed to load circle photos")

    async def load_circle_albums(self, circle_id: str) -> None:
        await self._load_albums(Scope.circle(circle_id), "Failed to load circle albums")

    async def load_photos(self, circle_id: str | None = None) -> None:
        """Load photos for `circle_id`, else for the scope of the current mode."""
        if circle_id:
            await self.load_circle_photos(circle_id)
        elif self._state.mode is GalleryMode.CIRCLE and self._state.circle_id:
            await self.load_circle_photos(self._state.circle_id)
        else:
            await self.load_personal_photos()

    async def load_albums(self, circle_id: str | None = None) -> None:
        if circle_id:
            await self.load_circle_albums(circle_id)
        elif self._state.mode is GalleryMode.CIRCLE and self._state.circle_id:
            await self.load_circle_albums(self._state.circle_id)
        else:
            await self.load_personal_albums()

    async def load_stats(self) -> None:
        """Load aggregate counters for the current scope; failures are only logged."""
        token = self._next_generation(_STATS)
        scope = self._state.scope
        try:
            stats = await self._gateway.get_stats(None if scope.is_personal else scope)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Error loading stats for {}: {}", scope, ex)
            return
        if self._is_current(_STATS, token):
            self.dispatch(a.SetStats(stats))

    async def refresh(self) -> None:
        """Reload photos, albums and stats of the current scope concurrently."""
        await asyncio.gather(self.load_photos(), self.load_albums(), self.load_stats())

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add_photo(self, photo: Photo) -> None:
        """Insert a photo reported by a finished upload."""
        if any(p.id == photo.id for p in self._state.photos):
            self.dispatch(a.UpdatePhoto(photo))
        else:
            self.dispatch(a.AddPhoto(photo))

    async def create_album(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        cover_photo_id: str | None = None,
    ) -> Album:
        """Create an album at the current navigation depth of the current scope."""
        clean_name = (name or "").strip()
        if not clean_name:
            error = ValidationError("Album name is required", field="name")
            logger.warning("Rejected album creation: {}", error.message)
            self._fail(error.message, error)
            raise error

        scope = self._state.scope
        parent_id = self._state.current_album_id
        self._begin_loading()
        try:
            with self._reporting("Failed to create album"):
                album = await self._gateway.create_album(
                    scope,
                    clean_name,
                    description=description,
                    parent_id=parent_id,
                    color=color,
                    cover_photo_id=cover_photo_id,
                )
        finally:
            self._end_loading()

        if self._state.scope == scope and self._state.current_album_id == parent_id:
            self.dispatch(a.AddAlbum(album))
        else:
            logger.info("Album {} created in {} after leaving that level", album.id, scope)
        return album

    async def update_album(self, album_id: str, updates: Mapping[str, Any]) -> Album:
        """Apply `updates` server-side and replace every local copy of the album.

        Raises:
            ValidationError: Empty name, or a re-parenting that would create a loop.
        """
        if "name" in updates and not str(updates["name"] or "").strip():
            error = ValidationError("Album name is required", field="name")
            self._fail(error.message, error)
            raise error
        if "parent_id" in updates and would_create_cycle(
            album_id,
            updates["parent_id"],
            self._state.current_album_path,
            self._state.albums,
        ):
            error = ValidationError("An album cannot be moved inside itself", field="parent_id")
            self._fail(error.message, error)
            raise error

        with self._reporting("Failed to update album"):
            album = await self._gateway.update_album(album_id, updates)
        self.dispatch(a.UpdateAlbum(album))
        return album

    async def delete_album(self, album_id: str) -> None:
        with self._reporting("Failed to delete album"):
            await self._gateway.delete_album(album_id)
        self.dispatch(a.DeleteAlbum(album_id))
        logger.info("Deleted album {}", album_id)

    async def set_album_cover(self, album_id: str, photo_id: str) -> None:
        """Set the cover server-side, then reload albums to pick up the resolved cover."""
        with self._reporting("Failed to set album cover"):
            await self._gateway.set_album_cover(album_id, photo_id)
        await self.load_albums()

    async def toggle_favorite(self, photo_id: str) -> bool:
        """Toggle the favorite flag and store the state reported by the server."""
        with self._reporting("Failed to toggle favorite"):
            is_favorite = await self._gateway.toggle_favorite(photo_id)
        self.dispatch(a.PatchPhotoFavorite(photo_id, is_favorite))
        return is_favorite

    async def move_to_album(self, photo_id: str, album_id: str | None) -> Photo:
        with self._reporting("Failed to move photo"):
            photo = await self._gateway.move_to_album(photo_id, album_id)
        self.dispatch(a.UpdatePhoto(photo))
        return photo

    async def update_photo(self, photo_id: str, updates: Mapping[str, Any]) -> Photo:
        with self._reporting("Failed to update photo"):
            photo = await self._gateway.update_photo(photo_id, updates)
        self.dispatch(a.UpdatePhoto(photo))
        return photo

    async def delete_photo(self, photo_id: str) -> None:
        with self._reporting("Failed to delete photo"):
            await self._gateway.delete_photo(photo_id)
        self.dispatch(a.DeletePhoto(photo_id))
        logger.info("Deleted photo {}", photo_id)

    # ------------------------------------------------------------------ #
    # Selection, navigation, filters
    # ------------------------------------------------------------------ #

    def toggle_photo_selection(self, photo_id: str) -> None:
        self.dispatch(a.TogglePhotoSelection(photo_id))

    def select_all(self) -> None:
        """Select every loaded photo (not every photo on the server)."""
        self.dispatch(a.SelectAllPhotos())

    def clear_selection(self) -> None:
        self.dispatch(a.ClearSelection())

    def navigate_to_album(self, album: Album | None) -> None:
        """Enter `album`, or return to the scope root when None."""
        if album is None:
            self.dispatch(a.ResetAlbumPath())
            return
        if not is_child_of_path_end(self._state.current_album_path, album):
            logger.warning(
                "Entering album {} whose parent {} is not the open album {}",
                album.id,
                album.parent_id,
                self._state.current_album_id,
            )
        self.dispatch(a.PushAlbumPath(album))

    def navigate_up(self) -> None:
        self.dispatch(a.PopAlbumPath())

    def update_filters(self, **changes: Any) -> None:
        """Merge filter changes; callers reload explicitly afterwards.

        Raises:
            ValidationError: Unknown filter field or invalid value.
        """
        try:
            merge_filters(self._state.filters, changes)
        except KeyError as ex:
            raise ValidationError(f"Unknown filter field: {ex.args[0]}", field=ex.args[0]) from ex
        except ValueError as ex:
            raise ValidationError(f"Invalid filter value: {ex}") from ex
        self.dispatch(a.UpdateFilters(dict(changes)))

    def set_view_mode(self, view_mode: ViewMode | str) -> None:
        self.dispatch(a.SetViewMode(ViewMode(view_mode)))

    # ------------------------------------------------------------------ #
    # Read helpers
    # ------------------------------------------------------------------ #

    def visible_photos(self) -> list[Photo]:
        """Loaded photos ordered by the current `sort_by`/`sort_order` filters."""
        filters = self._state.filters
        return self._sorter.sort_photos(self._state.photos, filters.sort_by, filters.sort_order)

    def visible_albums(self) -> list[Album]:
        filters = self._state.filters
        return self._sorter.sort_albums(self._state.albums, filters.sort_by, filters.sort_order)

    def photo_items(self) -> list[PhotoVM]:
        selected = set(self._state.selected_photos)
        return [PhotoVM(p, is_selected=p.id in selected) for p in self.visible_photos()]

    def album_items(self) -> list[AlbumVM]:
        return [AlbumVM(album) for album in self.visible_albums()]

    def breadcrumb(self) -> list[str]:
        """Album names from the scope root down to the open album."""
        return [AlbumVM(album).display_name for album in self._state.current_album_path]

    def search_loaded_photos(self, query: str) -> list[Photo]:
        """Narrow the loaded photos locally, without a server round-trip."""
        return filter_photos_by_search(self.visible_photos(), query)

    def search_loaded_albums(self, query: str) -> list[Album]:
        return filter_albums_by_search(self.visible_albums(), query)

    def favorite_count(self) -> int:
        return count_favorites(self._state.photos)

    def shared_count(self) -> int:
        """Loaded photos that belong to a circle."""
        return count_shared(self._state.photos)

    def album_photo_count(self, album_id: str) -> int:
        """Loaded photos filed under `album_id`."""
        return count_in_album(self._state.photos, album_id)

    def selected_photo_records(self) -> list[Photo]:
        selected = set(self._state.selected_photos)
        return [p for p in self._state.photos if p.id in selected]

    def selection_size(self) -> int:
        """Total bytes of the selected photos."""
        return total_size(self.selected_photo_records())
