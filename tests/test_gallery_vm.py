# tests/test_gallery_vm.py
# GalleryVM orchestration against an in-memory gateway

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from conftest import FakeGateway, make_album, make_photo

from circle_gallery.app.state.state import GalleryState
from circle_gallery.app.viewmodels.gallery_vm import GalleryVM
from circle_gallery.core.errors import ErrorKind, ServerError, TransportError, ValidationError
from circle_gallery.core.models import (
    GalleryMode,
    GalleryStats,
    PhotoPage,
    Scope,
    SortBy,
    SortOrder,
    ViewMode,
)


def _seed(vm: GalleryVM, gateway: FakeGateway, photos=(), albums=()) -> None:
    gateway.photos = list(photos)
    gateway.albums = list(albums)
    asyncio.run(vm.load_photos())
    asyncio.run(vm.load_albums())
    gateway.calls.clear()


class TestModeSwitch:
    def test_set_mode_discards_everything_loaded(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1")], albums=[make_album("a1")])
        vm.select_all()
        vm.navigate_to_album(make_album("a1"))

        vm.set_mode("circle", "c1")

        state = vm.state
        assert state.mode is GalleryMode.CIRCLE
        assert state.photos == ()
        assert state.albums == ()
        assert state.selected_photos == ()
        assert state.selected_album is None
        assert state.current_album_path == ()

    def test_circle_mode_requires_id(self, vm: GalleryVM):
        with pytest.raises(ValidationError):
            vm.set_mode(GalleryMode.CIRCLE)

    def test_load_photos_follows_mode(self, vm: GalleryVM, gateway: FakeGateway):
        vm.set_mode("circle", "c1")
        asyncio.run(vm.load_photos())
        asyncio.run(vm.load_albums())
        assert gateway.calls_to("fetch_photos")[0][0][0] == Scope.circle("c1")
        assert gateway.calls_to("fetch_albums")[0][0][0] == Scope.circle("c1")

    def test_explicit_circle_id_wins(self, vm: GalleryVM, gateway: FakeGateway):
        asyncio.run(vm.load_photos("c9"))
        assert gateway.calls_to("fetch_photos")[0][0][0] == Scope.circle("c9")

    def test_circle_albums_load_into_state(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.albums = [make_album("a1", "Trip", circle_id="c1")]
        asyncio.run(vm.load_circle_albums("c1"))
        assert gateway.calls_to("fetch_albums") == [((Scope.circle("c1"), None), {})]
        assert [x.id for x in vm.state.albums] == ["a1"]


class TestLoading:
    def test_loads_are_scoped_to_open_album(self, vm: GalleryVM, gateway: FakeGateway):
        vm.navigate_to_album(make_album("a1"))
        asyncio.run(vm.load_personal_photos())
        asyncio.run(vm.load_personal_albums())
        assert gateway.calls_to("fetch_photos")[0][0][2] == "a1"
        assert gateway.calls_to("fetch_albums")[0][0][1] == "a1"

    def test_load_failure_keeps_previous_photos(self, vm: GalleryVM, gateway: FakeGateway):
        vm.set_mode("circle", "c1")
        _seed(vm, gateway, photos=[make_photo("p1"), make_photo("p2")])
        gateway.fail["fetch_photos"] = TransportError("offline")

        asyncio.run(vm.load_circle_photos("c1"))

        state = vm.state
        assert state.error == "Failed to load circle photos"
        assert state.error_kind is ErrorKind.TRANSPORT
        assert state.is_loading is False
        assert [p.id for p in state.photos] == ["p1", "p2"]

    def test_successful_load_clears_previous_error(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.fail["fetch_albums"] = RuntimeError("boom")
        asyncio.run(vm.load_albums())
        assert vm.state.error_kind is ErrorKind.UNKNOWN

        del gateway.fail["fetch_albums"]
        gateway.albums = [make_album("a1")]
        asyncio.run(vm.load_albums())
        assert vm.state.error is None
        assert [x.id for x in vm.state.albums] == ["a1"]

    def test_is_loading_observed_during_call(self, vm: GalleryVM):
        seen: list[bool] = []
        vm.subscribe(lambda state: seen.append(state.is_loading))
        asyncio.run(vm.load_photos())
        assert seen[0] is True
        assert vm.state.is_loading is False

    def test_stale_response_is_discarded(self, vm: GalleryVM):
        class SlowGateway(FakeGateway):
            async def fetch_photos(self, scope, filters, album_id=None):
                self._record("fetch_photos", scope, filters, album_id)
                if len(self.calls_to("fetch_photos")) == 1:
                    await asyncio.sleep(0.05)
                    return PhotoPage(items=(make_photo("old"),), total=1)
                return PhotoPage(items=(make_photo("new"),), total=1)

        slow_vm = GalleryVM(SlowGateway())

        async def scenario() -> None:
            first = asyncio.create_task(slow_vm.load_photos())
            await asyncio.sleep(0)
            await slow_vm.load_photos()
            await first

        asyncio.run(scenario())
        assert [p.id for p in slow_vm.state.photos] == ["new"]
        assert slow_vm.state.is_loading is False

    def test_mode_switch_invalidates_in_flight_load(self):
        class SlowGateway(FakeGateway):
            async def fetch_albums(self, scope, parent_id=None):
                await asyncio.sleep(0.05)
                return [make_album("personal-album")]

        slow_vm = GalleryVM(SlowGateway())

        async def scenario() -> None:
            pending = asyncio.create_task(slow_vm.load_albums())
            await asyncio.sleep(0)
            slow_vm.set_mode("circle", "c1")
            await pending

        asyncio.run(scenario())
        assert slow_vm.state.albums == ()
        assert slow_vm.state.is_loading is False

    def test_load_stats_uses_current_scope(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.stats = GalleryStats(total_photos=3)
        asyncio.run(vm.load_stats())
        vm.set_mode("circle", "c1")
        asyncio.run(vm.load_stats())
        scopes = [args[0] for args, _ in gateway.calls_to("get_stats")]
        assert scopes == [None, Scope.circle("c1")]
        assert vm.state.stats == GalleryStats(total_photos=3)

    def test_refresh_loads_everything(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.photos = [make_photo("p1")]
        gateway.albums = [make_album("a1")]
        gateway.stats = GalleryStats(album_count=1)
        asyncio.run(vm.refresh())
        state = vm.state
        assert len(state.photos) == 1
        assert len(state.albums) == 1
        assert state.stats.album_count == 1
        assert state.is_loading is False


class TestNavigation:
    def test_enter_and_leave_album(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.albums = [make_album("a1", "Trip")]
        asyncio.run(vm.load_personal_albums())

        vm.navigate_to_album(vm.state.albums[0])
        assert [x.id for x in vm.state.current_album_path] == ["a1"]
        assert vm.state.selected_album.id == "a1"
        assert vm.breadcrumb() == ["Trip"]

        vm.navigate_up()
        assert vm.state.current_album_path == ()
        assert vm.state.selected_album is None

    def test_navigate_up_at_root_leaves_state(self, vm: GalleryVM):
        before = vm.state
        vm.navigate_up()
        assert vm.state == before

    def test_navigate_to_none_returns_to_root(self, vm: GalleryVM):
        vm.navigate_to_album(make_album("a1"))
        vm.navigate_to_album(make_album("a2", parent_id="a1"))
        vm.navigate_to_album(None)
        assert vm.state.current_album_path == ()
        assert vm.state.selected_album is None


class TestMutations:
    def test_toggle_favorite_uses_server_value(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1", is_favorite=False)])
        gateway.favorite_result = True
        assert asyncio.run(vm.toggle_favorite("p1")) is True
        assert vm.state.photos[0].is_favorite is True

    def test_toggle_favorite_does_not_negate_locally(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1", is_favorite=True)])
        gateway.favorite_result = True
        asyncio.run(vm.toggle_favorite("p1"))
        assert vm.state.photos[0].is_favorite is True

        gateway.favorite_result = False
        asyncio.run(vm.toggle_favorite("p1"))
        assert vm.state.photos[0].is_favorite is False

    def test_delete_photo_prunes_selection(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1"), make_photo("p2")])
        vm.select_all()
        asyncio.run(vm.delete_photo("p1"))
        assert [p.id for p in vm.state.photos] == ["p2"]
        assert vm.state.selected_photos == ("p2",)

    def test_failed_delete_sets_error_and_raises(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1")])
        gateway.fail["delete_photo"] = ServerError("Photo is locked", status_code=409)
        with pytest.raises(ServerError):
            asyncio.run(vm.delete_photo("p1"))
        assert vm.state.error == "Failed to delete photo"
        assert vm.state.error_kind is ErrorKind.SERVER
        assert [p.id for p in vm.state.photos] == ["p1"]

    def test_create_album_in_circle_at_current_depth(self, vm: GalleryVM, gateway: FakeGateway):
        vm.set_mode("circle", "c1")
        _seed(vm, gateway, albums=[make_album("b1")])
        vm.navigate_to_album(make_album("a1", circle_id="c1"))

        album = asyncio.run(vm.create_album("  Summer "))

        (args, kwargs), = gateway.calls_to("create_album")
        assert args == (Scope.circle("c1"), "Summer")
        assert kwargs["parent_id"] == "a1"
        assert vm.state.albums[0] == album
        assert [x.id for x in vm.state.albums] == ["new", "b1"]

    def test_create_album_not_added_after_navigating_away(self):
        class SlowGateway(FakeGateway):
            async def create_album(self, scope, name, **kwargs):
                await asyncio.sleep(0.05)
                return await super().create_album(scope, name, **kwargs)

        slow_vm = GalleryVM(SlowGateway())

        async def scenario():
            pending = asyncio.create_task(slow_vm.create_album("Summer"))
            await asyncio.sleep(0)
            slow_vm.navigate_to_album(make_album("a1"))
            return await pending

        album = asyncio.run(scenario())
        assert album.name == "Summer"
        assert slow_vm.state.albums == ()
        assert slow_vm.state.selected_album.id == "a1"
        assert slow_vm.state.is_loading is False

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_create_album_rejects_blank_name(self, vm: GalleryVM, gateway: FakeGateway, name):
        with pytest.raises(ValidationError):
            asyncio.run(vm.create_album(name))
        assert gateway.calls_to("create_album") == []
        assert vm.state.error_kind is ErrorKind.VALIDATION

    def test_create_album_failure_propagates(self, vm: GalleryVM, gateway: FakeGateway):
        gateway.fail["create_album"] = TransportError("timeout")
        with pytest.raises(TransportError):
            asyncio.run(vm.create_album("Trip"))
        assert vm.state.error == "Failed to create album"
        assert vm.state.is_loading is False
        assert vm.state.albums == ()

    def test_move_to_album_replaces_record(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1")])
        asyncio.run(vm.move_to_album("p1", "a1"))
        assert vm.state.photos[0].album_id == "a1"
        asyncio.run(vm.move_to_album("p1", None))
        assert vm.state.photos[0].album_id is None

    def test_update_photo_replaces_record(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1")])
        asyncio.run(vm.update_photo("p1", {"title": "Sunset"}))
        assert vm.state.photos[0].title == "Sunset"

    def test_set_album_cover_reloads_albums(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, albums=[make_album("a1")])
        gateway.albums = [make_album("a1", cover_photo="https://cdn.test/p1.jpg")]
        asyncio.run(vm.set_album_cover("a1", "p1"))
        assert gateway.calls_to("set_album_cover") == [(("a1", "p1"), {})]
        assert len(gateway.calls_to("fetch_albums")) == 1
        assert vm.state.albums[0].cover_photo == "https://cdn.test/p1.jpg"

    def test_update_album_updates_selected_album(self, vm: GalleryVM, gateway: FakeGateway):
        trip = make_album("a1", "Trip")
        _seed(vm, gateway, albums=[trip])
        vm.navigate_to_album(trip)
        asyncio.run(vm.update_album("a1", {"name": "Holiday"}))
        assert vm.state.albums[0].name == "Holiday"
        assert vm.state.selected_album.name == "Holiday"
        assert vm.state.current_album_path[-1].name == "Holiday"

    def test_update_album_rejects_cycle(self, vm: GalleryVM, gateway: FakeGateway):
        parent = make_album("a1")
        vm.navigate_to_album(parent)
        _seed(vm, gateway, albums=[make_album("child", parent_id="a1")])
        with pytest.raises(ValidationError):
            asyncio.run(vm.update_album("a1", {"parent_id": "child"}))
        assert gateway.calls_to("update_album") == []

    def test_delete_selected_album(self, vm: GalleryVM, gateway: FakeGateway):
        trip = make_album("a1")
        _seed(vm, gateway, albums=[trip, make_album("a2")])
        vm.navigate_to_album(trip)
        asyncio.run(vm.delete_album("a1"))
        assert vm.state.selected_album is None
        assert [x.id for x in vm.state.albums] == ["a2"]

    def test_add_photo_from_upload(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1")])
        vm.add_photo(make_photo("p2"))
        vm.add_photo(replace(make_photo("p1"), title="edited"))
        assert [p.id for p in vm.state.photos] == ["p2", "p1"]
        assert vm.state.photos[1].title == "edited"


class TestSelectionFiltersAndViews:
    def test_selection_helpers(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1", size=100), make_photo("p2", size=50)])
        vm.toggle_photo_selection("p2")
        assert [p.id for p in vm.selected_photo_records()] == ["p2"]
        assert vm.selection_size() == 50
        vm.select_all()
        assert vm.selection_size() == 150
        vm.clear_selection()
        assert vm.state.selected_photos == ()

    def test_update_filters_does_not_reload(self, vm: GalleryVM, gateway: FakeGateway):
        vm.update_filters(type="favorites", search_query="dog")
        assert gateway.calls == []
        assert vm.state.filters.search_query == "dog"

    def test_update_filters_rejects_unknown_field(self, vm: GalleryVM):
        with pytest.raises(ValidationError):
            vm.update_filters(album_id="a1")
        with pytest.raises(ValidationError):
            vm.update_filters(sort_by="colour")

    def test_visible_photos_follow_sort_filters(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(
            vm,
            gateway,
            photos=[
                make_photo("p1", size=10),
                make_photo("p2", size=30),
                make_photo("p3", size=20),
            ],
        )
        vm.update_filters(sort_by=SortBy.SIZE, sort_order=SortOrder.ASC)
        assert [p.id for p in vm.visible_photos()] == ["p1", "p3", "p2"]
        vm.toggle_photo_selection("p3")
        items = vm.photo_items()
        assert [item.is_selected for item in items] == [False, True, False]

    def test_visible_albums_sort_by_name(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, albums=[make_album("a1", "zoo"), make_album("a2", "Apple")])
        vm.update_filters(sort_by=SortBy.NAME, sort_order=SortOrder.ASC)
        assert [x.id for x in vm.visible_albums()] == ["a2", "a1"]

    def test_album_search_and_loaded_counts(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(
            vm,
            gateway,
            photos=[
                make_photo("p1", is_favorite=True, album_id="a1"),
                make_photo("p2", circle_id="c1", album_id="a1"),
                make_photo("p3"),
            ],
            albums=[make_album("a1", "Lake trip"), make_album("a2", "Birthday")],
        )
        assert [x.id for x in vm.search_loaded_albums("lake")] == ["a1"]
        assert vm.favorite_count() == 1
        assert vm.shared_count() == 1
        assert vm.album_photo_count("a1") == 2
        assert vm.album_photo_count("a2") == 0

    def test_search_loaded_photos(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, photos=[make_photo("p1", title="Beach day"), make_photo("p2")])
        assert [p.id for p in vm.search_loaded_photos("beach")] == ["p1"]

    def test_album_items_and_view_mode(self, vm: GalleryVM, gateway: FakeGateway):
        _seed(vm, gateway, albums=[make_album("a1", "Trip", photo_count=1)])
        assert [item.count_text for item in vm.album_items()] == ["1 photo"]
        vm.set_view_mode("grid")
        assert vm.state.view_mode is ViewMode.GRID

    def test_subscribe_and_unsubscribe(self, vm: GalleryVM):
        seen: list[GalleryState] = []
        unsubscribe = vm.subscribe(seen.append)
        vm.set_view_mode(ViewMode.LIST)
        unsubscribe()
        vm.set_view_mode(ViewMode.GRID)
        assert len(seen) == 1
        assert seen[0].view_mode is ViewMode.LIST
