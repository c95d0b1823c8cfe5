import asyncio
import json
import logging
from unittest.mock import MagicMock

import pytest

from aoi_service.config import GeocodingConfig, MapConfig, PerformanceConfig
from aoi_service.geocoding import GeocodeResult
from aoi_service.registry import EventNotAvailableError, EventRegistry
from aoi_service.service import DRAW_MODE, SELECT_MODE, MapSessionService, viewport_around
from aoi_store import MemoryStore, STORAGE_KEY
from aoi_zone.geometry.shapes import Feature, Geometry, Viewport
from aoi_zone.rendering.visualizer import FrameRenderer
from tests.conftest import square

FAST = MapConfig(
    performance=PerformanceConfig(cull_debounce_ms=10, view_debounce_ms=10),
    geocoding=GeocodingConfig(debounce_ms=10),
)


@pytest.fixture
def service(store, renderer):
    service = MapSessionService(FAST, store, renderer)
    service.load()
    return service


class TestDrawScenario:

    def test_draw_and_double_click_persists_polygon(self, service, store, renderer):
        async def scenario():
            service.registry.dispatch('draw_start')
            assert service.state.drawing_mode == DRAW_MODE
            for lon, lat in [(0, 0), (10, 0), (10, 10), (0, 10)]:
                service.registry.dispatch('vertex_add', lon, lat)
            service.registry.dispatch('double_click', 5, 5)
            await service.wait_idle()

        asyncio.run(scenario())

        assert len(service.collection) == 1
        ring = service.collection.features[0].geometry.outer_ring
        assert ring == ((0, 0), (10, 0), (10, 10), (0, 10), (0, 0))
        assert service.state.drawing_mode == SELECT_MODE

        persisted = json.loads(store.data[store.key])
        assert persisted[0]["geometry"]["coordinates"] == [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]]

        assert service.last_render is not None
        assert [f.id for f in renderer.drawn] == [service.collection.features[0].id]

    def test_stop_before_three_vertices_commits_nothing(self, service, store):
        service.registry.dispatch('draw_start')
        service.registry.dispatch('vertex_add', 0, 0)
        service.registry.dispatch('vertex_add', 1, 0)

        assert service.registry.dispatch('draw_stop') is None
        assert len(service.collection) == 0
        assert store.key not in store.data
        assert service.state.drawing_mode == SELECT_MODE

    def test_reload_restores_polygons(self, service, store, renderer):
        service.registry.dispatch('shape_created', square(1, 1, feature_id="a"))

        restored = MapSessionService(FAST, store, renderer)
        restored.load()

        assert [f.id for f in restored.collection.features] == ["a"]

    def test_load_drops_malformed_entry(self, renderer, caplog):
        entries = [square(i * 2, 0, feature_id=f"p{i}").to_dict() for i in range(3)]
        entries.insert(2, {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": "bad"}})
        store = MemoryStore({STORAGE_KEY: json.dumps(entries)})
        service = MapSessionService(FAST, store, renderer)

        with caplog.at_level(logging.WARNING):
            service.load()

        assert [f.id for f in service.collection.features] == ["p0", "p1", "p2"]
        assert "storage.entry_dropped" in caplog.text


class TestEvents:

    def test_edit_and_delete(self, service):
        a, b = square(0, 0, feature_id="a"), square(3, 3, feature_id="b")
        service.registry.dispatch('shape_created', a)
        service.registry.dispatch('shape_created', b)

        edited = Feature(geometry=Geometry.polygon([(0, 0), (2, 0), (2, 2)]), id="a")
        assert service.registry.dispatch('shapes_edited', [(edited, a.geometry)]) == 1
        assert service.collection.features[0] is edited

        assert service.registry.dispatch('shapes_deleted', [b]) == 1
        assert service.collection.features == (b,)

    def test_unknown_event_rejected(self, service):
        with pytest.raises(EventNotAvailableError):
            service.registry.dispatch('zoom_to_layer')

    def test_view_changes_debounced(self, service):
        async def scenario():
            service.registry.dispatch('view_changed', (8.0, 50.0), 11)
            service.registry.dispatch('view_changed', (8.5, 50.5), 12)
            service.registry.dispatch('view_changed', (9.0, 51.0), 13)
            assert service.state.zoom == FAST.zoom
            await service.wait_idle()

        asyncio.run(scenario())

        assert service.state.center == (9.0, 51.0)
        assert service.state.zoom == 13
        assert service.state.viewport == viewport_around((9.0, 51.0), 13, 1280, 720)
        assert service.last_render is not None

    def test_select_search_result_recenters(self, service):
        result = GeocodeResult(
            id=1, display_name="Köln", category="boundary", kind="city",
            latitude=50.94, longitude=6.96,
        )

        async def scenario():
            service.select_search_result(result)
            await service.wait_idle()

        asyncio.run(scenario())

        assert service.state.center == (6.96, 50.94)
        assert service.state.zoom == FAST.geocoding.result_zoom

    def test_search_results_stored(self, store, renderer):
        geocoder = MagicMock()
        geocoder.search.return_value = ["hit"]
        service = MapSessionService(FAST, store, renderer, geocoder=geocoder)

        async def scenario():
            service.search.on_input("Köln")
            while service.search.task is None:
                await asyncio.sleep(0.01)
            await service.search.task

        asyncio.run(scenario())

        assert service.search_results == ["hit"]


class TestEventRegistry:

    def test_register_and_dispatch(self):
        registry = EventRegistry()
        registry.register('ping', lambda x: x + 1, "Add one")

        assert registry.dispatch('ping', 1) == 2
        assert registry.is_available('ping')
        assert registry.available_events == {'ping'}
        assert registry.get_help() == {'ping': "Add one"}
        assert registry.count() == 1

    def test_duplicate_registration_rejected(self):
        registry = EventRegistry()
        registry.register('ping', print, "Print")
        with pytest.raises(ValueError):
            registry.register('ping', print, "Print again")


class TestViewportAround:

    def test_centered(self):
        viewport = viewport_around((7.5, 51.5), 10, 1280, 720)
        assert viewport.center == pytest.approx((7.5, 51.5))

    def test_zoom_in_shrinks_extent(self):
        wide = viewport_around((7.5, 51.5), 10, 1280, 720)
        narrow = viewport_around((7.5, 51.5), 11, 1280, 720)
        assert narrow.east - narrow.west == pytest.approx((wide.east - wide.west) / 2)

    def test_clamped_to_world(self):
        viewport = viewport_around((0, 0), 0, 4096, 4096)
        assert viewport.west == -180.0
        assert viewport.east == 180.0


class TestRendererViewport:

    def test_view_change_reaches_frame_renderer(self, store):
        renderer = FrameRenderer(width=1280, height=720)
        service = MapSessionService(FAST, store, renderer)
        service.registry.dispatch('shape_created', square(7.42, 51.42, 0.02, feature_id="a"))
        viewport = Viewport(west=7.4, south=51.4, east=7.5, north=51.5)

        async def scenario():
            service.registry.dispatch('view_changed', (7.45, 51.45), 12, viewport)
            await service.wait_idle()

        asyncio.run(scenario())

        assert renderer.viewport == viewport
        assert [s.feature.id for s in service.last_render.shapes] == ["a"]
        assert service.last_render.failed_count == 0

    def test_initial_and_derived_viewports_synced(self, store):
        renderer = FrameRenderer(width=1280, height=720)
        service = MapSessionService(FAST, store, renderer)
        assert renderer.viewport == service.state.viewport

        service.set_view((8.0, 50.0), 13)

        assert renderer.viewport == viewport_around((8.0, 50.0), 13, 1280, 720)
        assert service.state.viewport == renderer.viewport
