import pytest

from aoi_zone.geometry.culling import (
    CULL_THRESHOLD,
    VisibleSetCache,
    bounding_box,
    filter_visible,
    is_in_viewport,
)
from aoi_zone.geometry.shapes import (
    BBox,
    Feature,
    FeatureDecodeError,
    Geometry,
    Viewport,
    close_ring,
    planar_distance_m,
)
from aoi_zone.geometry.simplify import (
    should_simplify,
    simplify_feature,
    simplify_ring,
    tolerance_for_zoom,
)
from tests.conftest import square


class TestShapes:

    def test_close_ring_appends_first_point(self):
        assert close_ring([(0, 0), (1, 0), (1, 1)]) == ((0, 0), (1, 0), (1, 1), (0, 0))

    def test_close_ring_keeps_closed_ring(self):
        ring = ((0, 0), (1, 0), (1, 1), (0, 0))
        assert close_ring(ring) == ring

    def test_feature_from_dict(self):
        data = {
            "type": "Feature",
            "id": "a1",
            "properties": {"name": "field"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]],
            },
        }
        feature = Feature.from_dict(data)

        assert feature.id == "a1"
        assert feature.properties == {"name": "field"}
        assert feature.geometry.outer_ring == ((0, 0), (1, 0), (1, 1), (0, 0))
        assert feature.to_dict() == data

    def test_feature_without_id_omits_it(self):
        assert "id" not in square(0, 0).to_dict()

    @pytest.mark.parametrize("geometry", [
        None,
        {"type": "Point", "coordinates": [0, 0]},
        {"type": "Polygon", "coordinates": []},
        {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [0, 0]]]},
        {"type": "Polygon", "coordinates": [[[0, 0], ["a", 1], [1, 1], [0, 0]]]},
        {"type": "MultiPolygon", "coordinates": []},
    ])
    def test_invalid_geometry_rejected(self, geometry):
        with pytest.raises(FeatureDecodeError):
            Feature.from_dict({"type": "Feature", "geometry": geometry, "properties": {}})

    def test_invalid_properties_rejected(self):
        with pytest.raises(FeatureDecodeError):
            Feature.from_dict({
                "type": "Feature",
                "geometry": square(0, 0).geometry.to_dict(),
                "properties": [1, 2],
            })

    def test_feature_hashable(self):
        a = Feature(geometry=square(0, 0).geometry, properties={"name": "x"}, id="a")
        b = Feature(geometry=square(0, 0).geometry, properties={"name": "x"}, id="a")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b, square(3, 3)}) == 2

    def test_feature_properties_read_only(self):
        source = {"name": "x"}
        feature = Feature(geometry=square(0, 0).geometry, properties=source)

        with pytest.raises(TypeError):
            feature.properties["name"] = "y"
        source["name"] = "z"

        assert feature.properties == {"name": "x"}

    def test_geometry_equality_is_structural(self):
        decoded = Geometry.from_dict(square(0, 0).geometry.to_dict())
        assert decoded == square(0, 0).geometry

    def test_viewport_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            Viewport(west=1, south=0, east=0, north=1)

    def test_bbox_touching_edges_intersect(self):
        assert BBox(0, 0, 1, 1).intersects(BBox(1, 1, 2, 2))
        assert not BBox(0, 0, 1, 1).intersects(BBox(1.01, 0, 2, 1))

    def test_planar_distance(self):
        assert planar_distance_m((0, 0), (0, 0.00001)) == pytest.approx(1.112, rel=1e-2)
        assert planar_distance_m((7.5, 51.5), (7.5, 51.5)) == 0


class TestSimplify:

    def test_short_ring_unchanged(self):
        assert simplify_ring([(0, 0), (1, 1)], 10) == ((0, 0), (1, 1))
        assert simplify_ring([], 10) == ()

    def test_near_collinear_vertex_dropped(self):
        ring = [(0, 0), (1, 0.0000001), (2, 0), (2, 2), (0, 2), (0, 0)]
        assert simplify_ring(ring, 0.001) == ((0, 0), (2, 0), (2, 2), (0, 2), (0, 0))

    def test_vertex_at_tolerance_dropped(self):
        ring = [(0, 0), (1, 0.5), (2, 0)]
        assert simplify_ring(ring, 0.5) == ((0, 0), (2, 0))
        assert simplify_ring(ring, 0.49) == ((0, 0), (1, 0.5), (2, 0))

    def test_measured_against_original_neighbours(self):
        # Every interior vertex is collinear with its original neighbours
        ring = [(0, 0), (1, 0), (2, 0), (3, 0)]
        assert simplify_ring(ring, 0.1) == ((0, 0), (3, 0))

    def test_projection_clamped_to_segment(self):
        # (3, 0) lies on the line through its neighbours but beyond the segment
        ring = [(0, 0), (3, 0), (1, 0)]
        assert simplify_ring(ring, 1.0) == ((0, 0), (3, 0), (1, 0))

    def test_returns_original_points(self):
        ring = [(0, 0), (1, 5), (2, 0)]
        result = simplify_ring(ring, 0.1)
        assert result[1] is ring[1]

    def test_first_and_last_always_kept(self):
        ring = [(0, 0), (0, 0), (0, 0), (0, 0)]
        result = simplify_ring(ring, 1.0)
        assert result[0] is ring[0]
        assert result[-1] is ring[-1]

    @pytest.mark.parametrize("zoom, tolerance", [
        (18, 0.00001),
        (15, 0.00001),
        (14, 0.0001),
        (12, 0.0001),
        (11, 0.001),
        (10, 0.001),
        (9.5, 0.01),
        (0, 0.01),
    ])
    def test_tolerance_for_zoom(self, zoom, tolerance):
        assert tolerance_for_zoom(zoom) == tolerance

    def test_should_simplify(self):
        assert should_simplify(11, 51)
        assert not should_simplify(11, 50)
        assert not should_simplify(12, 500)

    def test_simplify_feature_keeps_holes(self):
        outer = [(0, 0), (1, 0.0000001), (2, 0), (2, 2), (0, 2)]
        hole = [(0.5, 0.5), (0.6, 0.5000001), (0.7, 0.5), (0.7, 0.7), (0.5, 0.7)]
        feature = Feature(geometry=Geometry.polygon(outer, hole), id=7)

        simplified = simplify_feature(feature, 0.001)

        assert simplified.id == 7
        assert simplified.geometry.outer_ring == ((0, 0), (2, 0), (2, 2), (0, 2), (0, 0))
        assert simplified.geometry.coordinates[1] == feature.geometry.coordinates[1]

    def test_simplify_feature_skips_multipolygon(self):
        polygon = square(0, 0).geometry.coordinates
        feature = Feature(geometry=Geometry(type="MultiPolygon", coordinates=(polygon,)))
        assert simplify_feature(feature, 1.0) is feature


class TestCulling:

    viewport = Viewport(west=0, south=0, east=10, north=10)

    def test_bounding_box(self):
        assert bounding_box([(1, 5), (-2, 3), (4, -1)]) == BBox(-2, -1, 4, 5)
        assert bounding_box([]) is None

    def test_small_collection_returned_unchanged(self):
        features = [square(100 + i, 100) for i in range(CULL_THRESHOLD - 1)]
        assert filter_visible(features, self.viewport) is features

    def test_large_collection_culled_in_order(self):
        inside = [square(i % 9, i % 9, 0.5, feature_id=f"in-{i}") for i in range(60)]
        outside = [square(50 + i, 50, feature_id=f"out-{i}") for i in range(60)]
        features = [f for pair in zip(inside, outside) for f in pair]

        visible = filter_visible(features, self.viewport)

        assert [f.id for f in visible] == [f.id for f in inside]

    def test_edge_touching_polygon_visible(self):
        assert is_in_viewport(square(10, 10), self.viewport)
        assert not is_in_viewport(square(10.5, 10.5), self.viewport)

    def test_multipolygon_never_visible(self):
        polygon = square(1, 1).geometry.coordinates
        feature = Feature(geometry=Geometry(type="MultiPolygon", coordinates=(polygon,)))
        assert not is_in_viewport(feature, self.viewport)

    def test_cache_compares_viewport_by_value(self):
        cache = VisibleSetCache()
        visible = [square(1, 1)]

        assert cache.get(self.viewport, 1) is None
        cache.put(self.viewport, 1, visible)

        assert cache.get(Viewport(west=0, south=0, east=10, north=10), 1) is visible
        assert cache.get(self.viewport, 2) is None
        assert cache.get(Viewport(west=0, south=0, east=10, north=11), 1) is None

        cache.invalidate()
        assert cache.get(self.viewport, 1) is None
