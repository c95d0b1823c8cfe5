from pathlib import Path

import pytest

from aoi_service.config import (
    CanvasConfig,
    DrawingConfig,
    GeocodingConfig,
    MapConfig,
    PerformanceConfig,
)

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config" / "map.yaml"


class TestMapConfig:

    def test_defaults(self):
        config = MapConfig()

        assert config.center == (7.5, 51.5)
        assert config.zoom == 10
        assert config.storage.key == "aoi-polygons"
        assert config.performance.cull_threshold == 100
        assert config.performance.batch_size == 50
        assert config.drawing.close_tolerance_m == 0.5
        assert config.style.color == "#3b82f6"
        assert config.geocoding.user_agent == "AOI-Map-App/1.0"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(
            "center: [6.96, 50.94]\n"
            "zoom: 12\n"
            "storage:\n"
            "  path: ./somewhere/aoi.json\n"
            "performance:\n"
            "  batch_size: 25\n"
            "style:\n"
            "  fill_opacity: 0.4\n"
        )

        config = MapConfig.from_yaml(path)

        assert config.center == (6.96, 50.94)
        assert config.zoom == 12
        assert config.storage.path == Path("./somewhere/aoi.json")
        assert config.performance.batch_size == 25
        assert config.performance.pipeline_config().batch_size == 25
        assert config.style.fill_opacity == 0.4
        assert config.drawing == DrawingConfig()

    def test_example_config_loads(self):
        assert MapConfig.from_yaml(EXAMPLE_CONFIG) == MapConfig()

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert MapConfig.from_yaml(path) == MapConfig()

    def test_non_mapping_yaml_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            MapConfig.from_yaml(path)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError):
            MapConfig.from_dict({"performance": {"batch_sise": 10}})

    @pytest.mark.parametrize("factory", [
        lambda: MapConfig(zoom=30),
        lambda: MapConfig(center=(200, 0)),
        lambda: PerformanceConfig(batch_size=0),
        lambda: PerformanceConfig(cull_debounce_ms=-5),
        lambda: DrawingConfig(min_vertices=2),
        lambda: GeocodingConfig(limit=0),
        lambda: CanvasConfig(width=0),
    ])
    def test_invalid_values_rejected(self, factory):
        with pytest.raises(ValueError):
            factory()
