"""
Configuration schema for the AOI map service.

This module defines the configuration structure: map defaults, storage
location, performance thresholds, drawing rules, polygon style, geocoding
and the render canvas.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from aoi_zone.pipeline import PipelineConfig
from aoi_zone.rendering.style import PolygonStyle


@dataclass(frozen=True)
class StorageConfig:
    """Where the polygon collection is persisted."""

    path: Path = Path("./data/aoi_store.json")
    key: str = "aoi-polygons"

    def __post_init__(self):
        if not self.key:
            raise ValueError("storage key cannot be empty")


@dataclass(frozen=True)
class PerformanceConfig:
    """
    Rendering thresholds.

    Culling starts at `cull_threshold` polygons, batching above
    `batch_threshold` visible polygons, simplification below
    `simplify_max_zoom` with more than `simplify_min_count` visible polygons.
    """

    cull_threshold: int = 100
    batch_threshold: int = 100
    batch_size: int = 50
    simplify_max_zoom: float = 12
    simplify_min_count: int = 50
    cull_debounce_ms: int = 300
    view_debounce_ms: int = 150

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        for name in ("cull_threshold", "batch_threshold", "simplify_min_count",
                     "cull_debounce_ms", "view_debounce_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            cull_threshold=self.cull_threshold,
            batch_threshold=self.batch_threshold,
            batch_size=self.batch_size,
            simplify_max_zoom=self.simplify_max_zoom,
            simplify_min_count=self.simplify_min_count,
        )


@dataclass(frozen=True)
class DrawingConfig:
    """Draw session completion rules."""

    close_tolerance_m: float = 0.5
    min_vertices: int = 3

    def __post_init__(self):
        if self.close_tolerance_m < 0:
            raise ValueError(
                f"close_tolerance_m must be >= 0, got {self.close_tolerance_m}"
            )
        if self.min_vertices < 3:
            raise ValueError(
                f"min_vertices must be >= 3, got {self.min_vertices}"
            )


@dataclass(frozen=True)
class GeocodingConfig:
    """Nominatim place search settings."""

    base_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "AOI-Map-App/1.0"
    limit: int = 10
    timeout: float = 10.0
    debounce_ms: int = 300
    result_zoom: float = 14

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("geocoding base_url cannot be empty")
        if not 1 <= self.limit <= 50:
            raise ValueError(f"limit must be in [1, 50], got {self.limit}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")


@dataclass(frozen=True)
class CanvasConfig:
    """Size of the frame produced by the frame renderer."""

    width: int = 1280
    height: int = 720

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"canvas must have positive dimensions, got {(self.width, self.height)}"
            )
        if self.width > 8192 or self.height > 8192:
            raise ValueError(
                f"canvas too large (max 8192x8192), got {(self.width, self.height)}"
            )


@dataclass(frozen=True)
class MapConfig:
    """
    Main configuration for the map service.

    Loaded from YAML and validated at startup. Immutable after construction.
    """

    # Initial view, (lon, lat); default is the center of NRW, Germany
    center: Tuple[float, float] = (7.5, 51.5)
    zoom: float = 10

    storage: StorageConfig = field(default_factory=StorageConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    drawing: DrawingConfig = field(default_factory=DrawingConfig)
    style: PolygonStyle = field(default_factory=PolygonStyle)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)

    def __post_init__(self):
        lon, lat = self.center
        if not -180 <= lon <= 180 or not -90 <= lat <= 90:
            raise ValueError(f"center out of range, got {self.center}")
        if not 0 <= self.zoom <= 24:
            raise ValueError(f"zoom must be in [0, 24], got {self.zoom}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapConfig":
        storage_data = dict(data.get("storage") or {})
        if "path" in storage_data:
            storage_data["path"] = Path(storage_data["path"])

        try:
            return cls(
                center=tuple(data.get("center", [7.5, 51.5])),
                zoom=data.get("zoom", 10),
                storage=StorageConfig(**storage_data),
                performance=PerformanceConfig(**(data.get("performance") or {})),
                drawing=DrawingConfig(**(data.get("drawing") or {})),
                style=PolygonStyle(**(data.get("style") or {})),
                geocoding=GeocodingConfig(**(data.get("geocoding") or {})),
                canvas=CanvasConfig(**(data.get("canvas") or {})),
            )
        except TypeError as e:
            # Unknown or misspelled keys
            raise ValueError(f"Invalid map config: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "MapConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            center: [7.5, 51.5]   # [lon, lat]
            zoom: 10

            storage:
              path: "./data/aoi_store.json"
              key: "aoi-polygons"

            performance:
              cull_threshold: 100
              batch_size: 50

            drawing:
              close_tolerance_m: 0.5

            style:
              color: "#3b82f6"
              fill_opacity: 0.2
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config {yaml_path} must be a YAML mapping")

        return cls.from_dict(data)
