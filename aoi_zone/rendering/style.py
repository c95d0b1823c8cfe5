"""Polygon stroke/fill style handed to the renderer on every pass."""

from dataclasses import dataclass

import supervision as sv


@dataclass(frozen=True)
class PolygonStyle:
    """
    Fixed stroke and fill parameters for drawn polygons.

    Attributes:
        color: Stroke color (hex)
        weight: Stroke width in pixels
        opacity: Stroke opacity (0-1)
        fill_color: Fill color (hex)
        fill_opacity: Fill opacity (0-1)
    """

    color: str = "#3b82f6"
    weight: int = 2
    opacity: float = 0.8
    fill_color: str = "#3b82f6"
    fill_opacity: float = 0.2

    def __post_init__(self):
        if self.weight < 1:
            raise ValueError(f"weight must be >= 1, got {self.weight}")
        for name in ("opacity", "fill_opacity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0.0, 1.0], got {value}")
        # Fail fast on malformed hex strings
        sv.Color.from_hex(self.color)
        sv.Color.from_hex(self.fill_color)

    @property
    def stroke(self) -> sv.Color:
        return sv.Color.from_hex(self.color)

    @property
    def fill(self) -> sv.Color:
        return sv.Color.from_hex(self.fill_color)
