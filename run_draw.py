"""
Draw Demo
=========

Draws a few hundred synthetic areas-of-interest through a draw session,
then renders them zoomed out (culled, simplified, batched) to a PNG.

Usage:
    python run_draw.py
"""

import asyncio

import cv2
import numpy as np

from aoi_service.service import viewport_around
from aoi_store import MemoryStore
from aoi_zone import DrawSessionMachine, FrameRenderer, PipelineBuilder, PolygonCollection
from utils import get_target_run_folder

CENTER = (7.5, 51.5)
ZOOM = 9
GRID = 20


class ShapeGenerator:
    """
    Generates circle-like rings on a lon/lat grid.

    Each ring is a polygon approximation with jittered radius so that the
    simplifier has something to drop at low zoom.
    """

    def __init__(self, center: tuple[float, float], spacing: float = 0.05, seed: int = 7):
        self.center = center
        self.spacing = spacing
        self.rng = np.random.default_rng(seed)

    def ring(self, row: int, col: int, points: int = 40) -> list[tuple[float, float]]:
        cx = self.center[0] + (col - GRID / 2) * self.spacing
        cy = self.center[1] + (row - GRID / 2) * self.spacing
        radius = self.spacing * 0.35
        angles = np.linspace(0, 2 * np.pi, points, endpoint=False)
        jitter = 1 + self.rng.normal(0, 0.01, size=points)
        return [
            (float(cx + radius * j * np.cos(a)), float(cy + radius * j * np.sin(a)))
            for a, j in zip(angles, jitter)
        ]


def draw_polygons(machine: DrawSessionMachine, generator: ShapeGenerator) -> None:
    """Feed every ring through the draw session as pointer clicks."""
    for row in range(GRID):
        for col in range(GRID):
            machine.start()
            for lon, lat in generator.ring(row, col):
                machine.pointer_down(lon, lat)
            machine.double_click()


async def render(collection: PolygonCollection, renderer: FrameRenderer) -> None:
    pipeline = PipelineBuilder().with_renderer(renderer).build()
    render_pass = await pipeline.render(collection.features, renderer.viewport, ZOOM)
    print(
        f"Rendered {len(render_pass.shapes)} of {render_pass.candidate_count} polygons "
        f"(simplified={render_pass.simplified}, batched={render_pass.batched})"
    )


def main():
    target_run_folder = get_target_run_folder(application_name="draw")

    collection = PolygonCollection(MemoryStore())
    machine = DrawSessionMachine(on_complete=collection.add)
    draw_polygons(machine, ShapeGenerator(CENTER))

    renderer = FrameRenderer(width=1280, height=720)
    renderer.set_viewport(viewport_around(CENTER, ZOOM, renderer.width, renderer.height))
    asyncio.run(render(collection, renderer))

    output_path = f"{target_run_folder}/aoi.png"
    cv2.imwrite(output_path, renderer.frame)
    print(f"Draw demo completed. Output: {output_path}")


if __name__ == "__main__":
    main()
