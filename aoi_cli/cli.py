"""
AOI CLI - Main entry point.

Provides a command-line interface to inspect, draw, render and search
areas-of-interest stored by the map service.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import cv2

from aoi_service.config import MapConfig
from aoi_service.geocoding import NominatimClient
from aoi_service.service import MapSessionService
from aoi_store import JsonFileStore
from aoi_zone.geometry.culling import bounding_box
from aoi_zone.geometry.shapes import Viewport
from aoi_zone.rendering.visualizer import FrameRenderer
from utils import get_target_run_folder


def load_config(config_path: Optional[str]) -> MapConfig:
    """
    Load map configuration, or defaults when no file is given.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the YAML is invalid
    """
    if config_path is None:
        return MapConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    return MapConfig.from_yaml(path)


def parse_point(text: str) -> Tuple[float, float]:
    """Parse "lon,lat" into a pair of floats."""
    try:
        lon, lat = (float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected LON,LAT, got '{text}'")
    return lon, lat


def parse_bbox(text: str) -> Viewport:
    """Parse "west,south,east,north" into a Viewport."""
    try:
        west, south, east, north = (float(part) for part in text.split(","))
        return Viewport(west=west, south=south, east=east, north=north)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected W,S,E,N, got '{text}'")


def build_service(config: MapConfig) -> MapSessionService:
    store = JsonFileStore(config.storage.path, key=config.storage.key)
    renderer = FrameRenderer(width=config.canvas.width, height=config.canvas.height)
    geocoder = NominatimClient(
        base_url=config.geocoding.base_url,
        user_agent=config.geocoding.user_agent,
        limit=config.geocoding.limit,
        timeout=config.geocoding.timeout,
    )
    service = MapSessionService(config, store, renderer, geocoder=geocoder)
    service.load()
    return service


def cmd_list(service: MapSessionService) -> None:
    features = service.collection.features
    print(f"{len(features)} polygon(s)")
    for index, feature in enumerate(features):
        ring = feature.geometry.outer_ring
        if ring is None:
            print(f"  [{index}] {feature.id or '-'} {feature.geometry.type}")
            continue
        bbox = bounding_box(ring)
        print(
            f"  [{index}] {feature.id or '-'} {len(ring) - 1} vertices "
            f"bbox=({bbox.west:.5f}, {bbox.south:.5f}, {bbox.east:.5f}, {bbox.north:.5f})"
        )


def cmd_draw(service: MapSessionService, points: List[Tuple[float, float]]) -> int:
    revision = service.collection.revision
    service.registry.dispatch('draw_start')
    for lon, lat in points:
        service.registry.dispatch('vertex_add', lon, lat)
    feature = service.registry.dispatch('draw_stop') if service.machine.is_drawing else service.collection.current

    if feature is None:
        print("No polygon created (need at least 3 distinct points)", file=sys.stderr)
        return 1
    if service.collection.revision == revision:
        print("Polygon not saved: identical to an existing polygon", file=sys.stderr)
        return 1
    print(f"Polygon {feature.id} saved ({len(service.collection)} total)")
    return 0


def cmd_render(
    service: MapSessionService,
    zoom: Optional[float],
    bbox: Optional[Viewport],
) -> str:
    renderer = service.renderer
    center = bbox.center if bbox is not None else service.state.center
    zoom = zoom if zoom is not None else service.state.zoom
    service.set_view(center, zoom, bbox)

    render_pass = asyncio.run(service.render())

    output_path = f"{get_target_run_folder(application_name='render')}/aoi.png"
    cv2.imwrite(output_path, renderer.frame)
    print(
        f"Rendered {len(render_pass.shapes)}/{render_pass.candidate_count} polygon(s) "
        f"(simplified={render_pass.simplified}, batched={render_pass.batched})"
    )
    print(f"Output: {output_path}")
    return output_path


def cmd_search(service: MapSessionService, text: str) -> None:
    results = service.search.client.search(text)
    if not results:
        print("No results found")
    for result in results:
        print(
            f"{result.display_name}\n"
            f"    {result.kind} • {result.category}  ({result.latitude:.5f}, {result.longitude:.5f})"
        )


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="AOI CLI - Draw, render and search areas-of-interest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List stored polygons
  aoi-cli list

  # Draw a polygon from vertices (lon,lat)
  aoi-cli draw 7.10,51.20 7.12,51.20 7.12,51.22 7.10,51.22

  # Render the stored polygons to PNG
  aoi-cli render --zoom 11 --bbox 6.9,51.0,7.4,51.4

  # Search a place
  aoi-cli search "Düsseldorf Hbf"

  # Remove every polygon
  aoi-cli clear
"""
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to map config YAML (default: built-in defaults)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('list', help='List stored polygons')

    draw = subparsers.add_parser('draw', help='Draw a polygon from LON,LAT vertices')
    draw.add_argument('points', nargs='+', type=parse_point, help='Vertices as LON,LAT')

    render = subparsers.add_parser('render', help='Render stored polygons to PNG')
    render.add_argument('--zoom', type=float, default=None, help='Zoom level')
    render.add_argument('--bbox', type=parse_bbox, default=None, help='Viewport as W,S,E,N')

    search = subparsers.add_parser('search', help='Search a place by name')
    search.add_argument('text', help='Free-text query')

    subparsers.add_parser('clear', help='Remove every stored polygon')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        service = build_service(load_config(args.config))

        if args.command == 'list':
            cmd_list(service)

        elif args.command == 'draw':
            sys.exit(cmd_draw(service, args.points))

        elif args.command == 'render':
            cmd_render(service, args.zoom, args.bbox)

        elif args.command == 'search':
            cmd_search(service, args.text)

        elif args.command == 'clear':
            service.collection.clear()
            print("All polygons removed")

    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
