"""
AOI Service
===========

Bounded Context: Running an interactive map session.

Components:
- config: MapConfig (YAML, validated, immutable)
- debounce: Debouncer for pan/zoom/keystroke bursts
- geocoding: NominatimClient, SearchController
- registry: EventRegistry for renderer events
- service: MapSessionService wiring events to the core
"""

from aoi_service.config import MapConfig
from aoi_service.debounce import Debouncer
from aoi_service.geocoding import GeocodeResult, NominatimClient, SearchController
from aoi_service.registry import EventNotAvailableError, EventRegistry
from aoi_service.service import MapSessionService, MapState, viewport_around

__all__ = [
    "MapConfig",
    "Debouncer",
    "GeocodeResult",
    "NominatimClient",
    "SearchController",
    "EventNotAvailableError",
    "EventRegistry",
    "MapSessionService",
    "MapState",
    "viewport_around",
]
