"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)

Event Naming Convention:
    <component>.<action> or <component>.<category>.<action>

    component: storage, collection, draw, render, viewport, geocoding
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - storage.*: Persistence collaborator
    - collection.*: Polygon collection mutations
    - draw.*: Draw session lifecycle
    - render.*: Render passes and batches
    - viewport.*: View changes
    - geocoding.*: Place search
    """

    # ========== Storage Events ==========
    STORAGE_LOADED = "storage.loaded"
    """Collection decoded from the persisted blob."""

    STORAGE_SAVED = "storage.saved"
    """Collection persisted (overwrite)."""

    STORAGE_DECODE_FAILED = "storage.decode_failed"
    """Persisted blob could not be decoded; collection falls back to empty."""

    STORAGE_ENTRY_DROPPED = "storage.entry_dropped"
    """A malformed feature was dropped while loading."""

    STORAGE_SAVE_FAILED = "storage.save_failed"
    """Persisting the collection failed."""

    # ========== Collection Events ==========
    COLLECTION_ADDED = "collection.added"
    COLLECTION_DUPLICATE_SKIPPED = "collection.duplicate_skipped"
    COLLECTION_EDITED = "collection.edited"
    COLLECTION_DELETED = "collection.deleted"
    COLLECTION_CLEARED = "collection.cleared"

    # ========== Draw Events ==========
    DRAW_STARTED = "draw.started"
    DRAW_VERTEX_ADDED = "draw.vertex_added"
    DRAW_COMPLETED = "draw.completed"
    DRAW_DISCARDED = "draw.discarded"
    DRAW_COMPLETION_REJECTED = "draw.completion_rejected"
    """Close gesture ignored: too few distinct vertices, session kept."""

    # ========== Render Events ==========
    RENDER_PASS_STARTED = "render.pass_started"
    RENDER_BATCH_DONE = "render.batch_done"
    RENDER_PASS_COMPLETED = "render.pass_completed"
    RENDER_ITEM_FAILED = "render.item_failed"

    # ========== Viewport Events ==========
    VIEWPORT_CHANGED = "viewport.changed"

    # ========== Geocoding Events ==========
    GEOCODING_SEARCH = "geocoding.search"
    GEOCODING_FAILED = "geocoding.failed"


# Event categories for filtering
STORAGE_EVENTS = {
    LogEvent.STORAGE_LOADED,
    LogEvent.STORAGE_SAVED,
    LogEvent.STORAGE_DECODE_FAILED,
    LogEvent.STORAGE_ENTRY_DROPPED,
    LogEvent.STORAGE_SAVE_FAILED,
}

DRAW_EVENTS = {
    LogEvent.DRAW_STARTED,
    LogEvent.DRAW_VERTEX_ADDED,
    LogEvent.DRAW_COMPLETED,
    LogEvent.DRAW_DISCARDED,
    LogEvent.DRAW_COMPLETION_REJECTED,
}

ERROR_EVENTS = {
    LogEvent.STORAGE_DECODE_FAILED,
    LogEvent.STORAGE_ENTRY_DROPPED,
    LogEvent.STORAGE_SAVE_FAILED,
    LogEvent.RENDER_ITEM_FAILED,
    LogEvent.GEOCODING_FAILED,
}
