"""
Polygon Collection Module
=========================

Bounded Context: Authoritative set of drawn polygons.

Design:
- Single owner of the collection; every change is a named operation
  (add / edit / delete / clear / set_current)
- Every mutation persists the whole collection synchronously (overwrite)
  before listeners are notified
- Read access returns immutable snapshots
"""

from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from aoi_zone.geometry.shapes import Feature, Geometry
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger


class FeatureStore(Protocol):
    """Protocol for the storage collaborator (interface)."""

    def load(self) -> List[Feature]:
        """Return persisted features; never raises."""
        ...

    def save(self, features: Sequence[Feature]) -> bool:
        """Overwrite the persisted collection; never raises."""
        ...


Listener = Callable[["PolygonCollection"], None]


class PolygonCollection:
    """
    Owns the polygons and mediates every change to them.

    Attributes:
        current: The last polygon created or edited (None after delete/clear)
        revision: Incremented on every mutation

    Usage:
        collection = PolygonCollection(store)
        collection.load()
        collection.add(feature)
        collection.edit(edited, previous_geometry=feature.geometry)
        collection.delete(remaining_layers)
        collection.clear()
    """

    def __init__(self, store: FeatureStore, logger: Optional[StructuredLogger] = None):
        self.store = store
        self.logger = logger or create_logger("collection")
        self.current: Optional[Feature] = None
        self.revision = 0
        self._features: List[Feature] = []
        self._listeners: List[Listener] = []

    @property
    def features(self) -> Tuple[Feature, ...]:
        """Read-only snapshot of the collection."""
        return tuple(self._features)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after each persisted mutation.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def load(self) -> None:
        """Replace the in-memory collection with the persisted one."""
        self._features = list(self.store.load())
        self.current = None
        self._changed(persist=False)

    def set_current(self, feature: Optional[Feature]) -> None:
        self.current = feature

    def contains_geometry(self, geometry: Geometry) -> bool:
        return any(f.geometry == geometry for f in self._features)

    def add(self, feature: Feature) -> bool:
        """
        Add a polygon unless an identical geometry already exists.

        Only the geometry decides duplicates; properties and identifiers are
        ignored. Near-duplicates are distinct polygons.

        Returns:
            True if the polygon was appended
        """
        self.current = feature

        if self.contains_geometry(feature.geometry):
            self.logger.info(
                event=LogEvent.COLLECTION_DUPLICATE_SKIPPED,
                message="Polygon already in collection",
                metadata={'feature_id': feature.id},
            )
            return False

        self._features.append(feature)
        self.logger.info(
            event=LogEvent.COLLECTION_ADDED,
            message="Polygon added",
            metadata={'feature_id': feature.id, 'count': len(self._features)},
        )
        self._changed()
        return True

    def _matches(
        self,
        existing: Feature,
        feature: Feature,
        previous_geometry: Geometry,
    ) -> bool:
        if existing.id is not None and feature.id is not None:
            return existing.id == feature.id
        return existing.geometry == previous_geometry

    def edit(self, feature: Feature, previous_geometry: Optional[Geometry] = None) -> int:
        """
        Replace the edited polygon in place.

        Matches by identifier when both sides have one, otherwise by geometry
        equality with `previous_geometry` (the version before the edit).

        Returns:
            Number of polygons replaced
        """
        previous = previous_geometry if previous_geometry is not None else feature.geometry
        self.current = feature

        replaced = 0
        updated = []
        for existing in self._features:
            if self._matches(existing, feature, previous):
                updated.append(feature)
                replaced += 1
            else:
                updated.append(existing)
        self._features = updated

        self.logger.info(
            event=LogEvent.COLLECTION_EDITED,
            message="Polygon edited",
            metadata={'feature_id': feature.id, 'replaced': replaced},
        )
        self._changed()
        return replaced

    def delete(self, remaining: Iterable[Feature]) -> int:
        """
        Reconcile after a delete gesture.

        The features still drawn on the map become the new collection. If
        the rendered layers ever diverge from the collection (e.g. culled
        polygons that were never drawn), those polygons are lost here.

        Returns:
            Number of polygons removed
        """
        before = len(self._features)
        self._features = list(remaining)
        self.current = None

        removed = before - len(self._features)
        self.logger.info(
            event=LogEvent.COLLECTION_DELETED,
            message="Collection reconciled after delete",
            metadata={'removed': removed, 'count': len(self._features)},
        )
        self._changed()
        return removed

    def clear(self) -> None:
        self._features = []
        self.current = None
        self.logger.info(event=LogEvent.COLLECTION_CLEARED, message="Collection cleared")
        self._changed()

    def _changed(self, persist: bool = True) -> None:
        self.revision += 1
        if persist:
            self.store.save(self._features)
        for listener in list(self._listeners):
            listener(self)

    def __len__(self) -> int:
        return len(self._features)

    def __repr__(self) -> str:
        return f"PolygonCollection(count={len(self._features)}, revision={self.revision})"
