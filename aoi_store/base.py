"""
Base Feature Store
==================

Bounded Context: Persistence

Abstract base class for storage collaborators.

Design:
- Key-value backends: subclasses only implement get/put of one blob
- One JSON array of Feature objects under a single well-known key
- Overwrite semantics, no versioning field
- Never raises to the caller: decode and write failures are logged

Architecture:
    BaseStore (abstract)
        ↓
    JsonFileStore, MemoryStore (concrete)

Responsibilities:
- Encoding/decoding the collection
- Dropping malformed entries with a warning
- NOT responsible for: where the blob lives (delegated to subclasses)
"""

import json
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from aoi_zone.geometry.shapes import Feature, FeatureDecodeError
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger

STORAGE_KEY = "aoi-polygons"


class BaseStore(ABC):
    """
    Abstract base class for feature stores.

    Attributes:
        key: Storage key the collection lives under
        logger: Structured logger instance
    """

    def __init__(self, key: str = STORAGE_KEY, logger: Optional[StructuredLogger] = None):
        if not key:
            raise ValueError("Storage key cannot be empty")
        self.key = key
        self.logger = logger or create_logger("store")

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under key, None if absent."""
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store the blob under key, replacing any previous value."""
        pass

    def load(self) -> List[Feature]:
        """
        Decode the persisted collection.

        Returns:
            Valid features in stored order; [] when nothing is stored or the
            blob is unreadable
        """
        try:
            blob = self.get(self.key)
        except (OSError, ValueError, RecursionError) as e:
            self.logger.warning(
                event=LogEvent.STORAGE_DECODE_FAILED,
                message="Could not read persisted polygons",
                metadata={'key': self.key},
                exc_info=e,
            )
            return []

        if not blob:
            return []

        try:
            data = json.loads(blob)
        except (ValueError, RecursionError) as e:
            self.logger.warning(
                event=LogEvent.STORAGE_DECODE_FAILED,
                message="Persisted polygons are not valid JSON",
                metadata={'key': self.key},
                exc_info=e,
            )
            return []

        if not isinstance(data, list):
            self.logger.warning(
                event=LogEvent.STORAGE_DECODE_FAILED,
                message="Persisted polygons are not a JSON array",
                metadata={'key': self.key, 'type': type(data).__name__},
            )
            return []

        features = []
        for index, entry in enumerate(data):
            try:
                features.append(Feature.from_dict(entry))
            except FeatureDecodeError as e:
                self.logger.warning(
                    event=LogEvent.STORAGE_ENTRY_DROPPED,
                    message="Dropped malformed polygon",
                    metadata={'key': self.key, 'index': index},
                    exc_info=e,
                )

        self.logger.info(
            event=LogEvent.STORAGE_LOADED,
            message="Loaded polygons",
            metadata={'key': self.key, 'count': len(features), 'dropped': len(data) - len(features)},
        )
        return features

    def save(self, features: Sequence[Feature]) -> bool:
        """
        Overwrite the persisted collection.

        Returns:
            True on success, False if the write failed (already logged)
        """
        try:
            blob = json.dumps([feature.to_dict() for feature in features])
            self.put(self.key, blob)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(
                event=LogEvent.STORAGE_SAVE_FAILED,
                message="Failed to persist polygons",
                metadata={'key': self.key, 'count': len(features)},
                exc_info=e,
            )
            return False

        self.logger.debug(
            event=LogEvent.STORAGE_SAVED,
            message="Persisted polygons",
            metadata={'key': self.key, 'count': len(features)},
        )
        return True
