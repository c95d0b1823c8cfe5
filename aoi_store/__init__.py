"""
AOI Store
=========

Bounded Context: Persistence of the polygon collection.

Public API
----------
    BaseStore: Abstract key-value store with load/save of the collection
    JsonFileStore: Store persisted to a JSON file
    MemoryStore: Store kept in memory
    STORAGE_KEY: Well-known key of the collection blob

Example:
    >>> from aoi_store import JsonFileStore
    >>> store = JsonFileStore(Path("./data/aoi.json"))
    >>> features = store.load()     # never raises
    >>> store.save(features)        # True / False, never raises
"""

from .base import BaseStore, STORAGE_KEY
from .json_file import JsonFileStore
from .memory import MemoryStore

__all__ = [
    'BaseStore',
    'JsonFileStore',
    'MemoryStore',
    'STORAGE_KEY',
]
