"""In-memory key-value store, used by tests and one-shot CLI runs."""

from typing import Dict, Optional

from aoi_store.base import BaseStore, STORAGE_KEY
from aoi_zone.logging import StructuredLogger


class MemoryStore(BaseStore):
    def __init__(
        self,
        initial: Optional[Dict[str, str]] = None,
        key: str = STORAGE_KEY,
        logger: Optional[StructuredLogger] = None,
    ):
        super().__init__(key=key, logger=logger)
        self.data: Dict[str, str] = dict(initial or {})
        self.save_count = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value
        self.save_count += 1
