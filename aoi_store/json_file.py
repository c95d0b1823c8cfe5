"""
JSON File Store
===============

Key-value store backed by a single JSON document on disk.

Layout:
    {"aoi-polygons": "[{\"type\": \"Feature\", ...}]", "<other key>": "..."}

Each value is an opaque blob string, mirroring a browser-style key-value
storage. Writes go to a temporary file that replaces the target, so a
crash mid-write never leaves a truncated document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from aoi_store.base import BaseStore, STORAGE_KEY
from aoi_zone.logging import StructuredLogger


class JsonFileStore(BaseStore):
    """
    Feature store persisted to a JSON file.

    Example:
        >>> store = JsonFileStore(Path("./data/aoi.json"))
        >>> store.save(collection.features)
        >>> features = store.load()
    """

    def __init__(
        self,
        path: Path,
        key: str = STORAGE_KEY,
        logger: Optional[StructuredLogger] = None,
    ):
        super().__init__(key=key, logger=logger)
        self.path = Path(path)

    def _read_document(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        with open(self.path, encoding="utf-8") as f:
            document = json.load(f)

        if not isinstance(document, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return document

    def get(self, key: str) -> Optional[str]:
        value = self._read_document().get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Value under '{key}' is not a string blob")
        return value

    def put(self, key: str, value: str) -> None:
        try:
            document = self._read_document()
        except (ValueError, RecursionError):
            # Unreadable document: the new write replaces it entirely
            document = {}
        document[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def __repr__(self) -> str:
        return f"JsonFileStore(path={str(self.path)!r}, key={self.key!r})"
