"""
JSON file record store

Each collection (menu, orders, reservations, customers) is a single JSON
array kept in ``<data_dir>/<collection>.json``. Every read returns the whole
collection and every write replaces it.
"""

import json
import logging
import os
import re
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageError(Exception):
    pass


class CorruptStorage(StorageError):
    """A collection file exists but does not hold a JSON array."""

    def __init__(self, collection: str, reason: str):
        super().__init__(f"Collection '{collection}' is corrupt: {reason}")
        self.collection = collection


class JsonRecordStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, collection: str) -> str:
        if not _NAME_RE.match(collection or ""):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return os.path.join(self.data_dir, f"{collection}.json")

    @contextmanager
    def lock(self, collection: str) -> Iterator[None]:
        """Hold the collection's lock for a whole load-mutate-save cycle."""
        self.path_for(collection)
        with self._locks_guard:
            lk = self._locks.setdefault(collection, threading.RLock())
        with lk:
            yield

    def load(self, collection: str) -> List[Any]:
        path = self.path_for(collection)
        if not os.path.exists(path):
            with self.lock(collection):
                if not os.path.exists(path):
                    logger.debug("Collection %s missing, initializing %s", collection, path)
                    self.save(collection, [])
                    return []

        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
        # A truncated file reads as an empty collection
        if raw.strip() == "":
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStorage(collection, str(e)) from e
        if not isinstance(data, list):
            raise CorruptStorage(collection, f"expected a JSON array, got {type(data).__name__}")
        return data

    def save(self, collection: str, records: List[Any]) -> None:
        path = self.path_for(collection)
        os.makedirs(self.data_dir, exist_ok=True)
        with self.lock(collection):
            fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f"{collection}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise

    def collections(self) -> List[str]:
        if not os.path.isdir(self.data_dir):
            return []
        names = []
        for fname in sorted(os.listdir(self.data_dir)):
            stem, ext = os.path.splitext(fname)
            if ext == ".json" and _NAME_RE.match(stem):
                names.append(stem)
        return names
