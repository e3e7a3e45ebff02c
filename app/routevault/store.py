from __future__ import annotations

import json
import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

from flask import Flask, current_app

from app.routevault.models import StoreDocument
from app.routevault.storage import Storage, storage_from_config

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Holds the single JSON document (users, pending submissions, approved data, logs).

    Reads fail open to an empty document; writes log and swallow errors. Every
    mutating request goes through transaction() as one full read-modify-write.
    """

    def __init__(self, storage: Storage, key: str = "data.json") -> None:
        self.storage = storage
        self.key = key
        self._lock = threading.Lock()

    def exists(self) -> bool:
        try:
            return self.storage.exists(self.key)
        except Exception:
            # Unknown state: report present so startup never seeds over real data.
            logger.exception("Store existence check failed (key=%s)", self.key)
            return True

    def read_strict(self) -> StoreDocument:
        """
        Empty document only when the blob is missing; I/O, JSON and shape errors
        propagate. Use before writes that must not replace data it could not see.
        """
        try:
            with self.storage.open(self.key) as f:
                raw = json.loads(f.read().decode("utf-8"))
        except FileNotFoundError:
            logger.info("Store document %s not found; using empty document", self.key)
            return StoreDocument()
        return StoreDocument.from_dict(raw)

    def read(self) -> StoreDocument:
        try:
            return self.read_strict()
        except Exception:
            logger.exception("Error reading store document %s; using empty document", self.key)
        return StoreDocument()

    def write(self, doc: StoreDocument) -> bool:
        try:
            payload = json.dumps(doc.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
            self.storage.put_bytes(self.key, payload, content_type="application/json")
            return True
        except Exception:
            logger.exception("Error writing store document %s", self.key)
            return False

    @contextmanager
    def transaction(self) -> Generator[StoreDocument, None, None]:
        """
        Read, yield for mutation, write back. An exception raised inside the block
        skips the write. The lock only serialises threads of this process.
        """
        with self._lock:
            doc = self.read()
            yield doc
            self.write(doc)


def init_store(app: Flask) -> DocumentStore:
    store = DocumentStore(storage_from_config(app.config), key=app.config.get("DATA_FILE") or "data.json")
    app.extensions["document_store"] = store
    return store


def get_store(app: Flask | None = None) -> DocumentStore:
    app = app or current_app
    return app.extensions["document_store"]
