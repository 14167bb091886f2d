# src/pti/tasks/task_storage.py

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

from ..core.ports import ByteStore
from .errors import StorageWriteError
from .task_codec import decode_database, encode_database
from .task_models import Database

logger = logging.getLogger(__name__)


class FileByteStore:
    """
    Database document on the local filesystem.

    Writes go to a sibling ".tmp" file first and are moved into place with
    os.replace, so a crash mid-write leaves the previous document intact.
    Exclusive access is the host's job (see core.locks.instance_lock).
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_bytes(self) -> bytes | None:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None

    def write_bytes(self, data: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            os.chmod(self._path, 0o600)


class DatabaseGateway:
    """
    Loads and saves the whole aggregate through a ByteStore.

    load():
    - returns None when nothing is stored yet (host seeds a fresh database),
    - raises SerializationError when the stored document is malformed,
    - lets read errors other than "missing" propagate as OSError.
    save():
    - raises StorageWriteError; the in-memory database is untouched and the
      host may retry on the next tick.
    """

    def __init__(self, store: ByteStore) -> None:
        self._store = store

    @property
    def store(self) -> ByteStore:
        return self._store

    def load(self) -> Database | None:
        data = self._store.read_bytes()
        if data is None:
            logger.info("No stored database found.")
            return None
        db = decode_database(data)
        logger.info("Database loaded tasks=%d categories=%d", len(db.tasks), len(db.categories))
        return db

    def save(self, db: Database) -> None:
        data = encode_database(db)
        try:
            self._store.write_bytes(data)
        except OSError as e:
            raise StorageWriteError(f"Could not save database: {e}") from e
        logger.debug("Database saved bytes=%d", len(data))
