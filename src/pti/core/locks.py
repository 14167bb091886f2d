# src/pti/core/locks.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


class InstanceLockedError(RuntimeError):
    pass


@contextmanager
def instance_lock(lock_path: Path) -> Iterator[IO[str]]:
    """Acquire an exclusive, non-blocking advisory lock for the process lifetime.

    This prevents two `pti` processes from writing the same database file.
    """
    import fcntl

    lock_path.parent.mkdir(parents=True, exist_ok=True)
    handle = lock_path.open("a+", encoding="utf-8")
    try:
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            raise InstanceLockedError(f"Another pti instance is already running (lock: {lock_path}).") from exc
        logger.debug("Instance lock acquired %s", lock_path)
        yield handle
    finally:
        with contextlib.suppress(OSError):
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        handle.close()
