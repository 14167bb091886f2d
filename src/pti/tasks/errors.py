# src/pti/tasks/errors.py

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every error raised by the task tracker core."""


class NotFoundError(TrackerError, LookupError):
    kind = "item"

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"{self.kind} {item_id} not found")


class TaskNotFoundError(NotFoundError):
    kind = "Task"


class CategoryNotFoundError(NotFoundError):
    kind = "Category"


class AlreadyOrderedError(TrackerError):
    """
    Informational: the requested move would not change the relative position.

    Callers are free to ignore it.
    """


class CycleError(TrackerError, ValueError):
    pass


class SerializationError(TrackerError, ValueError):
    """Persisted document could not be parsed into a Database."""


class StorageWriteError(TrackerError, OSError):
    """Saving failed. The in-memory state is intact and the save can be retried."""
