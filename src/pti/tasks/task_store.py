# src/pti/tasks/task_store.py

from __future__ import annotations

import logging
from datetime import datetime

from .errors import AlreadyOrderedError, CategoryNotFoundError, CycleError, TaskNotFoundError
from .task_models import Database, Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Task half of the aggregate: creation, done flag, category, parent and manual order.

    The store works on a Database passed in by the host; it holds no state of its own.

    Ordering:
    - a task's `order` only matters relative to its siblings (same parent),
    - reorder_before / reorder_after shift ranks over the whole order space,
      which keeps initially unique values unique within every sibling group.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def database(self) -> Database:
        return self._db

    # ---- lookups ----

    def get_task(self, task_id: int) -> Task:
        task = self._db.find_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def count_tasks(self) -> int:
        return len(self._db.tasks)

    def children_of(self, parent_id: int | None) -> list[Task]:
        return [t for t in self._db.tasks if t.parent == parent_id]

    # ---- mutations ----

    def add_task(self, description: str, *, now: datetime) -> int:
        """
        Create a top-level task in the default category.

        id = highest existing id + 1, order = id.
        """
        category_id = self._db.default_category_id
        if self._db.find_category(category_id) is None:
            raise CategoryNotFoundError(category_id)

        highest_id = max((t.id for t in self._db.tasks), default=0)
        task_id = highest_id + 1
        self._db.tasks.append(
            Task(
                id=task_id,
                description=description,
                date_added=now,
                order=task_id,
                category=category_id,
            )
        )
        logger.debug("Task added id=%s category=%s", task_id, category_id)
        return task_id

    def toggle_done(self, task_id: int) -> bool:
        task = self.get_task(task_id)
        task.done = not task.done
        logger.debug("Task %s done=%s", task_id, task.done)
        return task.done

    def set_category(self, task_id: int, category_id: int) -> None:
        # The category id is not checked against the registry.
        task = self.get_task(task_id)
        task.category = category_id
        logger.debug("Task %s category=%s", task_id, category_id)

    def set_parent(self, task_id: int, parent_id: int | None) -> None:
        """Re-attach a task under `parent_id` (None = top level), refusing cycles."""
        task = self.get_task(task_id)
        if parent_id is not None:
            ancestor: Task | None = self.get_task(parent_id)
            seen: set[int] = set()
            while ancestor is not None:
                if ancestor.id == task_id:
                    raise CycleError(f"Task {parent_id} is a descendant of task {task_id}")
                if ancestor.id in seen:
                    raise CycleError(f"Parent chain of task {parent_id} already contains a cycle")
                seen.add(ancestor.id)
                ancestor = self._db.find_task(ancestor.parent) if ancestor.parent is not None else None
        task.parent = parent_id
        logger.debug("Task %s parent=%s", task_id, parent_id)

    def reorder_before(self, moved_id: int, anchor_id: int) -> None:
        """
        Move `moved_id` to the rank of `anchor_id`, pushing the ranks in between down by one.

        Raises AlreadyOrderedError if the moved task already sorts before the anchor.
        """
        moved = self.get_task(moved_id)
        anchor = self.get_task(anchor_id)
        mo, ao = moved.order, anchor.order
        if mo < ao:
            raise AlreadyOrderedError(f"Task {moved_id} is already before task {anchor_id}")

        for task in self._db.tasks:
            if ao <= task.order < mo:
                task.order += 1
        moved.order = ao
        logger.debug("Task %s moved before %s (order %s -> %s)", moved_id, anchor_id, mo, ao)

    def reorder_after(self, moved_id: int, anchor_id: int) -> None:
        """
        Move `moved_id` to the rank of `anchor_id`, pulling the ranks in between up by one.

        Raises AlreadyOrderedError if the moved task already sorts after the anchor.
        """
        moved = self.get_task(moved_id)
        anchor = self.get_task(anchor_id)
        mo, ao = moved.order, anchor.order
        if mo > ao:
            raise AlreadyOrderedError(f"Task {moved_id} is already after task {anchor_id}")

        for task in self._db.tasks:
            if mo < task.order <= ao:
                task.order -= 1
        moved.order = ao
        logger.debug("Task %s moved after %s (order %s -> %s)", moved_id, anchor_id, mo, ao)
