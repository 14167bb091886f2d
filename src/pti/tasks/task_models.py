# src/pti/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

SENTINEL_CATEGORY_ID = 0
SENTINEL_CATEGORY_NAME = "nocat"
SENTINEL_CATEGORY_HOTKEY = "u"
DEFAULT_POMODORO_MINUTES = 25


class TaskState(StrEnum):
    """
    Checkbox state of a task in the projected view.

    Priority when several apply: done > active > pending.
    """

    DONE = "done"
    ACTIVE = "active"
    PENDING = "pending"

    @property
    def checkbox(self) -> str:
        return _CHECKBOXES[self]


_CHECKBOXES = {
    TaskState.DONE: "[x]",
    TaskState.ACTIVE: "[*]",
    TaskState.PENDING: "[ ]",
}


@dataclass(frozen=True, slots=True)
class Pomodoro:
    """One finished focus interval of a task, [start_time, end_time)."""

    start_time: datetime
    end_time: datetime

    def time_spent(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass(slots=True)
class Task:
    id: int
    description: str
    date_added: datetime
    order: int
    category: int = SENTINEL_CATEGORY_ID
    done: bool = False
    parent: int | None = None

    past_pomodoros: list[Pomodoro] = field(default_factory=list)
    # Present iff the task is currently accruing focus time.
    active_pomodoro_jointime: datetime | None = None

    @property
    def pomodoro_active(self) -> bool:
        return self.active_pomodoro_jointime is not None

    def join_pomodoro(self, now: datetime) -> None:
        self.active_pomodoro_jointime = now

    def leave_pomodoro(self, now: datetime) -> None:
        if self.active_pomodoro_jointime is None:
            return
        self.past_pomodoros.append(Pomodoro(start_time=self.active_pomodoro_jointime, end_time=now))
        self.active_pomodoro_jointime = None


@dataclass(slots=True)
class Category:
    id: int
    name: str
    hotkey: str | None = None
    visible: bool = True

    @property
    def is_sentinel(self) -> bool:
        return self.id == SENTINEL_CATEGORY_ID


@dataclass(slots=True)
class Database:
    """
    The whole persisted aggregate.

    Invariants kept by the operations in task_store / category_registry / pomodoro:
    - category 0 always exists
    - active_pomodoro_starttime is set iff at least one task has a join time
    - task ids are never reused
    """

    tasks: list[Task] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    pomodoro_duration_minutes: int = DEFAULT_POMODORO_MINUTES
    active_pomodoro_starttime: datetime | None = None
    default_category_id: int = SENTINEL_CATEGORY_ID

    @classmethod
    def new(cls, *, pomodoro_duration_minutes: int = DEFAULT_POMODORO_MINUTES) -> Database:
        return cls(
            categories=[sentinel_category()],
            pomodoro_duration_minutes=pomodoro_duration_minutes,
        )

    @property
    def pomodoro_duration(self) -> timedelta:
        return timedelta(minutes=self.pomodoro_duration_minutes)

    def find_task(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def find_category(self, category_id: int) -> Category | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None


def sentinel_category() -> Category:
    return Category(
        id=SENTINEL_CATEGORY_ID,
        name=SENTINEL_CATEGORY_NAME,
        hotkey=SENTINEL_CATEGORY_HOTKEY,
        visible=True,
    )
