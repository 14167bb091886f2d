# src/pti/tasks/pomodoro.py

from __future__ import annotations

"""
Pomodoro session engine.

A single global session clock (Database.active_pomodoro_starttime) is shared by
every task that has joined it. Each task keeps its own join time and a list of
finished intervals.

All functions take `now` explicitly; nothing here reads the wall clock.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .task_models import Database, Task

logger = logging.getLogger(__name__)


class SweepOutcome(str, Enum):
    NOT_RUNNING = "not_running"
    RUNNING = "running"
    EXPIRED = "expired"


@dataclass(slots=True, frozen=True)
class SweepResult:
    """
    Result of expiry_sweep.

    - NOT_RUNNING: no session clock was set
    - RUNNING: a session is running but is not yet due (descriptions is empty)
    - EXPIRED: the session ran out; descriptions lists the tasks that were stopped
    """

    outcome: SweepOutcome
    descriptions: list[str] = field(default_factory=list)

    @property
    def expired(self) -> bool:
        return self.outcome == SweepOutcome.EXPIRED


def is_running(db: Database) -> bool:
    return db.active_pomodoro_starttime is not None


def active_tasks(db: Database) -> list[Task]:
    return [t for t in db.tasks if t.pomodoro_active]


def toggle(db: Database, task: Task, now: datetime) -> bool:
    """
    Join or leave the shared session for `task`.

    Returns True if the task is active afterwards.
    """
    if task.pomodoro_active:
        task.leave_pomodoro(now)
        if not any(t.pomodoro_active for t in db.tasks):
            db.active_pomodoro_starttime = None
            logger.info("Pomodoro stopped (last task %s left)", task.id)
        return False

    if db.active_pomodoro_starttime is None:
        db.active_pomodoro_starttime = now
        logger.info("Pomodoro started at %s", now.isoformat())
    task.join_pomodoro(now)
    logger.debug("Task %s joined pomodoro", task.id)
    return True


def expiry_sweep(db: Database, now: datetime) -> SweepResult:
    """
    Stop the session if it has run longer than the configured duration.

    Tasks are credited up to start + duration only; overrun is not counted.
    """
    start = db.active_pomodoro_starttime
    if start is None:
        return SweepResult(SweepOutcome.NOT_RUNNING)

    duration = db.pomodoro_duration
    if now - start <= duration:
        return SweepResult(SweepOutcome.RUNNING)

    end = start + duration
    descriptions: list[str] = []
    for task in db.tasks:
        if task.pomodoro_active:
            task.leave_pomodoro(end)
            descriptions.append(task.description)
    db.active_pomodoro_starttime = None
    logger.info("Pomodoro expired tasks=%d", len(descriptions))
    return SweepResult(SweepOutcome.EXPIRED, descriptions)


def remaining_time(db: Database, now: datetime) -> tuple[timedelta, float] | None:
    """
    (time left, fraction elapsed) of the running session, or None.

    An overrun session reports (0, 0.0), not (0, 1.0).
    """
    start = db.active_pomodoro_starttime
    if start is None:
        return None

    duration = db.pomodoro_duration
    elapsed = now - start
    if duration <= timedelta(0):
        return timedelta(0), 0.0

    fraction = elapsed / duration
    if fraction > 1.0:
        return timedelta(0), 0.0
    return duration - elapsed, fraction


def time_spent(task: Task, now: datetime) -> timedelta:
    total = sum((p.time_spent() for p in task.past_pomodoros), timedelta(0))
    if task.active_pomodoro_jointime is not None:
        total += now - task.active_pomodoro_jointime
    return total


def format_remaining(remaining: tuple[timedelta, float] | None) -> str:
    if remaining is None:
        return "No pomodoro active"
    left, _ = remaining
    seconds = max(0, int(left.total_seconds()))
    return f"{seconds // 60:02}:{seconds % 60:02} left"
