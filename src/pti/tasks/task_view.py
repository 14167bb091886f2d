# src/pti/tasks/task_view.py

from __future__ import annotations

"""
Read-only projections of the aggregate for presentation.

project_tasks walks the parent forest in pre-order, one sibling group at a time,
sorted by `order`. The parent graph must be acyclic (TaskStore.set_parent
guarantees this for edits made through it).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .pomodoro import time_spent
from .task_models import Category, Task, TaskState

INDENT = "  "
SENTINEL_LABEL = "no category"


@dataclass(frozen=True, slots=True)
class TaskRow:
    id: int
    description: str  # indented by depth
    state: TaskState
    time_spent: timedelta
    category_name: str  # "" for the sentinel category
    date_added: datetime
    depth: int

    @property
    def checkbox(self) -> str:
        return self.state.checkbox

    @property
    def time_spent_label(self) -> str:
        return format_duration(self.time_spent)


@dataclass(frozen=True, slots=True)
class CategoryRow:
    id: int
    name: str
    hotkey: str | None
    visible: bool
    is_default: bool

    @property
    def visible_marker(self) -> str:
        return "(x)" if self.visible else "( )"

    @property
    def hotkey_label(self) -> str:
        return f"({self.hotkey})" if self.hotkey else ""

    @property
    def label(self) -> str:
        return f"{self.name} (default)" if self.is_default else self.name


def format_duration(value: timedelta) -> str:
    """HH:MM:SS; hours are not wrapped at 24."""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    return f"{sign}{total // 3600:02}:{total // 60 % 60:02}:{total % 60:02}"


def task_state(task: Task) -> TaskState:
    if task.done:
        return TaskState.DONE
    if task.pomodoro_active:
        return TaskState.ACTIVE
    return TaskState.PENDING


def _category_index(categories: Sequence[Category]) -> dict[int, Category]:
    # First occurrence wins, matching lookup order elsewhere.
    index: dict[int, Category] = {}
    for category in categories:
        index.setdefault(category.id, category)
    return index


def _is_visible(task: Task, index: dict[int, Category]) -> bool:
    category = index.get(task.category)
    # Tasks pointing at an unknown category stay visible.
    return category is None or category.visible


def _category_display_name(task: Task, index: dict[int, Category]) -> str:
    category = index.get(task.category)
    if category is None or category.is_sentinel:
        return ""
    return category.name


def visible_children(
    tasks: Sequence[Task],
    categories: Sequence[Category],
    parent: int | None,
) -> list[Task]:
    """One sibling group, visible tasks only, sorted by order (ties keep storage order)."""
    return _visible_level(tasks, _category_index(categories), parent)


def _visible_level(tasks: Sequence[Task], index: dict[int, Category], parent: int | None) -> list[Task]:
    level = [t for t in tasks if t.parent == parent and _is_visible(t, index)]
    level.sort(key=lambda t: t.order)
    return level


def project_tasks(
    tasks: Sequence[Task],
    categories: Sequence[Category],
    now: datetime,
) -> list[TaskRow]:
    """Flattened pre-order listing of visible tasks; children follow their parent."""
    index = _category_index(categories)
    rows: list[TaskRow] = []

    def walk(parent: int | None, depth: int) -> None:
        for task in _visible_level(tasks, index, parent):
            rows.append(
                TaskRow(
                    id=task.id,
                    description=INDENT * depth + task.description,
                    state=task_state(task),
                    time_spent=time_spent(task, now),
                    category_name=_category_display_name(task, index),
                    date_added=task.date_added,
                    depth=depth,
                )
            )
            walk(task.id, depth + 1)

    walk(None, 0)
    return rows


def project_categories(categories: Sequence[Category], default_id: int) -> list[CategoryRow]:
    """Categories sorted by stored name; the sentinel is relabelled."""
    ordered = sorted(categories, key=lambda c: c.name)
    return [
        CategoryRow(
            id=c.id,
            name=SENTINEL_LABEL if c.is_sentinel else c.name,
            hotkey=c.hotkey,
            visible=c.visible,
            is_default=c.id == default_id,
        )
        for c in ordered
    ]


def render_task_table(rows: Sequence[TaskRow]) -> str:
    if not rows:
        return "(no visible tasks)"
    lines = [f"{'':3} {'id':>4} {'Time':8} {'Cat':10} Task"]
    for row in rows:
        lines.append(
            f"{row.checkbox:3} {row.id:>4} {row.time_spent_label:8} "
            f"{row.category_name[:10]:10} {row.description}"
        )
    return "\n".join(lines)


def render_category_table(rows: Sequence[CategoryRow]) -> str:
    lines = [f"{'Show':4} {'id':>4} {'Hotkey':6} Name"]
    for row in rows:
        lines.append(f"{row.visible_marker:4} {row.id:>4} {row.hotkey_label:6} {row.label}")
    return "\n".join(lines)
