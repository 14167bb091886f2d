# src/pti/tasks/task_api.py

from __future__ import annotations

"""
Host-level helpers on top of the core stores.

These work on AppState: they read the injected clock, keep the UI selection in
step with the projected lists and flag the database as changed for autosave.
"""

import logging
from datetime import datetime

from ..core.state import AppState
from . import pomodoro
from .task_models import Category, Database, Task
from .task_view import CategoryRow, TaskRow, project_categories, project_tasks, visible_children

logger = logging.getLogger(__name__)


def example_database(now: datetime, *, pomodoro_duration_minutes: int = 25) -> Database:
    """Seed used on first run: a hidden sentinel, an archive and a default 'todo' category."""
    db = Database.new(pomodoro_duration_minutes=pomodoro_duration_minutes)
    db.categories[0].visible = False
    db.categories.append(Category(id=1, name="archive", hotkey="a"))
    db.categories.append(Category(id=2, name="todo", hotkey="t"))
    db.default_category_id = 2
    for task_id, (description, category_id) in enumerate(
        [("Task 1", 0), ("Task 2", 1), ("Task 3", 2), ("Task 4", 0)]
    ):
        db.tasks.append(
            Task(id=task_id, description=description, date_added=now, order=task_id, category=category_id)
        )
    return db


def mark_changed(state: AppState) -> None:
    state.data_changed = True


# ---- projections ----


def task_rows(state: AppState) -> list[TaskRow]:
    db = state.database
    return project_tasks(db.tasks, db.categories, state.clock())


def category_rows(state: AppState) -> list[CategoryRow]:
    db = state.database
    return project_categories(db.categories, db.default_category_id)


def timer_label(state: AppState) -> str:
    return pomodoro.format_remaining(pomodoro.remaining_time(state.database, state.clock()))


# ---- selection ----


def _step(ids: list[int], current: int | None, delta: int) -> int | None:
    """Move within `ids`, clamped at both ends. No selection starts at the near end."""
    if not ids:
        return None
    if current is None:
        return ids[0] if delta > 0 else ids[-1]
    try:
        index = ids.index(current)
    except ValueError:
        return None
    return ids[max(0, min(len(ids) - 1, index + delta))]


def select_next_task(state: AppState) -> int | None:
    state.selected_task = _step([r.id for r in task_rows(state)], state.selected_task, +1)
    return state.selected_task


def select_previous_task(state: AppState) -> int | None:
    state.selected_task = _step([r.id for r in task_rows(state)], state.selected_task, -1)
    return state.selected_task


def select_task(state: AppState, task_id: int | None) -> None:
    if task_id is not None:
        state.task_store.get_task(task_id)
    state.selected_task = task_id


def select_next_category(state: AppState) -> int | None:
    state.selected_category = _step([r.id for r in category_rows(state)], state.selected_category, +1)
    return state.selected_category


def select_previous_category(state: AppState) -> int | None:
    state.selected_category = _step([r.id for r in category_rows(state)], state.selected_category, -1)
    return state.selected_category


def select_first_category(state: AppState) -> int | None:
    rows = category_rows(state)
    state.selected_category = rows[0].id if rows else None
    return state.selected_category


def select_no_category(state: AppState) -> None:
    state.selected_category = None


# ---- mutations with autosave bookkeeping ----


def add_task(state: AppState, description: str) -> int:
    task_id = state.task_store.add_task(description, now=state.clock())
    mark_changed(state)
    logger.info("Added task %s", task_id)
    return task_id


def toggle_done(state: AppState, task_id: int) -> bool:
    done = state.task_store.toggle_done(task_id)
    mark_changed(state)
    return done


def set_category(state: AppState, task_id: int, category_id: int) -> None:
    state.task_store.set_category(task_id, category_id)
    mark_changed(state)


def set_parent(state: AppState, task_id: int, parent_id: int | None) -> None:
    state.task_store.set_parent(task_id, parent_id)
    mark_changed(state)


def reorder_before(state: AppState, moved_id: int, anchor_id: int) -> None:
    state.task_store.reorder_before(moved_id, anchor_id)
    mark_changed(state)


def reorder_after(state: AppState, moved_id: int, anchor_id: int) -> None:
    state.task_store.reorder_after(moved_id, anchor_id)
    mark_changed(state)


def toggle_pomodoro(state: AppState, task_id: int) -> bool:
    task = state.task_store.get_task(task_id)
    active = pomodoro.toggle(state.database, task, state.clock())
    mark_changed(state)
    return active


def toggle_category_visible(state: AppState, category_id: int) -> bool:
    visible = state.categories.toggle_visible(category_id)
    mark_changed(state)
    return visible


def make_default_category(state: AppState, category_id: int) -> None:
    state.categories.set_default(category_id)
    mark_changed(state)


def _visible_siblings(state: AppState, task: Task) -> list[Task]:
    db = state.database
    return visible_children(db.tasks, db.categories, task.parent)


def move_task_up(state: AppState, task_id: int) -> bool:
    """Swap places with the previous visible sibling. Returns False at the top."""
    task = state.task_store.get_task(task_id)
    siblings = _visible_siblings(state, task)
    index = next((i for i, t in enumerate(siblings) if t.id == task_id), None)
    if not index:
        return False
    reorder_before(state, task_id, siblings[index - 1].id)
    return True


def move_task_down(state: AppState, task_id: int) -> bool:
    """Swap places with the next visible sibling. Returns False at the bottom."""
    task = state.task_store.get_task(task_id)
    siblings = _visible_siblings(state, task)
    index = next((i for i, t in enumerate(siblings) if t.id == task_id), None)
    if index is None or index >= len(siblings) - 1:
        return False
    reorder_after(state, task_id, siblings[index + 1].id)
    return True


def resolve_category(state: AppState, token: str) -> Category:
    """A single non-digit character is a hotkey; anything else is parsed as an id."""
    token = token.strip()
    if len(token) == 1 and not token.isdigit():
        category = state.categories.by_hotkey(token)
        if category is None:
            raise LookupError(f"No category with hotkey {token!r}")
        return category
    try:
        category_id = int(token)
    except ValueError:
        raise LookupError(f"Not a category hotkey or id: {token!r}") from None
    return state.categories.get_category(category_id)
