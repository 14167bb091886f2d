# src/pti/tasks/task_codec.py

from __future__ import annotations

"""
JSON codec for the Database document.

Document shape:
  {tasks: [...], categories: [...], pomodoro_duration_minutes,
   active_pomodoro_starttime?, default_category_id}

Timestamps are UTC, written as "YYYY-MM-DDTHH:MM:SS.ffffffZ". Reading accepts any
ISO-8601 form with an offset (or none, taken as UTC) and any sub-second precision.
"""

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

from .errors import SerializationError
from .task_models import Category, Database, Pomodoro, Task, sentinel_category

logger = logging.getLogger(__name__)

_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
# Files written by other tools may carry nanoseconds; datetime keeps microseconds.
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_TS_FORMAT)


def parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise SerializationError(f"Expected timestamp string, got {raw!r}")
    try:
        value = datetime.fromisoformat(_EXTRA_FRACTION.sub(r"\1", raw.strip()))
    except ValueError as e:
        raise SerializationError(f"Invalid timestamp {raw!r}") from e
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _opt_timestamp(raw: Any) -> datetime | None:
    return None if raw is None else parse_timestamp(raw)


def _uint(raw: Any, name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise SerializationError(f"{name} must be a non-negative integer, got {raw!r}")
    return raw


def _str(raw: Any, name: str) -> str:
    if not isinstance(raw, str):
        raise SerializationError(f"{name} must be a string, got {raw!r}")
    return raw


def _bool(raw: Any, name: str) -> bool:
    if not isinstance(raw, bool):
        raise SerializationError(f"{name} must be a boolean, got {raw!r}")
    return raw


def _field(obj: dict[str, Any], key: str, where: str) -> Any:
    try:
        return obj[key]
    except KeyError:
        raise SerializationError(f"{where}: missing field {key!r}") from None


# ---- encode ----


def _task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "description": task.description,
        "done": task.done,
        "past_pomodoros": [
            {"start_time": format_timestamp(p.start_time), "end_time": format_timestamp(p.end_time)}
            for p in task.past_pomodoros
        ],
        "active_pomodoro_jointime": (
            format_timestamp(task.active_pomodoro_jointime)
            if task.active_pomodoro_jointime is not None
            else None
        ),
        "parent": task.parent,
        "category": task.category,
        "date_added": format_timestamp(task.date_added),
        "order": task.order,
    }


def _category_to_dict(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "hotkey": category.hotkey,
        "visible": category.visible,
    }


def database_to_dict(db: Database) -> dict[str, Any]:
    return {
        "tasks": [_task_to_dict(t) for t in db.tasks],
        "categories": [_category_to_dict(c) for c in db.categories],
        "pomodoro_duration_minutes": db.pomodoro_duration_minutes,
        "active_pomodoro_starttime": (
            format_timestamp(db.active_pomodoro_starttime)
            if db.active_pomodoro_starttime is not None
            else None
        ),
        "default_category_id": db.default_category_id,
    }


def encode_database(db: Database) -> bytes:
    """Deterministic pretty-printed UTF-8 JSON."""
    return json.dumps(database_to_dict(db), ensure_ascii=False, indent=2).encode("utf-8")


# ---- decode ----


def _task_from_dict(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise SerializationError(f"Task entry must be an object, got {type(raw).__name__}")
    task_id = _uint(_field(raw, "id", "task"), "task.id")
    where = f"task {task_id}"

    pomodoros_raw = _field(raw, "past_pomodoros", where)
    if not isinstance(pomodoros_raw, list):
        raise SerializationError(f"{where}: past_pomodoros must be a list")
    pomodoros: list[Pomodoro] = []
    for p in pomodoros_raw:
        if not isinstance(p, dict):
            raise SerializationError(f"{where}: pomodoro entry must be an object")
        pomodoros.append(
            Pomodoro(
                start_time=parse_timestamp(_field(p, "start_time", where)),
                end_time=parse_timestamp(_field(p, "end_time", where)),
            )
        )

    parent_raw = raw.get("parent")
    return Task(
        id=task_id,
        description=_str(_field(raw, "description", where), f"{where}.description"),
        done=_bool(_field(raw, "done", where), f"{where}.done"),
        past_pomodoros=pomodoros,
        active_pomodoro_jointime=_opt_timestamp(raw.get("active_pomodoro_jointime")),
        parent=None if parent_raw is None else _uint(parent_raw, f"{where}.parent"),
        category=_uint(_field(raw, "category", where), f"{where}.category"),
        date_added=parse_timestamp(_field(raw, "date_added", where)),
        order=_uint(_field(raw, "order", where), f"{where}.order"),
    )


def _category_from_dict(raw: Any) -> Category:
    if not isinstance(raw, dict):
        raise SerializationError(f"Category entry must be an object, got {type(raw).__name__}")
    category_id = _uint(_field(raw, "id", "category"), "category.id")
    where = f"category {category_id}"
    hotkey = raw.get("hotkey")
    if hotkey is not None and (not isinstance(hotkey, str) or len(hotkey) != 1):
        raise SerializationError(f"{where}: hotkey must be a single character, got {hotkey!r}")
    return Category(
        id=category_id,
        name=_str(_field(raw, "name", where), f"{where}.name"),
        hotkey=hotkey,
        visible=_bool(_field(raw, "visible", where), f"{where}.visible"),
    )


def database_from_dict(data: Any) -> Database:
    if not isinstance(data, dict):
        raise SerializationError("Database document must be a JSON object")

    tasks_raw = _field(data, "tasks", "database")
    categories_raw = _field(data, "categories", "database")
    if not isinstance(tasks_raw, list) or not isinstance(categories_raw, list):
        raise SerializationError("tasks and categories must be lists")

    tasks = [_task_from_dict(t) for t in tasks_raw]
    ids = [t.id for t in tasks]
    if len(ids) != len(set(ids)):
        raise SerializationError("Duplicate task ids in database")

    return Database(
        tasks=tasks,
        categories=[_category_from_dict(c) for c in categories_raw],
        pomodoro_duration_minutes=_uint(
            _field(data, "pomodoro_duration_minutes", "database"), "pomodoro_duration_minutes"
        ),
        active_pomodoro_starttime=_opt_timestamp(data.get("active_pomodoro_starttime")),
        default_category_id=_uint(_field(data, "default_category_id", "database"), "default_category_id"),
    )


def normalize_database(db: Database) -> Database:
    """Repair invariants a hand-edited or older file may violate. Mutates and returns db."""
    if db.find_category(0) is None:
        logger.warning("Database has no sentinel category; re-adding it.")
        db.categories.insert(0, sentinel_category())

    joined = [t.active_pomodoro_jointime for t in db.tasks if t.active_pomodoro_jointime is not None]
    if db.active_pomodoro_starttime is None and joined:
        db.active_pomodoro_starttime = min(joined)
        logger.warning("Active tasks without a session clock; session start set to %s", db.active_pomodoro_starttime)
    elif db.active_pomodoro_starttime is not None and not joined:
        logger.warning("Session clock set but no task is active; clearing it.")
        db.active_pomodoro_starttime = None
    return db


def decode_database(data: bytes) -> Database:
    """Parse a persisted document. Raises SerializationError on any malformed content."""
    try:
        doc = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SerializationError(f"Database is not valid JSON: {e}") from e
    return normalize_database(database_from_dict(doc))
