# src/pti/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the storage directory exists,
- loads the database (or seeds a fresh one when none is stored yet),
- wires the gateway, clock and notifier into AppState.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..config import get_settings
from ..connectors.notifier import ConsoleNotifier, LogNotifier
from ..core.ports import Clock, Notifier
from ..core.state import AppState
from ..tasks.task_api import example_database
from ..tasks.task_models import Database
from ..tasks.task_storage import DatabaseGateway, FileByteStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def _ensure_local_dirs(settings) -> None:
    settings.storage_dir.mkdir(parents=True, exist_ok=True)
    settings.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_or_seed(gateway: DatabaseGateway, settings, now: datetime) -> tuple[Database, bool]:
    """
    Return (database, seeded).

    A missing file seeds a fresh database. A corrupt file raises
    SerializationError: the host must not silently replace the user's data.
    """
    db = gateway.load()
    if db is not None:
        return db, False

    if getattr(settings, "seed_example", True):
        db = example_database(now, pomodoro_duration_minutes=settings.pomodoro_minutes)
    else:
        db = Database.new(pomodoro_duration_minutes=settings.pomodoro_minutes)
    logger.info("Seeded a new database (example=%s).", getattr(settings, "seed_example", True))
    return db, True


def create_initial_state(
    *,
    settings=None,
    clock: Clock | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings(). Clock defaults to UTC wall
    time; notifier follows settings.console_enabled.
    """
    if settings is None:
        settings = get_settings()
    if clock is None:
        clock = utc_now
    if notifier is None:
        notifier = ConsoleNotifier() if settings.console_enabled else LogNotifier()

    _ensure_local_dirs(settings)

    gateway = DatabaseGateway(FileByteStore(settings.database_path))
    database, seeded = load_or_seed(gateway, settings, clock())

    return AppState(
        settings=settings,
        database=database,
        gateway=gateway,
        notifier=notifier,
        clock=clock,
        # A freshly seeded database is written on the first tick.
        data_changed=seeded,
    )
