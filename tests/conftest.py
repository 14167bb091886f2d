# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pti.core.state import AppState
from pti.tasks.task_models import Category, Database
from pti.tasks.task_storage import DatabaseGateway

from .fakes import T0, FakeClock, FakeNotifier, MemoryByteStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI layer.

    We intentionally use a SimpleNamespace rather than the real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="pti-test",
        log_level="DEBUG",
        log_dir=tmp_path,
        storage_dir=tmp_path,
        database_path=tmp_path / "database.json",
        lock_path=tmp_path / "database.lock",
        seed_example=True,
        pomodoro_minutes=25,
        tick_seconds=0.01,
        console_enabled=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture()
def db() -> Database:
    """Sentinel + two visible categories, no tasks."""
    database = Database.new()
    database.categories.append(Category(id=1, name="work", hotkey="w"))
    database.categories.append(Category(id=2, name="home", hotkey="h"))
    return database


@pytest.fixture()
def byte_store() -> MemoryByteStore:
    return MemoryByteStore()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(settings, db, byte_store, notifier, clock) -> AppState:
    """AppState wired with deterministic fakes (in-memory storage, fake clock)."""
    return AppState(
        settings=settings,
        database=db,
        gateway=DatabaseGateway(byte_store),
        notifier=notifier,
        clock=clock,
    )
