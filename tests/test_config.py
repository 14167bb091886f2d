# tests/test_config.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pti.config import Settings
from pti.logging_setup import _ConsoleNoiseFilter

_KEYS = (
    "PTI_APP_NAME",
    "PTI_LOG_LEVEL",
    "PTI_LOG_DIR",
    "PTI_STORAGE_DIR",
    "PTI_DATABASE",
    "PTI_SEED_EXAMPLE",
    "PTI_POMODORO_MINUTES",
    "PTI_TICK_SECONDS",
    "PTI_CONSOLE_ENABLED",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_live_under_storage_dir(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("PTI_STORAGE_DIR", str(tmp_path))

    s = Settings.from_env()

    assert s.storage_dir == tmp_path
    assert s.database_path == tmp_path / "database.json"
    assert s.lock_path == tmp_path / "database.lock"
    assert s.log_dir == tmp_path
    assert s.pomodoro_minutes == 25
    assert s.tick_seconds == 1.0
    assert s.seed_example is True
    assert s.console_enabled is True


def test_explicit_database_path_moves_the_lock(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("PTI_DATABASE", str(tmp_path / "other" / "tasks.json"))

    s = Settings.from_env()

    assert s.database_path == tmp_path / "other" / "tasks.json"
    assert s.lock_path == tmp_path / "other" / "database.lock"


def test_malformed_numbers_fall_back_to_defaults(clean_env) -> None:
    clean_env.setenv("PTI_POMODORO_MINUTES", "zero")
    clean_env.setenv("PTI_TICK_SECONDS", "0.001")

    s = Settings.from_env()

    assert s.pomodoro_minutes == 25
    assert s.tick_seconds == 1.0

    clean_env.setenv("PTI_POMODORO_MINUTES", "50")
    clean_env.setenv("PTI_TICK_SECONDS", "0.5")
    clean_env.setenv("PTI_CONSOLE_ENABLED", "no")
    clean_env.setenv("PTI_SEED_EXAMPLE", "off")

    s = Settings.from_env()

    assert s.pomodoro_minutes == 50
    assert s.tick_seconds == 0.5
    assert s.console_enabled is False
    assert s.seed_example is False


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_ticker_quiet() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("pti.tasks.task_store", logging.DEBUG))
    assert not f.filter(_record("pti.tasks.pomodoro_ticker", logging.INFO))
    assert f.filter(_record("pti.tasks.pomodoro_ticker", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))


def test_every_setting_is_documented() -> None:
    doc = (Path(__file__).resolve().parents[1] / "config.example.py").read_text(encoding="utf-8")

    missing = [key for key in _KEYS if f'"{key}"' not in doc]

    assert missing == []
