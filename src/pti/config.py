# src/pti/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Malformed values fall back to defaults instead of failing at import time.
- Paths are resolved here; the core only ever sees a byte store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import DEFAULT_POMODORO_MINUTES

ENV_PREFIX = "PTI"
DATABASE_FILENAME = "database.json"
LOCK_FILENAME = "database.lock"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _env_float(name: str, default: float, *, minimum: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Storage ----
    storage_dir: Path
    database_path: Path
    lock_path: Path
    seed_example: bool

    # ---- Pomodoro / host loop ----
    pomodoro_minutes: int
    tick_seconds: float
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        storage_dir = _env_path(_k("STORAGE_DIR"), Path.home() / ".pti")
        database_path = _env_path(_k("DATABASE"), storage_dir / DATABASE_FILENAME)

        return Settings(
            app_name=_env(_k("APP_NAME"), "pti"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=_env_path(_k("LOG_DIR"), storage_dir),
            storage_dir=storage_dir,
            database_path=database_path,
            lock_path=database_path.with_name(LOCK_FILENAME),
            seed_example=_env_bool(_k("SEED_EXAMPLE"), True),
            pomodoro_minutes=_env_int(_k("POMODORO_MINUTES"), DEFAULT_POMODORO_MINUTES, minimum=1),
            tick_seconds=_env_float(_k("TICK_SECONDS"), 1.0, minimum=0.05),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env once and build Settings lazily, so importing this module has no side effects."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
