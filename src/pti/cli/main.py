# src/pti/cli/main.py

"""
CLI entrypoint.

Initializes logging, takes the instance lock on the storage location, builds
AppState, then runs:
- the pomodoro ticker (expiry sweep + autosave) in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.locks import InstanceLockedError, instance_lock
from ..logging_setup import setup_logging
from ..tasks.errors import SerializationError, StorageWriteError
from ..tasks.pomodoro_ticker import TickerBackgroundRunner, save_if_changed, start_ticker_in_background

logger = logging.getLogger(__name__)

EXIT_INSTANCE_LOCKED = 1
EXIT_CORRUPT_DATABASE = 2
EXIT_UNREADABLE_DATABASE = 3


def _shutdown(state) -> None:
    """Final save. A failure is reported, never raised."""
    try:
        with state.lock:
            if save_if_changed(state):
                logger.info("Saved database on exit.")
    except StorageWriteError:
        logger.exception("Failed to save database on exit; changes since the last save are lost.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s (database=%s)...", settings.app_name, settings.database_path)

    try:
        with instance_lock(settings.lock_path):
            _run(settings)
    except InstanceLockedError as e:
        logger.error("%s", e)
        sys.exit(EXIT_INSTANCE_LOCKED)


def _run(settings) -> None:
    try:
        state = create_initial_state(settings=settings)
    except SerializationError as e:
        # Never overwrite a file we could not read.
        logger.error("Database %s is corrupt and was left untouched: %s", settings.database_path, e)
        sys.exit(EXIT_CORRUPT_DATABASE)
    except OSError as e:
        logger.error("Cannot read database %s: %s", settings.database_path, e)
        sys.exit(EXIT_UNREADABLE_DATABASE)

    ticker: TickerBackgroundRunner | None = start_ticker_in_background(
        state, interval_seconds=settings.tick_seconds
    )

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        if stop_main.is_set():
            return
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()
        if settings.console_enabled:
            # Unblocks input() in the REPL; the finally below still saves.
            raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
    except ValueError:
        # Not in the main thread.
        pass

    try:
        if settings.console_enabled:
            try:
                run_console_loop(state)
            except KeyboardInterrupt:
                logger.info("Console interrupted, exiting.")
            stop_main.set()
        else:
            logger.info("Console disabled. Running the pomodoro ticker only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if ticker is not None:
            ticker.stop()
            ticker.join(timeout=5.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
