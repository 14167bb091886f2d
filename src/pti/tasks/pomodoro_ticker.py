# src/pti/tasks/pomodoro_ticker.py

from __future__ import annotations

"""
Pomodoro ticker.

A small polling loop that, every tick:
- runs the expiry sweep and notifies when a session ran out,
- saves the database if anything changed since the last save.

It runs on its own event loop in a background thread, because the console
REPL blocks on input(). All work happens while holding state.lock.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppState
from . import pomodoro
from .errors import StorageWriteError
from .pomodoro import SweepResult

logger = logging.getLogger(__name__)

NOTIFY_TITLE = "Pomodoro over"


def build_notification_body(result: SweepResult) -> str:
    if not result.descriptions:
        return "The pomodoro ended."
    return "Finished: " + ", ".join(result.descriptions)


def save_if_changed(state: AppState) -> bool:
    """
    Persist the database if it is dirty. Returns True if a save happened.

    A failed save keeps the dirty flag so the next tick retries.
    """
    if not state.data_changed:
        return False
    state.gateway.save(state.database)
    state.data_changed = False
    return True


def tick(state: AppState) -> SweepResult:
    with state.lock:
        result = pomodoro.expiry_sweep(state.database, state.clock())
        if result.expired:
            state.data_changed = True

        try:
            save_if_changed(state)
        except StorageWriteError as e:
            if state.autosave_failing:
                logger.warning("Autosave still failing: %s", e)
            else:
                logger.exception("Autosave failed; will retry on next tick.")
                state.autosave_failing = True
        else:
            if state.autosave_failing:
                logger.info("Autosave recovered.")
                state.autosave_failing = False

    if result.expired:
        try:
            state.notifier.notify(NOTIFY_TITLE, build_notification_body(result))
        except Exception:
            logger.exception("Notifier failed.")
    return result


async def run_pomodoro_ticker(
        state: AppState,
        *,
        interval_seconds: float = 1.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Tick every interval_seconds until stop_event is set (or the task is cancelled).
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        try:
            tick(state)
        except Exception:
            logger.exception("Ticker iteration failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass(slots=True)
class TickerBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Ticker loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_ticker_in_background(state: AppState, *, interval_seconds: float) -> TickerBackgroundRunner | None:
    """Start the ticker on its own event loop in a daemon thread."""
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_pomodoro_ticker(state, interval_seconds=interval_seconds, stop_event=stop_event)
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="pti-ticker", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Ticker thread did not initialize properly.")
        return None

    logger.info("Ticker started (interval=%.2fs).", interval_seconds)
    return TickerBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
