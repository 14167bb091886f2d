# tests/test_pomodoro_ticker.py

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from pti.tasks import task_api
from pti.tasks.pomodoro import SweepOutcome
from pti.tasks.pomodoro_ticker import (
    NOTIFY_TITLE,
    run_pomodoro_ticker,
    save_if_changed,
    start_ticker_in_background,
    tick,
)
from pti.tasks.task_codec import decode_database


def test_tick_expires_notifies_and_autosaves(state, clock, notifier, byte_store) -> None:
    a = task_api.add_task(state, "write")
    task_api.toggle_pomodoro(state, a)
    assert tick(state).outcome == SweepOutcome.RUNNING
    writes_before = byte_store.writes

    clock.advance(minutes=30)
    result = tick(state)

    assert result.outcome == SweepOutcome.EXPIRED
    assert len(notifier.sent) == 1
    assert notifier.sent[0].title == NOTIFY_TITLE
    assert "write" in notifier.sent[0].body
    assert byte_store.writes == writes_before + 1
    assert state.data_changed is False

    saved = decode_database(byte_store.data)
    assert saved.active_pomodoro_starttime is None
    assert len(saved.find_task(a).past_pomodoros) == 1


def test_tick_without_changes_does_not_write(state, byte_store, notifier) -> None:
    tick(state)

    assert byte_store.writes == 0
    assert notifier.sent == []


def test_failed_save_keeps_dirty_flag_and_retries(state, byte_store) -> None:
    task_api.add_task(state, "unsaved")
    byte_store.fail_writes = True

    tick(state)

    assert state.data_changed is True
    assert byte_store.data is None

    byte_store.fail_writes = False
    tick(state)

    assert state.data_changed is False
    assert byte_store.writes == 1


def test_save_if_changed_is_noop_when_clean(state, byte_store) -> None:
    assert save_if_changed(state) is False
    state.data_changed = True
    assert save_if_changed(state) is True
    assert byte_store.writes == 1


def test_notifier_failure_does_not_break_tick(state, clock) -> None:
    class BrokenNotifier:
        def notify(self, title: str, body: str) -> None:
            raise RuntimeError("no display")

    state.notifier = BrokenNotifier()
    task_api.toggle_pomodoro(state, task_api.add_task(state, "x"))
    clock.advance(minutes=26)

    assert tick(state).expired


@pytest.mark.asyncio
async def test_ticker_loop_runs_until_stopped(state, clock, notifier) -> None:
    task_api.toggle_pomodoro(state, task_api.add_task(state, "deep work"))
    clock.advance(hours=1)
    stop = asyncio.Event()

    runner = asyncio.create_task(run_pomodoro_ticker(state, interval_seconds=0.01, stop_event=stop))

    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert len(notifier.sent) == 1, "An expired session is reported exactly once"
    assert state.data_changed is False


@pytest.mark.asyncio
async def test_ticker_loop_can_be_cancelled(state) -> None:
    runner = asyncio.create_task(run_pomodoro_ticker(state, interval_seconds=0.01))

    await asyncio.sleep(0.03)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner


def test_background_runner_starts_and_stops(state, byte_store) -> None:
    task_api.add_task(state, "saved by the thread")

    runner = start_ticker_in_background(state, interval_seconds=0.01)
    assert runner is not None
    deadline = time.monotonic() + 2.0
    while byte_store.writes == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.thread.is_alive()
    assert byte_store.writes >= 1


def test_repeated_autosave_failure_logs_traceback_once(state, byte_store, caplog) -> None:
    task_api.add_task(state, "unsaved")
    byte_store.fail_writes = True

    with caplog.at_level(logging.INFO, logger="pti.tasks.pomodoro_ticker"):
        for _ in range(3):
            tick(state)

        with_traceback = [r for r in caplog.records if r.exc_info]
        still_failing = [r for r in caplog.records if r.getMessage().startswith("Autosave still failing")]
        assert len(with_traceback) == 1
        assert len(still_failing) == 2
        assert state.autosave_failing is True

        byte_store.fail_writes = False
        tick(state)
        assert state.autosave_failing is False
        assert "Autosave recovered." in caplog.text

        caplog.clear()
        task_api.add_task(state, "again")
        byte_store.fail_writes = True
        tick(state)
        assert len([r for r in caplog.records if r.exc_info]) == 1
