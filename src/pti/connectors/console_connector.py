# src/pti/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks import task_api
from ..tasks.errors import TrackerError
from .notifier import ts_local

logger = logging.getLogger(__name__)


def _print_ts(text: str) -> None:
    print(f"[{ts_local()}] {text}")


def _prompt(state: AppState) -> str:
    with state.lock:
        selected = state.selected_task
        timer = task_api.timer_label(state)
    marker = f" #{selected}" if selected is not None else ""
    return f"[{timer}]{marker} > "


def handle_line(state: AppState, line: str) -> str | None:
    """
    One console line -> reply text.

    Slash commands go through the registry; any other text becomes a new task.
    """
    def emit(text: str) -> None:
        print(f"[{ts_local()}] {text}", flush=True)

    reply = command_registry.handle(state, line, emit=emit)
    if reply is not None:
        return reply

    try:
        with state.lock:
            task_id = task_api.add_task(state, line)
    except TrackerError as e:
        return f"Could not add task: {e}"
    return f"Added task {task_id}."


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands, /exit to quit.\n")
    print(command_registry.handle(state, "/list"))

    while True:
        try:
            user_input = input(_prompt(state)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit", "/q"):
            logger.info("Console exit command received.")
            break

        try:
            reply = handle_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply:
            _print_ts(reply)

    logger.info("Console connector finished.")
