# src/pti/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.errors import AlreadyOrderedError, NotFoundError, StorageWriteError, TrackerError
from ..tasks.pomodoro_ticker import save_if_changed
from ..tasks.task_view import render_category_table, render_task_table

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class UsageError(ValueError):
    pass


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Tracker errors become user-facing replies; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except AlreadyOrderedError as e:
            return f"Nothing to do: {e}"
        except NotFoundError as e:
            return f"Not found: {e}"
        except StorageWriteError as e:
            logger.error("Save failed: %s", e)
            return f"Save failed (data kept in memory, will retry): {e}"
        except TrackerError as e:
            return f"Error: {e}"
        except (UsageError, LookupError) as e:
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  Any text that is not a command is added as a new task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _parse_id(raw: str, what: str = "task id") -> int:
    try:
        value = int(raw)
    except ValueError:
        raise UsageError(f"Invalid {what}: {raw!r}") from None
    if value < 0:
        raise UsageError(f"Invalid {what}: {raw!r}")
    return value


def _task_arg(state: AppState, args: list[str], index: int = 0) -> int:
    """Task id from args[index], or the selected task."""
    if len(args) > index:
        return _parse_id(args[index])
    if state.selected_task is None:
        raise UsageError("No task given and no task selected (use /select).")
    return state.selected_task


def _lines_with_timer(state: AppState, table: str) -> str:
    return f"{task_api.timer_label(state)}\n{table}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    with state.lock:
        rows = task_api.task_rows(state)
        table = render_task_table(rows)
        return _lines_with_timer(state, table)


def cmd_cats(state: AppState, args: list[str]) -> str:
    with state.lock:
        return render_category_table(task_api.category_rows(state))


def cmd_add(state: AppState, args: list[str]) -> str:
    description = " ".join(args).strip()
    if not description:
        raise UsageError("Usage: /add <description>")
    with state.lock:
        task_id = task_api.add_task(state, description)
    return f"Added task {task_id}."


def cmd_done(state: AppState, args: list[str]) -> str:
    with state.lock:
        task_id = _task_arg(state, args)
        done = task_api.toggle_done(state, task_id)
    return f"Task {task_id} {'done' if done else 'reopened'}."


def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat <hotkey|id>         -> move the selected task into that category
    /cat <hotkey|id> <task>  -> move the given task
    """
    if not args:
        raise UsageError("Usage: /cat <hotkey|category id> [task id]")
    with state.lock:
        category = task_api.resolve_category(state, args[0])
        task_id = _task_arg(state, args, 1)
        task_api.set_category(state, task_id, category.id)
    return f"Task {task_id} -> category {category.name!r}."


def cmd_parent(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        raise UsageError("Usage: /parent <task id> <parent id|none>")
    task_id = _parse_id(args[0])
    parent_id = None if args[1].lower() in ("none", "-", "top") else _parse_id(args[1], "parent id")
    with state.lock:
        task_api.set_parent(state, task_id, parent_id)
    if parent_id is None:
        return f"Task {task_id} moved to top level."
    return f"Task {task_id} is now a subtask of {parent_id}."


def cmd_before(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        raise UsageError("Usage: /before <task id> <anchor id>")
    moved, anchor = _parse_id(args[0]), _parse_id(args[1], "anchor id")
    with state.lock:
        task_api.reorder_before(state, moved, anchor)
    return f"Task {moved} moved before {anchor}."


def cmd_after(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        raise UsageError("Usage: /after <task id> <anchor id>")
    moved, anchor = _parse_id(args[0]), _parse_id(args[1], "anchor id")
    with state.lock:
        task_api.reorder_after(state, moved, anchor)
    return f"Task {moved} moved after {anchor}."


def cmd_up(state: AppState, args: list[str]) -> str:
    with state.lock:
        task_id = _task_arg(state, args)
        moved = task_api.move_task_up(state, task_id)
    return f"Task {task_id} moved up." if moved else f"Task {task_id} is already first."


def cmd_down(state: AppState, args: list[str]) -> str:
    with state.lock:
        task_id = _task_arg(state, args)
        moved = task_api.move_task_down(state, task_id)
    return f"Task {task_id} moved down." if moved else f"Task {task_id} is already last."


def cmd_pomo(state: AppState, args: list[str]) -> str:
    with state.lock:
        task_id = _task_arg(state, args)
        active = task_api.toggle_pomodoro(state, task_id)
        label = task_api.timer_label(state)
    verb = "joined" if active else "left"
    return f"Task {task_id} {verb} the pomodoro. {label}"


def cmd_timer(state: AppState, args: list[str]) -> str:
    with state.lock:
        return task_api.timer_label(state)


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise UsageError("Usage: /show <hotkey|category id>")
    with state.lock:
        category = task_api.resolve_category(state, args[0])
        visible = task_api.toggle_category_visible(state, category.id)
    return f"Category {category.name!r} is now {'shown' if visible else 'hidden'}."


def cmd_default(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise UsageError("Usage: /default <hotkey|category id>")
    with state.lock:
        category = task_api.resolve_category(state, args[0])
        task_api.make_default_category(state, category.id)
    return f"New tasks go to {category.name!r}."


def cmd_select(state: AppState, args: list[str]) -> str:
    """
    /select next | prev | none | <task id>
    """
    sub = args[0].lower() if args else "next"
    with state.lock:
        if sub in ("next", "n", "down"):
            selected = task_api.select_next_task(state)
        elif sub in ("prev", "p", "up"):
            selected = task_api.select_previous_task(state)
        elif sub in ("none", "-"):
            task_api.select_task(state, None)
            selected = None
        else:
            task_id = _parse_id(sub)
            task_api.select_task(state, task_id)
            selected = task_id
    return "No task selected." if selected is None else f"Selected task {selected}."


def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit(f"Saving to {state.settings.database_path}...")
    with state.lock:
        state.data_changed = True
        save_if_changed(state)
    return f"Saved to {state.settings.database_path}."


def cmd_status(state: AppState, args: list[str]) -> str:
    with state.lock:
        db = state.database
        timer = task_api.timer_label(state)
        default = db.find_category(db.default_category_id)
        default_name = default.name if default else f"<missing {db.default_category_id}>"
        return (
            "Status:\n"
            f"  Database: {state.settings.database_path}\n"
            f"  Tasks: {len(db.tasks)}  Categories: {len(db.categories)}\n"
            f"  Default category: {default_name}\n"
            f"  Pomodoro: {db.pomodoro_duration_minutes} min, {timer}\n"
            f"  Unsaved changes: {'yes' if state.data_changed else 'no'}"
        )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the task list.", aliases=["ls", "l"])
registry.register("cats", cmd_cats, help_text="Show categories.", aliases=["c"])
registry.register("add", cmd_add, help_text="Add a task: /add <description>.", aliases=["a"])
registry.register("done", cmd_done, help_text="Toggle done: /done [task].", aliases=["x"])
registry.register("cat", cmd_cat, help_text="Set category: /cat <hotkey|id> [task].")
registry.register("parent", cmd_parent, help_text="Make a subtask: /parent <task> <parent|none>.")
registry.register("before", cmd_before, help_text="Order a task before another: /before <task> <anchor>.")
registry.register("after", cmd_after, help_text="Order a task after another: /after <task> <anchor>.")
registry.register("up", cmd_up, help_text="Move a task up among its siblings: /up [task].")
registry.register("down", cmd_down, help_text="Move a task down among its siblings: /down [task].")
registry.register("pomo", cmd_pomo, help_text="Join/leave the pomodoro: /pomo [task].", aliases=["p"])
registry.register("timer", cmd_timer, help_text="Show the pomodoro timer.", aliases=["t"])
registry.register("show", cmd_show, help_text="Toggle category visibility: /show <hotkey|id>.")
registry.register("default", cmd_default, help_text="Set default category: /default <hotkey|id>.")
registry.register("select", cmd_select, help_text="Select a task: /select next|prev|none|<id>.", aliases=["s"])
registry.register("save", cmd_save, help_text="Save now.")
registry.register("status", cmd_status, help_text="Show storage and timer status.")
