# tests/test_commands.py

from __future__ import annotations

from pti.cli.commands import CommandRegistry
from pti.cli.commands import registry as default_registry
from pti.connectors.console_connector import handle_line


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def _run(state, line: str) -> str:
    reply = default_registry.handle(state, line)
    assert reply is not None
    return reply


def test_add_done_and_list(state) -> None:
    assert _run(state, "/add buy milk") == "Added task 1."
    assert _run(state, "/a call mum") == "Added task 2."
    assert _run(state, "/done 1") == "Task 1 done."
    assert _run(state, "/x 1") == "Task 1 reopened."

    listing = _run(state, "/list")
    assert listing.splitlines()[0] == "No pomodoro active"
    assert "buy milk" in listing
    assert "call mum" in listing
    assert state.data_changed is True


def test_errors_become_replies(state) -> None:
    _run(state, "/add one")
    _run(state, "/add two")

    assert _run(state, "/done 9") == "Not found: Task 9 not found"
    assert _run(state, "/done abc") == "Invalid task id: 'abc'"
    assert _run(state, "/before 1 2").startswith("Nothing to do:")
    assert "No task given" in _run(state, "/done")
    assert _run(state, "/add").startswith("Usage:")
    assert _run(state, "/cat z 1") == "No category with hotkey 'z'"

    _run(state, "/parent 2 1")
    assert _run(state, "/parent 1 2").startswith("Error:")


def test_selection_drives_task_argument(state) -> None:
    _run(state, "/add one")
    _run(state, "/add two")

    assert _run(state, "/select") == "Selected task 1."
    assert _run(state, "/s next") == "Selected task 2."
    assert _run(state, "/done") == "Task 2 done."
    assert _run(state, "/select none") == "No task selected."
    assert _run(state, "/select 1") == "Selected task 1."


def test_category_commands(state) -> None:
    _run(state, "/add one")

    assert _run(state, "/cat w 1") == "Task 1 -> category 'work'."
    assert state.database.find_task(1).category == 1
    assert _run(state, "/show w") == "Category 'work' is now hidden."
    assert "(no visible tasks)" in _run(state, "/list")
    assert _run(state, "/default 2") == "New tasks go to 'home'."
    assert state.database.default_category_id == 2
    assert "home (default)" in _run(state, "/cats")


def test_reorder_and_move_commands(state) -> None:
    for name in ("one", "two", "three"):
        _run(state, f"/add {name}")

    assert _run(state, "/before 3 1") == "Task 3 moved before 1."
    assert _run(state, "/up 3") == "Task 3 is already first."
    assert _run(state, "/down 3") == "Task 3 moved down."
    assert _run(state, "/after 1 2") == "Task 1 moved after 2."


def test_pomo_and_timer(state, clock) -> None:
    _run(state, "/add focus")

    assert _run(state, "/pomo 1") == "Task 1 joined the pomodoro. 25:00 left"
    clock.advance(minutes=10)
    assert _run(state, "/timer") == "15:00 left"
    assert _run(state, "/p 1") == "Task 1 left the pomodoro. No pomodoro active"


def test_save_reports_progress_and_failures(state, byte_store) -> None:
    notes: list[str] = []

    reply = default_registry.handle(state, "/save", emit=notes.append)

    assert reply is not None and reply.startswith("Saved to")
    assert notes and notes[0].startswith("Saving to")
    assert byte_store.writes == 1

    byte_store.fail_writes = True
    assert _run(state, "/save").startswith("Save failed (data kept in memory, will retry)")
    assert state.data_changed is True


def test_status_and_help(state) -> None:
    status = _run(state, "/status")
    assert "Default category: nocat" in status
    assert "Unsaved changes: no" in status

    help_text = _run(state, "/help")
    assert "/pomo" in help_text
    assert "added as a new task" in help_text


def test_console_plain_text_adds_task(state) -> None:
    assert handle_line(state, "water the plants") == "Added task 1."
    assert state.database.find_task(1).description == "water the plants"

    state.database.default_category_id = 42
    assert handle_line(state, "lost").startswith("Could not add task:")
    assert handle_line(state, "/timer") == "No pomodoro active"


class _TrackingLock:
    """Context-manager lock that records whether it is currently held."""

    def __init__(self) -> None:
        self.depth = 0

    def __enter__(self) -> _TrackingLock:
        self.depth += 1
        return self

    def __exit__(self, *exc) -> None:
        self.depth -= 1


class _LockedReadList(list):
    def __init__(self, items, lock: _TrackingLock) -> None:
        super().__init__(items)
        self._lock = lock

    def __len__(self) -> int:
        assert self._lock.depth > 0, "read outside state.lock"
        return super().__len__()


def test_status_reads_everything_under_the_lock(state) -> None:
    _run(state, "/add one")
    lock = _TrackingLock()
    state.lock = lock
    state.database.tasks = _LockedReadList(state.database.tasks, lock)
    state.database.categories = _LockedReadList(state.database.categories, lock)

    status = _run(state, "/status")

    assert "Tasks: 1  Categories: 3" in status
    assert lock.depth == 0


def test_console_and_notifier_share_timestamp_helper() -> None:
    from pti.connectors import console_connector, notifier

    assert console_connector.ts_local is notifier.ts_local
    assert not hasattr(console_connector, "_ts_local")
    assert len(notifier.ts_local()) == len("2024-03-01 09:00:00")
