# src/pti/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.category_registry import CategoryRegistry
from ..tasks.task_models import Database
from ..tasks.task_storage import DatabaseGateway
from ..tasks.task_store import TaskStore
from .ports import Clock, Notifier


@dataclass
class AppState:
    """
    Everything the host owns for the process lifetime.

    The console REPL and the background ticker both mutate `database`; they do
    so only while holding `lock`. Core modules themselves never lock.
    """

    settings: Any
    database: Database
    gateway: DatabaseGateway
    notifier: Notifier
    clock: Clock

    task_store: TaskStore = field(init=False)
    categories: CategoryRegistry = field(init=False)

    lock: threading.RLock = field(default_factory=threading.RLock)
    data_changed: bool = False
    # Set after a failed autosave; repeats log one line until a save succeeds.
    autosave_failing: bool = False

    # UI selection (ids, not indices: the projected list changes under them).
    selected_task: int | None = None
    selected_category: int | None = None

    def __post_init__(self) -> None:
        self.task_store = TaskStore(self.database)
        self.categories = CategoryRegistry(self.database)
