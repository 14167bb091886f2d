# src/pti/connectors/notifier.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

logger = logging.getLogger(__name__)


def ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """
    Prints alerts into the console and rings the terminal bell.

    Desktop popups and alarm sounds are left to other Notifier implementations.
    """

    def __init__(self, *, bell: bool = True) -> None:
        self._bell = bell

    def notify(self, title: str, body: str) -> None:
        logger.info("Notify: %s: %s", title, body)
        bell = "\a" if self._bell and sys.stdout.isatty() else ""
        print(f"\n[{ts_local()}] {bell}*** {title} *** {body}", flush=True)


class LogNotifier:
    """Notifier for headless runs: alerts only go to the log."""

    def notify(self, title: str, body: str) -> None:
        logger.warning("%s: %s", title, body)
