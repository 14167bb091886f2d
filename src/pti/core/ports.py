# src/pti/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
Storage, clock and notification delivery stay swappable, and tests pass fakes.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

Clock = Callable[[], datetime]
# Returns an aware UTC datetime. The core never reads the wall clock itself.


class ByteStore(Protocol):
    """Opaque byte-read/byte-write pair for the database document."""

    def read_bytes(self) -> bytes | None:
        """Return the stored document, or None if nothing has been stored yet."""
        ...

    def write_bytes(self, data: bytes) -> None: ...


class Notifier(Protocol):
    """Host-side delivery of user-facing alerts (desktop popup, sound, console line...)."""

    def notify(self, title: str, body: str) -> None: ...
