# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

T0 = datetime(2024, 3, 1, 9, 0, 0, tzinfo=UTC)


class FakeClock:
    """
    Deterministic clock for unit tests.

    Call it like the real clock; move time with advance().
    """

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class MemoryByteStore:
    """In-memory ByteStore. Set fail_writes to simulate a full disk."""

    def __init__(self, data: bytes | None = None) -> None:
        self.data = data
        self.fail_writes = False
        self.writes = 0

    def read_bytes(self) -> bytes | None:
        return self.data

    def write_bytes(self, data: bytes) -> None:
        if self.fail_writes:
            raise OSError(28, "No space left on device")
        self.data = data
        self.writes += 1


@dataclass(slots=True)
class Notification:
    title: str
    body: str


@dataclass(slots=True)
class FakeNotifier:
    """Notifier that records what would have been shown."""

    sent: list[Notification] = field(default_factory=list)

    def notify(self, title: str, body: str) -> None:
        self.sent.append(Notification(title=title, body=body))
