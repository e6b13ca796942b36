from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime


def failure_key(record_id: str) -> str:
    return f"failures:{record_id}"


def capture_key(record_id: str) -> str:
    return f"screenshot:{record_id}"


def to_millis(at: datetime) -> int:
    return int(at.timestamp() * 1000)


def from_millis(value: int | str) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=UTC)


class RetryStateStore(ABC):
    """Per-record failure counter (with expiry) and last successful capture time.

    Every method may raise StoreError; nothing is retried here.
    """

    name: str

    @abstractmethod
    async def get_failure_count(self, record_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def record_failure(self, record_id: str) -> int:
        """Increment the counter, restart its expiry window, return the new count."""
        raise NotImplementedError

    @abstractmethod
    async def clear_failure(self, record_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_last_captured_at(self, record_id: str) -> datetime | None:
        raise NotImplementedError

    @abstractmethod
    async def record_capture(self, record_id: str, at: datetime | None = None) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None
