from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from preview_worker.policy import FAILURE_TTL
from preview_worker.storage.base import RetryStateStore, capture_key, failure_key


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MemoryRetryStore(RetryStateStore):
    """Process-local store for single runs and tests. Expiry is checked on read."""

    name = "memory"

    def __init__(self, failure_ttl: timedelta = FAILURE_TTL, clock: Callable[[], datetime] = _utcnow):
        self.failure_ttl = failure_ttl
        self.clock = clock
        self.data: dict[str, tuple[object, datetime | None]] = {}

    def _get(self, key: str):
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    async def get_failure_count(self, record_id: str) -> int:
        return self._get(failure_key(record_id)) or 0

    async def record_failure(self, record_id: str) -> int:
        key = failure_key(record_id)
        count = (self._get(key) or 0) + 1
        self.data[key] = (count, self.clock() + self.failure_ttl)
        return count

    async def clear_failure(self, record_id: str) -> None:
        self.data.pop(failure_key(record_id), None)

    async def get_last_captured_at(self, record_id: str) -> datetime | None:
        return self._get(capture_key(record_id))

    async def record_capture(self, record_id: str, at: datetime | None = None) -> None:
        self.data[capture_key(record_id)] = (at or self.clock(), None)
