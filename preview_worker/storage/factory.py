from preview_worker.config import Settings
from preview_worker.storage.base import RetryStateStore
from preview_worker.storage.memory import MemoryRetryStore
from preview_worker.storage.redis_store import RedisRetryStore

# One per process so counters and capture times survive between scheduled runs
_memory_store: MemoryRetryStore | None = None


def build_store(settings: Settings) -> RetryStateStore:
    if settings.retry_store == "memory":
        global _memory_store
        if _memory_store is None:
            _memory_store = MemoryRetryStore(failure_ttl=settings.failure_ttl)
        return _memory_store
    if settings.retry_store == "redis":
        return RedisRetryStore.from_url(settings.redis_url, failure_ttl=settings.failure_ttl)
    raise ValueError(f"Unknown retry store: {settings.retry_store!r}")
