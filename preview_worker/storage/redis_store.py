"""
Redis-backed retry state: failures:{id} counters with TTL, screenshot:{id} timestamps.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from preview_worker.errors import StoreError
from preview_worker.policy import FAILURE_TTL
from preview_worker.storage.base import (
    RetryStateStore,
    capture_key,
    failure_key,
    from_millis,
    to_millis,
)

logger = logging.getLogger(__name__)


class RedisRetryStore(RetryStateStore):
    name = "redis"

    def __init__(self, client: aioredis.Redis, failure_ttl: timedelta = FAILURE_TTL):
        self._redis = client
        self.failure_ttl = failure_ttl

    @classmethod
    def from_url(cls, url: str, failure_ttl: timedelta = FAILURE_TTL) -> "RedisRetryStore":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        return cls(client, failure_ttl)

    async def get_failure_count(self, record_id: str) -> int:
        try:
            value = await self._redis.get(failure_key(record_id))
        except RedisError as exc:
            raise StoreError(f"get {failure_key(record_id)}: {exc}") from exc
        return int(value) if value is not None else 0

    async def record_failure(self, record_id: str) -> int:
        key = failure_key(record_id)
        try:
            # INCR + EXPIRE in one MULTI/EXEC so concurrent writers can't lose an increment
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, int(self.failure_ttl.total_seconds()))
                count, _ = await pipe.execute()
        except RedisError as exc:
            raise StoreError(f"incr {key}: {exc}") from exc
        return int(count)

    async def clear_failure(self, record_id: str) -> None:
        try:
            await self._redis.delete(failure_key(record_id))
        except RedisError as exc:
            raise StoreError(f"delete {failure_key(record_id)}: {exc}") from exc

    async def get_last_captured_at(self, record_id: str) -> datetime | None:
        try:
            value = await self._redis.get(capture_key(record_id))
        except RedisError as exc:
            raise StoreError(f"get {capture_key(record_id)}: {exc}") from exc
        return from_millis(value) if value is not None else None

    async def record_capture(self, record_id: str, at: datetime | None = None) -> None:
        at = at or datetime.now(UTC)
        try:
            await self._redis.set(capture_key(record_id), str(to_millis(at)))
        except RedisError as exc:
            raise StoreError(f"set {capture_key(record_id)}: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except RedisError as exc:
            logger.warning("Redis close failed: %s", exc)
