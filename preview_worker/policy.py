"""Retry gate and staleness checks. Pure functions, no I/O."""
from __future__ import annotations

from datetime import datetime, timedelta

MAX_RETRIES = 3
REFRESH_INTERVAL = timedelta(days=90)
FAILURE_TTL = timedelta(days=30)
INTER_ITEM_DELAY = 25.0  # seconds


def may_process(failure_count: int, max_retries: int = MAX_RETRIES) -> bool:
    return failure_count < max_retries


def is_stale(
    last_captured_at: datetime | None,
    now: datetime,
    refresh_interval: timedelta = REFRESH_INTERVAL,
) -> bool:
    if last_captured_at is None:
        return True
    return now - last_captured_at > refresh_interval
