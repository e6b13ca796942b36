"""
Rate-limited sequential dispatch.

One capture session at a time, with a fixed pause before every attempted item
except the first. Records over the failure ceiling are skipped without a pause.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace

from preview_worker.errors import StoreError
from preview_worker.models import CatalogRecord, ItemOutcome, ItemStatus
from preview_worker.policy import INTER_ITEM_DELAY, MAX_RETRIES, may_process

logger = logging.getLogger(__name__)

ProcessFn = Callable[[CatalogRecord], Awaitable[ItemOutcome]]
FailureCountFn = Callable[[str], Awaitable[int]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class DispatchState:
    attempted: int = 0
    outcomes: tuple[ItemOutcome, ...] = ()

    def record(self, outcome: ItemOutcome, attempted: bool) -> "DispatchState":
        return replace(
            self,
            attempted=self.attempted + (1 if attempted else 0),
            outcomes=self.outcomes + (outcome,),
        )


async def _step(
    state: DispatchState,
    record: CatalogRecord,
    process: ProcessFn,
    get_failure_count: FailureCountFn,
    delay: float,
    sleep: SleepFn,
    max_retries: int,
) -> DispatchState:
    try:
        failures = await get_failure_count(record.id)
    except StoreError as exc:
        logger.error("Retry store unavailable for %s, treating as failed: %s", record.id, exc)
        return state.record(ItemOutcome(record.id, ItemStatus.FAILURE, str(exc)), attempted=False)

    if not may_process(failures, max_retries):
        logger.info("Skipping %s (%s): %s failures", record.id, record.url, failures)
        return state.record(ItemOutcome(record.id, ItemStatus.SKIPPED), attempted=False)

    if state.attempted:
        await sleep(delay)

    try:
        outcome = await process(record)
    except Exception as exc:
        logger.exception("Unhandled error processing %s", record.id)
        outcome = ItemOutcome(record.id, ItemStatus.FAILURE, str(exc))

    if outcome.ok:
        logger.info("Processed %s (%s)", record.id, record.url)
    else:
        logger.warning("Failed %s (%s): %s", record.id, record.url, outcome.error)
    return state.record(outcome, attempted=True)


async def dispatch(
    items: Iterable[CatalogRecord],
    process: ProcessFn,
    get_failure_count: FailureCountFn,
    delay: float = INTER_ITEM_DELAY,
    *,
    sleep: SleepFn = asyncio.sleep,
    max_retries: int = MAX_RETRIES,
) -> DispatchState:
    state = DispatchState()
    for record in items:
        state = await _step(state, record, process, get_failure_count, delay, sleep, max_retries)
    return state
