"""Builds the ordered work list: new records first, then stale ones."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from preview_worker.errors import StoreError
from preview_worker.models import CatalogRecord
from preview_worker.policy import REFRESH_INTERVAL, is_stale
from preview_worker.storage.base import RetryStateStore

logger = logging.getLogger(__name__)


@dataclass
class WorkList:
    new: list[CatalogRecord] = field(default_factory=list)
    stale: list[CatalogRecord] = field(default_factory=list)
    # previewed records whose capture time could not be read
    unavailable: list[CatalogRecord] = field(default_factory=list)

    @property
    def items(self) -> list[CatalogRecord]:
        return self.new + self.stale

    def __len__(self) -> int:
        return len(self.new) + len(self.stale)


async def select(
    records: list[CatalogRecord],
    store: RetryStateStore,
    now: datetime,
    refresh_interval: timedelta = REFRESH_INTERVAL,
) -> WorkList:
    """Partition catalog rows. Retry gating happens later, at dispatch time."""
    work = WorkList()
    for record in records:
        if not record.has_artifact:
            work.new.append(record)
            continue

        try:
            last_captured_at = await store.get_last_captured_at(record.id)
        except StoreError as exc:
            logger.error("Retry store unavailable, skipping %s this cycle: %s", record.id, exc)
            work.unavailable.append(record)
            continue

        if is_stale(last_captured_at, now, refresh_interval):
            work.stale.append(record)

    logger.info("Selected %s new and %s stale records", len(work.new), len(work.stale))
    return work
