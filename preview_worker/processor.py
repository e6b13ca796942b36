from __future__ import annotations

import logging

from preview_worker.errors import CaptureError, CatalogError, EnrichmentError, StoreError
from preview_worker.models import CatalogRecord, ItemOutcome, ItemStatus
from preview_worker.services.capture import PlaywrightCapturer
from preview_worker.services.describe import ClaudeDescriber
from preview_worker.services.notion import NotionCatalog
from preview_worker.storage.base import RetryStateStore
from preview_worker.utils import name_from_url

logger = logging.getLogger(__name__)


class ItemProcessor:
    """Capture, describe and write back one record, then update its retry state.

    Never raises: every failure is turned into a FAILURE outcome.
    """

    def __init__(
        self,
        catalog: NotionCatalog,
        capturer: PlaywrightCapturer,
        describer: ClaudeDescriber,
        store: RetryStateStore,
    ):
        self.catalog = catalog
        self.capturer = capturer
        self.describer = describer
        self.store = store

    async def _publish(self, record: CatalogRecord) -> None:
        result = await self.capturer.capture(record.url)

        description = record.description
        if not description:
            description = await self.describer.generate(result.title, result.meta_description, record.url)

        await self.catalog.update_artifact(record.id, result.artifact)

        # refreshes only replace the screenshot
        if not record.has_artifact:
            name = record.name or result.title or name_from_url(record.url)
            await self.catalog.update_name_and_description(record.id, name, description)

    async def process(self, record: CatalogRecord) -> ItemOutcome:
        try:
            await self._publish(record)
        except (CaptureError, EnrichmentError, CatalogError) as exc:
            logger.warning("%s failed for %s: %s", type(exc).__name__, record.id, exc)
            return await self._fail(record, exc)
        except Exception as exc:
            logger.exception("Unexpected error for %s", record.id)
            return await self._fail(record, exc)

        try:
            await self.store.record_capture(record.id)
            await self.store.clear_failure(record.id)
        except StoreError as exc:
            logger.error("Retry store unavailable after publishing %s: %s", record.id, exc)
            return ItemOutcome(record.id, ItemStatus.FAILURE, str(exc))

        return ItemOutcome(record.id, ItemStatus.SUCCESS)

    async def _fail(self, record: CatalogRecord, exc: Exception) -> ItemOutcome:
        try:
            count = await self.store.record_failure(record.id)
            logger.info("%s now has %s recorded failures", record.id, count)
        except StoreError as store_exc:
            logger.error("Retry store unavailable, failure for %s not recorded: %s", record.id, store_exc)
        return ItemOutcome(record.id, ItemStatus.FAILURE, str(exc))
