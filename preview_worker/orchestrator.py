"""
One scheduled invocation: query catalog → select → dispatch → process.

Holds no state between runs; every decision is re-derived from the catalog
and the retry store, so an interrupted run is safe to repeat.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from preview_worker.config import Settings, settings as default_settings
from preview_worker.dispatcher import SleepFn, dispatch
from preview_worker.errors import CatalogError
from preview_worker.models import ItemOutcome, ItemStatus, RunSummary
from preview_worker.processor import ItemProcessor
from preview_worker.selector import select
from preview_worker.services.capture import PlaywrightCapturer
from preview_worker.services.describe import ClaudeDescriber
from preview_worker.services.notion import NotionCatalog
from preview_worker.storage.base import RetryStateStore
from preview_worker.storage.factory import build_store

logger = logging.getLogger(__name__)


async def run_once(
    catalog: NotionCatalog,
    capturer: PlaywrightCapturer,
    describer: ClaudeDescriber,
    store: RetryStateStore,
    *,
    settings: Settings = default_settings,
    now: datetime | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> RunSummary:
    now = now or datetime.now(UTC)

    try:
        records = await catalog.query()
    except CatalogError as exc:
        logger.error("Catalog query failed, nothing to do this run: %s", exc)
        return RunSummary()

    work = await select(records, store, now, settings.refresh_interval)
    summary = RunSummary(new=len(work.new), stale=len(work.stale))
    summary.outcomes = [
        ItemOutcome(record.id, ItemStatus.FAILURE, "retry store unavailable") for record in work.unavailable
    ]
    if not work:
        logger.info("No records need a screenshot")
        return summary

    processor = ItemProcessor(catalog, capturer, describer, store)
    state = await dispatch(
        work.items,
        processor.process,
        store.get_failure_count,
        settings.inter_item_delay,
        sleep=sleep,
        max_retries=settings.max_retries,
    )
    summary.outcomes += state.outcomes
    summary.attempted = state.attempted

    logger.info(
        "Run finished: %s selected, %s succeeded, %s failed, %s skipped",
        summary.selected, summary.succeeded, summary.failed, summary.skipped,
    )
    return summary


async def run_scheduled(settings: Settings = default_settings) -> RunSummary:
    """Build real collaborators from settings, run once, release them."""
    logger.info("Cron triggered: processing new and stale sites")
    store = build_store(settings)
    catalog = NotionCatalog(settings.notion_api_key, settings.notion_database_id, timeout=settings.request_timeout)
    describer = ClaudeDescriber.from_api_key(
        settings.anthropic_api_key, settings.describe_model, settings.describe_max_tokens,
    )
    capturer = PlaywrightCapturer(
        timeout_ms=settings.playwright_timeout_ms,
        viewport=(settings.viewport_width, settings.viewport_height),
        jpeg_quality=settings.jpeg_quality,
    )
    try:
        return await run_once(catalog, capturer, describer, store, settings=settings)
    finally:
        await catalog.close()
        await describer.close()
        await store.close()
