from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse

from preview_worker.config import settings
from preview_worker.orchestrator import run_scheduled

logger = logging.getLogger(__name__)
app = FastAPI(title=settings.app_name)

# Strong references so background runs aren't garbage-collected mid-flight
_running: set[asyncio.Task] = set()


def _start_run() -> asyncio.Task:
    task = asyncio.create_task(run_scheduled(settings))
    _running.add(task)
    task.add_done_callback(_finished)
    return task


def _finished(task: asyncio.Task) -> None:
    _running.discard(task)
    if task.cancelled():
        logger.warning("Scheduled run cancelled")
    elif task.exception() is not None:
        logger.error("Scheduled run crashed: %s", task.exception())


@app.on_event("shutdown")
async def shutdown():
    # let in-flight runs finish before the process exits
    if _running:
        logger.info("Waiting for %s running job(s)", len(_running))
        await asyncio.gather(*_running, return_exceptions=True)


@app.get("/health")
async def health():
    return {"ok": True, "running": len(_running)}


@app.post("/cron")
async def cron(x_cron_secret: str | None = Header(default=None)):
    if settings.cron_secret and x_cron_secret != settings.cron_secret:
        return JSONResponse({"ok": False}, status_code=401)

    # Overlapping runs are allowed; the retry store's per-key atomicity is the only guard.
    _start_run()
    return JSONResponse({"ok": True})
