"""Single run for host-level cron: python -m preview_worker"""
import asyncio
import logging

from preview_worker.config import settings
from preview_worker.orchestrator import run_scheduled


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    summary = asyncio.run(run_scheduled(settings))
    logging.getLogger(__name__).info("Done: %s succeeded, %s failed", summary.succeeded, summary.failed)


if __name__ == "__main__":
    main()
