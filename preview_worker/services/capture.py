"""
Capture — opens the site in headless Chromium and returns:
  1. a JPEG screenshot of the viewport
  2. the page title
  3. the meta description
"""
from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from preview_worker.errors import CaptureError
from preview_worker.models import CaptureResult
from preview_worker.utils import is_valid_url

logger = logging.getLogger(__name__)

META_DESCRIPTION_JS = (
    "() => document.querySelector('meta[name=\"description\"]')?.getAttribute('content') ?? ''"
)


class PlaywrightCapturer:
    def __init__(self, timeout_ms: int = 30000, viewport: tuple[int, int] = (1920, 1080), jpeg_quality: int = 85):
        self.timeout_ms = timeout_ms
        self.viewport = {"width": viewport[0], "height": viewport[1]}
        self.jpeg_quality = jpeg_quality

    async def capture(self, url: str) -> CaptureResult:
        if not is_valid_url(url):
            raise CaptureError(f"Invalid URL: {url!r}")

        # Playwright raises its own TimeoutError as a subclass of Error
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(args=["--no-sandbox", "--disable-dev-shm-usage"])
                try:
                    page = await browser.new_page(viewport=self.viewport)
                    await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)

                    title = await page.title()
                    meta_description = await page.evaluate(META_DESCRIPTION_JS) or ""
                    screenshot = await page.screenshot(type="jpeg", quality=self.jpeg_quality)
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            raise CaptureError(f"Capture failed for {url}: {exc}") from exc

        logger.info("Captured %s (%s bytes)", url, len(screenshot))
        return CaptureResult(artifact=screenshot, title=title or "", meta_description=meta_description)
