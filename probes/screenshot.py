"""Headless-browser screenshot capture."""

import asyncio
import logging

from playwright.async_api import async_playwright

from models import ScreenshotResult

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 TrustLens/1.0"
)


class ScreenshotCapture:
    """Renders a page in Chromium and returns a JPEG. Never raises."""

    def __init__(self, timeout: float = 30.0, concurrency: int = 2):
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(concurrency)

    async def _capture(self, url: str) -> ScreenshotResult:
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=True,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                ],
            )
            try:
                context = await browser.new_context(
                    viewport={"width": 1280, "height": 720},
                    user_agent=USER_AGENT,
                    ignore_https_errors=True,
                )
                page = await context.new_page()
                try:
                    await page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)
                except Exception as e:
                    # Whatever has rendered so far is still worth a look
                    logger.info("Page load for %s did not settle: %s", url, e)
                data = await page.screenshot(type="jpeg", quality=60)
                return ScreenshotResult(mime="image/jpeg", data=data)
            finally:
                await browser.close()

    async def __call__(self, url: str) -> ScreenshotResult | None:
        try:
            async with self._semaphore:
                # Navigation timeout plus headroom for launch and capture
                return await asyncio.wait_for(self._capture(url), timeout=self.timeout + 10)
        except asyncio.TimeoutError:
            logger.warning("Screenshot of %s timed out", url)
        except Exception as e:
            logger.warning("Screenshot of %s failed: %s", url, e)
        return None
