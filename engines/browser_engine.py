"""
BrowserEngine - Acquires the Playwright browser session for a run,
forwards page console output into the run log and cleans up afterwards.
"""
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, ConsoleMessage, Page, Playwright

from core.errors import BrowserSessionError
from core.logger import RunLogger
from engines.page_driver import PageDriver


class BrowserEngine:
    """
    Wraps Playwright startup/teardown. Failing to start is fatal for the run.
    """

    def __init__(self, config, logger: RunLogger):
        """
        Initialize the browser engine.

        Args:
            config: Configuration object (see config.Config)
            logger: Run logger receiving console forwarding
        """
        self.config = config
        self.logger = logger
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.driver: Optional[PageDriver] = None

    async def start(self) -> PageDriver:
        """
        Launch the browser and open a page, without navigating yet.

        Raises:
            BrowserSessionError: if any part of the session cannot be created
        """
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.config.BROWSER_HEADLESS
            )
            self.context = await self.browser.new_context(
                viewport={'width': self.config.VIEWPORT_WIDTH, 'height': self.config.VIEWPORT_HEIGHT}
            )
            self.page = await self.context.new_page()
        except Exception as e:
            await self.cleanup()
            raise BrowserSessionError(f"Failed to start browser: {e}") from e

        self.driver = PageDriver(self.page, dom_poll_ms=self.config.DOM_POLL_MS)
        self.driver.on_console(self._forward_console)
        self.logger.info("✅ Browser started")
        return self.driver

    async def open(self, url: str) -> PageDriver:
        """Start the session and navigate to the first screen of the flow."""
        driver = await self.start()
        self.logger.info(f"🌐 Navigating to {url}...")
        try:
            await driver.navigate(url, timeout_ms=self.config.NAVIGATION_GOTO_TIMEOUT_MS)
        except Exception as e:
            await self.cleanup()
            raise BrowserSessionError(f"Failed to open {url}: {e}") from e
        return driver

    def _forward_console(self, message: ConsoleMessage):
        try:
            text = f"[page console:{message.type}] {message.text}"
        except Exception:
            return
        if message.type == "error":
            self.logger.warn(text)
        else:
            self.logger.debug(text)

    async def cleanup(self):
        """
        Close the browser and clean up resources.
        """
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
            self.logger.info("🧹 Browser cleaned up")
        except Exception as e:
            self.logger.warn(f"⚠️  Error during cleanup: {e}")
        finally:
            self.context = None
            self.browser = None
            self.playwright = None
            self.page = None
