"""
Browser automation client for the intake form.

Usage:
    from browser import BrowserClient, FormDriver

    async with BrowserClient("http://localhost:3000") as page:
        await FormDriver(page).submit(service_request)

BrowserClient is the Playwright-backed FormPage: every element lookup that
fails or times out becomes a DriverError.
"""

import logging
from typing import Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from config import HEADLESS
from service_request.errors import DriverError

from .config import BROWSER_ARGS, ELEMENT_TIMEOUT, PAGE_LOAD_TIMEOUT, VIEWPORT

logger = logging.getLogger(__name__)


class BrowserClient:
    """One Chromium session on one form page."""

    def __init__(self, url: str, headless: Optional[bool] = None):
        """
        Args:
            url: Form page to open
            headless: Hide the window (defaults to HEADLESS from env)
        """
        self.url = url
        self.headless = HEADLESS if headless is None else headless
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self):
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Launch browser and open the form."""
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=BROWSER_ARGS,
            )
            self.context = await self.browser.new_context(viewport=VIEWPORT)
            self.page = await self.context.new_page()
            await self.page.goto(
                self.url, wait_until="domcontentloaded", timeout=PAGE_LOAD_TIMEOUT * 1000
            )
        except PlaywrightError as e:
            raise DriverError(f"Could not open form at {self.url}: {e}") from e

        logger.info(f"Browser session opened: {self.url} (headless={self.headless})")

    async def close(self):
        """Close browser and cleanup."""
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

    # ============ FormPage ============

    async def _locate(self, selector: str) -> Locator:
        if self.page is None:
            raise DriverError("Browser session is not started")
        locator = self.page.locator(selector)
        if await locator.count() == 0:
            raise DriverError(f"Element not found: {selector}")
        return locator.first

    async def fill(self, selector: str, value: str):
        locator = await self._locate(selector)
        try:
            await locator.fill(value, timeout=ELEMENT_TIMEOUT * 1000)
        except PlaywrightError as e:
            raise DriverError(f"Could not fill {selector}: {e}") from e

    async def select_option(self, selector: str, value: str):
        locator = await self._locate(selector)
        try:
            await locator.select_option(value, timeout=ELEMENT_TIMEOUT * 1000)
        except PlaywrightError as e:
            raise DriverError(f"Could not select '{value}' in {selector}: {e}") from e

    async def click(self, selector: str):
        locator = await self._locate(selector)
        try:
            await locator.click(timeout=ELEMENT_TIMEOUT * 1000)
        except PlaywrightError as e:
            raise DriverError(f"Could not click {selector}: {e}") from e

    async def wait_for_visible(self, selector: str):
        if self.page is None:
            raise DriverError("Browser session is not started")
        try:
            await self.page.wait_for_selector(
                selector, state="visible", timeout=ELEMENT_TIMEOUT * 1000
            )
        except PlaywrightTimeoutError as e:
            raise DriverError(f"Timed out waiting for {selector} to become visible") from e
        except PlaywrightError as e:
            raise DriverError(f"Could not wait for {selector}: {e}") from e
