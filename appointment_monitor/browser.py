"""
Playwright-based browser automation for the booking site.

Each check runs in a throwaway Chromium instance: launched, used for one
site adapter run, then closed on every exit path. No cookies or storage
state are kept between checks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
import logging
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from .sites import SiteAdapter

logger = logging.getLogger(__name__)


class BookingBrowser:
    """
    High-level wrapper around Playwright for one availability check.
    """

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Browser not initialised")
        return self._page

    async def _start(self) -> None:
        """Launch browser, an isolated context and a page."""
        logger.debug("Starting Playwright browser (headless=%s)", self.headless)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        self._context = await self._browser.new_context()
        self._page = await self._context.new_page()

    async def close(self) -> None:
        """Close browser and Playwright."""
        logger.debug("Closing Playwright browser")
        try:
            if self._browser:
                await self._browser.close()
        finally:
            if self._playwright:
                await self._playwright.stop()
            self._playwright = None
            self._browser = None
            self._context = None
            self._page = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator["BookingBrowser"]:
        """
        Async context manager for using browser.

        Example:
            async with BookingBrowser().session() as browser:
                found = await browser.first_available_time(site)
        """
        if self._playwright:
            raise RuntimeError("Browser session already open")
        try:
            await self._start()
            yield self
        finally:
            await self.close()

    async def first_available_time(self, site: SiteAdapter) -> datetime:
        """
        Run the site adapter and return the earliest available appointment.

        Waits for the first response the adapter recognises, using
        Playwright's default timeout.
        """
        page = self.page
        await site.navigate(page)

        # Listen before clicking so a fast response can't slip past
        async with page.expect_response(site.matches_response) as response_info:
            await site.interact(page)
        response = await response_info.value

        body = await response.json()
        return site.extract(body)


__all__ = ["BookingBrowser"]
