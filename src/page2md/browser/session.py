"""Chromium session that loads a page and snapshots it."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..axtree.nodes import AXNode
from ..axtree.parser import parse_cdp_tree
from ..errors import ExtractionError, NavigationError, NavigationTimeoutError

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    A single Chromium page driven through Playwright.

    Launches the browser on enter and tears everything down on exit.
    Navigation blocks until the configured load state is reached or the
    timeout elapses; there are no retries.

    Example:
        async with BrowserSession(headless=True) as session:
            await session.navigate("https://example.com")
            html = await session.get_html()
            tree = await session.get_accessibility_tree()
    """

    def __init__(
        self,
        headless: bool = False,
        timeout: float = 30.0,
        wait_until: str = "load",
        user_agent: Optional[str] = None,
        viewport: tuple[int, int] = (1920, 1080),
    ) -> None:
        """
        Initialize the session.

        Args:
            headless: Run without a visible window
            timeout: Navigation timeout (seconds)
            wait_until: Load state to wait for ('load', 'domcontentloaded', 'networkidle', 'commit')
            user_agent: Custom user agent
            viewport: Viewport width and height in pixels
        """
        self._headless = headless
        self._timeout = timeout
        self._wait_until = wait_until
        self._user_agent = user_agent
        self._viewport = viewport

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session not started. Use 'async with' context.")
        return self._page

    async def __aenter__(self) -> BrowserSession:
        """Launch Chromium and open a page."""
        context_options: dict[str, Any] = {
            "viewport": {"width": self._viewport[0], "height": self._viewport[1]},
            "java_script_enabled": True,
            "ignore_https_errors": True,
        }
        if self._user_agent:
            context_options["user_agent"] = self._user_agent

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
            self._context = await self._browser.new_context(**context_options)
            self._context.set_default_timeout(self._timeout * 1000)
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            await self.close()
            raise NavigationError(f"Could not start Chromium: {e}") from e

        logger.info(f"Browser session started (headless={self._headless})")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close page, context, browser and Playwright, ignoring shutdown errors."""
        for closeable in (self._page, self._context, self._browser):
            if closeable is None:
                continue
            try:
                await closeable.close()
            except PlaywrightError as e:
                logger.debug(f"Error during browser shutdown: {e}")

        self._page = None
        self._context = None
        self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Browser session closed")

    async def navigate(self, url: str) -> int | None:
        """
        Load ``url`` and wait for the load-complete signal.

        Args:
            url: Page to load

        Returns:
            HTTP status of the main document, if the browser reported one

        Raises:
            NavigationTimeoutError: The load state was not reached in time
            NavigationError: The page could not be loaded
        """
        try:
            response = await self.page.goto(
                url,
                wait_until=self._wait_until,  # type: ignore[arg-type]
                timeout=self._timeout * 1000,
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(f"Timed out after {self._timeout:g}s loading {url}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

        if response is None:
            return None
        if response.status >= 400:
            raise NavigationError(f"Navigation to {url} failed: HTTP {response.status}")

        logger.debug(f"Loaded {url}: status={response.status}")
        return response.status

    async def get_html(self) -> str:
        """Return the serialized DOM of the loaded page."""
        try:
            return await self.page.content()
        except PlaywrightError as e:
            raise ExtractionError(f"Could not read page content: {e}") from e

    async def get_accessibility_tree(self) -> AXNode:
        """Return the page's full accessibility tree via the DevTools protocol."""
        try:
            cdp = await self.page.context.new_cdp_session(self.page)
            try:
                payload = await cdp.send("Accessibility.getFullAXTree")
            finally:
                await cdp.detach()
        except PlaywrightError as e:
            raise ExtractionError(f"Could not read accessibility tree: {e}") from e

        return parse_cdp_tree(payload)
