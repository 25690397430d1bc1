"""Tests for BrowserSession with a mocked Playwright page."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from page2md.axtree import Role
from page2md.browser import BrowserSession, PageSnapshotProvider
from page2md.errors import ExtractionError, NavigationError, NavigationTimeoutError
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


def make_session(timeout=5.0, status=200):
    session = BrowserSession(headless=True, timeout=timeout, wait_until="networkidle")
    page = MagicMock()
    response = MagicMock()
    response.status = status
    page.goto = AsyncMock(return_value=response)
    page.content = AsyncMock(return_value="<html><body><p>hi</p></body></html>")
    session._page = page
    return session, page


class TestBrowserSession:
    """Tests for BrowserSession."""

    def test_is_snapshot_provider(self):
        """Test that the session satisfies the provider protocol."""
        assert isinstance(BrowserSession(), PageSnapshotProvider)

    def test_page_requires_start(self):
        """Test accessing the page before entering the context."""
        with pytest.raises(RuntimeError):
            BrowserSession().page

    @pytest.mark.asyncio
    async def test_navigate(self):
        """Test navigation passes load state and timeout through."""
        session, page = make_session(timeout=5.0)

        status = await session.navigate("https://example.com")

        assert status == 200
        page.goto.assert_awaited_once_with("https://example.com", wait_until="networkidle", timeout=5000.0)

    @pytest.mark.asyncio
    async def test_navigate_without_response(self):
        """Test navigation that reports no main response."""
        session, page = make_session()
        page.goto.return_value = None

        assert await session.navigate("about:blank") is None

    @pytest.mark.asyncio
    async def test_navigate_timeout(self):
        """Test that Playwright timeouts become NavigationTimeoutError."""
        session, page = make_session(timeout=2.0)
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 2000ms exceeded")

        with pytest.raises(NavigationTimeoutError, match="2s"):
            await session.navigate("https://slow.example.com")

    @pytest.mark.asyncio
    async def test_navigate_error(self):
        """Test that unreachable hosts become NavigationError."""
        session, page = make_session()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as exc_info:
            await session.navigate("https://nowhere.invalid")
        assert not isinstance(exc_info.value, NavigationTimeoutError)

    @pytest.mark.asyncio
    async def test_navigate_http_error(self):
        """Test that HTTP error statuses fail navigation."""
        session, _ = make_session(status=404)

        with pytest.raises(NavigationError, match="404"):
            await session.navigate("https://example.com/missing")

    @pytest.mark.asyncio
    async def test_get_html(self):
        """Test HTML snapshot."""
        session, _ = make_session()
        assert "<p>hi</p>" in await session.get_html()

    @pytest.mark.asyncio
    async def test_get_html_error(self):
        """Test HTML snapshot failure."""
        session, page = make_session()
        page.content.side_effect = PlaywrightError("Target closed")

        with pytest.raises(ExtractionError):
            await session.get_html()

    @pytest.mark.asyncio
    async def test_get_accessibility_tree(self):
        """Test the CDP accessibility dump is parsed and the session detached."""
        session, page = make_session()
        cdp = MagicMock()
        cdp.send = AsyncMock(
            return_value={
                "nodes": [
                    {"nodeId": "1", "role": {"type": "role", "value": "RootWebArea"}, "childIds": ["2"]},
                    {
                        "nodeId": "2",
                        "role": {"type": "role", "value": "heading"},
                        "name": {"type": "computedString", "value": "Hi"},
                        "properties": [{"name": "level", "value": {"type": "integer", "value": 1}}],
                        "parentId": "1",
                    },
                ]
            }
        )
        cdp.detach = AsyncMock()
        page.context.new_cdp_session = AsyncMock(return_value=cdp)

        tree = await session.get_accessibility_tree()

        cdp.send.assert_awaited_once_with("Accessibility.getFullAXTree")
        cdp.detach.assert_awaited_once()
        assert tree.role is Role.ROOT
        assert tree.children[0].level == 1

    @pytest.mark.asyncio
    async def test_get_accessibility_tree_error(self):
        """Test CDP failure."""
        session, page = make_session()
        page.context.new_cdp_session = AsyncMock(side_effect=PlaywrightError("not chromium"))

        with pytest.raises(ExtractionError):
            await session.get_accessibility_tree()

    @pytest.mark.asyncio
    async def test_close_is_safe_when_not_started(self):
        """Test closing a session that never started."""
        session = BrowserSession()
        await session.close()
        with pytest.raises(RuntimeError):
            session.page
