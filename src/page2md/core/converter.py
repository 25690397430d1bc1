"""Main PageConverter class tying browser, pipeline and config together."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Callable

from ..axtree.renderer import AXTreeRenderer
from ..browser.protocols import PageSnapshotProvider
from ..browser.session import BrowserSession
from ..conversion.filter import NodeFilter
from ..conversion.markdown import HtmlToMarkdown
from ..models.config import ExtractionMode, Page2MdConfig
from ..models.events import FetchEvent
from ..pipeline.base import ConversionPipeline, PageContext, PipelineStep
from ..pipeline.steps import CleanStep, ConvertStep, ExtractStep, FilterStep, NavigateStep
from ..postprocess.llm import LLMPostProcessor

logger = logging.getLogger(__name__)


class PageConverter:
    """
    Primary API for page2md.

    Owns the browser session for its lifetime and runs one linear
    pipeline per page: navigate, extract, filter (HTML mode only),
    convert, and clean (only when an LLM endpoint is configured).

    Example:
        config = Page2MdConfig(
            url="https://example.com",
            conversion={"mode": "axtree"},
        )

        async with PageConverter(config) as converter:
            ctx = await converter.convert()

        if ctx.failed:
            print(f"Error: {ctx.error}")
        else:
            print(ctx.markdown)
    """

    def __init__(self, config: Page2MdConfig, provider: PageSnapshotProvider | None = None):
        """
        Initialize the converter.

        Args:
            config: Configuration for the conversion
            provider: Snapshot provider to use instead of launching Chromium
        """
        self.config = config
        self._provider = provider
        self._session: BrowserSession | None = None

    async def __aenter__(self) -> PageConverter:
        """Launch the browser unless a provider was supplied."""
        if self._provider is None:
            browser = self.config.browser
            self._session = BrowserSession(
                headless=browser.headless,
                timeout=browser.timeout,
                wait_until=browser.wait_until,
                user_agent=browser.user_agent,
                viewport=(browser.viewport_width, browser.viewport_height),
            )
            await self._session.__aenter__()
            self._provider = self._session
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._session is not None:
            await self._session.__aexit__(exc_type, exc_val, exc_tb)
            self._session = None
            self._provider = None

    def build_pipeline(self) -> ConversionPipeline:
        """Assemble the step list for the configured mode."""
        if self._provider is None:
            raise RuntimeError("PageConverter not started. Use 'async with' context.")

        conversion = self.config.conversion
        steps: list[PipelineStep] = [
            NavigateStep(self._provider),
            ExtractStep(self._provider),
        ]

        if conversion.mode is ExtractionMode.HTML:
            steps.append(
                FilterStep(
                    NodeFilter(
                        exclude_tags=conversion.exclude_tags,
                        main_content_only=conversion.main_content_only,
                    )
                )
            )

        steps.append(
            ConvertStep(
                converter=HtmlToMarkdown(),
                renderer=AXTreeRenderer(
                    indent_width=conversion.indent_width,
                    include_low_priority=conversion.include_low_priority,
                    main_content_only=conversion.main_content_only,
                ),
            )
        )

        llm = self.config.llm
        if llm.enabled:
            steps.append(
                CleanStep(
                    LLMPostProcessor(
                        endpoint=llm.endpoint,  # type: ignore[arg-type]
                        api_key=llm.api_key,  # type: ignore[arg-type]
                        model=llm.model,
                        timeout=llm.timeout,
                    )
                )
            )

        return ConversionPipeline(steps=steps)

    async def convert(
        self,
        url: str | None = None,
        emit: Callable[[FetchEvent], None] | None = None,
    ) -> PageContext:
        """
        Convert one page.

        Args:
            url: Page to convert (defaults to config.url)
            emit: Optional callback for pipeline events

        Returns:
            Final PageContext; ``ctx.markdown`` holds the document on success
        """
        target = url or self.config.url
        if not target:
            raise ValueError("No URL to convert")

        logger.info(f"Converting {target} ({self.config.conversion.mode.value} mode)")
        return await self.build_pipeline().execute(target, self.config.conversion.mode, emit)


def convert_blocking(
    url: str,
    on_event: Callable[[FetchEvent], None] | None = None,
    **kwargs: object,
) -> PageContext:
    """
    Blocking conversion with optional event callback.

    Convenience wrapper for sync code. Do not call from within a running
    event loop; use ``async with PageConverter(...)`` there instead.

    Args:
        url: The URL to convert
        on_event: Optional callback for events
        **kwargs: Additional config options passed to Page2MdConfig

    Returns:
        Final PageContext

    Example:
        ctx = convert_blocking("https://example.com", conversion={"mode": "axtree"})
        print(ctx.markdown)
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("convert_blocking() called from async context. Use 'async with PageConverter()' instead.")

    config = Page2MdConfig(url=url, **kwargs)  # type: ignore[arg-type]

    async def _run() -> PageContext:
        async with PageConverter(config) as converter:
            return await converter.convert(emit=on_event)

    return asyncio.run(_run())
