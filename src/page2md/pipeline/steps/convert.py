"""Pipeline step for conversion to Markdown."""

import logging
from typing import Optional

from ...axtree.renderer import AXTreeRenderer
from ...conversion.markdown import HtmlToMarkdown
from ...conversion.protocols import MarkdownConverter, TreeRenderer
from ...errors import ExtractionError
from ...models.config import ExtractionMode
from ...models.events import EventType, FetchEvent, PipelineStage
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class ConvertStep:
    """
    Pipeline step that converts the extracted content to Markdown.

    HTML goes through the HTML converter; an accessibility tree goes
    through the tree renderer. Writes ``ctx.markdown``.

    Example:
        step = ConvertStep(renderer=AXTreeRenderer(indent_width=4))
        ctx = await step.execute(ctx, emit=callback)
    """

    name = "convert"

    def __init__(
        self,
        converter: Optional[MarkdownConverter] = None,
        renderer: Optional[TreeRenderer] = None,
    ):
        """
        Initialize the convert step.

        Args:
            converter: HTML converter (uses default if None)
            renderer: Accessibility tree renderer (uses default if None)
        """
        self._converter = converter or HtmlToMarkdown()
        self._renderer = renderer or AXTreeRenderer()

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.mode is ExtractionMode.AXTREE:
            if ctx.axtree is None:
                raise ExtractionError("No accessibility tree to convert")
            markdown = self._renderer.render(ctx.axtree)
        else:
            if ctx.html is None:
                raise ExtractionError("No HTML content to convert")
            markdown = self._converter.convert(ctx.html, ctx.url)
            if not markdown.strip():
                raise ExtractionError(f"No content left to convert for {ctx.url}")

        ctx.markdown = markdown
        ctx.stage = PipelineStage.CONVERTED

        if emit:
            emit(
                FetchEvent(
                    type=EventType.PAGE_CONVERTED,
                    url=ctx.url,
                    message=f"Converted to {len(markdown)} chars of Markdown",
                    stage=ctx.stage,
                    bytes_processed=len(markdown),
                )
            )

        logger.debug(f"Converted {ctx.url} to {len(markdown)} chars of Markdown")
        return ctx
