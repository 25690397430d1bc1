"""Pipeline step that snapshots the loaded page."""

import logging
from typing import Optional

from ...browser.protocols import PageSnapshotProvider
from ...errors import ExtractionError
from ...models.config import ExtractionMode
from ...models.events import EventType, FetchEvent, PipelineStage
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class ExtractStep:
    """
    Pipeline step that reads the HTML or the accessibility tree.

    Reads ``ctx.mode``; writes ``ctx.html`` or ``ctx.axtree``. An empty
    HTML document is fatal, while an empty accessibility tree is passed on
    and simply renders to empty Markdown.
    """

    name = "extract"

    def __init__(self, provider: PageSnapshotProvider):
        self._provider = provider

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.mode is ExtractionMode.AXTREE:
            ctx.axtree = await self._provider.get_accessibility_tree()
            size = sum(1 for _ in ctx.axtree.walk())
            message = f"Extracted accessibility tree with {size} nodes"
        else:
            html = await self._provider.get_html()
            if not html or not html.strip():
                raise ExtractionError(f"No HTML content returned for {ctx.url}")
            ctx.html = html
            size = len(html)
            message = f"Extracted {size} chars of HTML"

        ctx.stage = PipelineStage.EXTRACTED

        if emit:
            emit(
                FetchEvent(
                    type=EventType.CONTENT_EXTRACTED,
                    url=ctx.url,
                    message=message,
                    stage=ctx.stage,
                    bytes_processed=size,
                )
            )

        logger.debug(f"{message} from {ctx.url}")
        return ctx
