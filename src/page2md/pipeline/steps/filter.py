"""Pipeline step that removes non-content HTML subtrees."""

import logging
from typing import Optional

from ...conversion.filter import NodeFilter
from ...errors import ExtractionError
from ...models.config import ExtractionMode
from ...models.events import EventType, FetchEvent, PipelineStage
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class FilterStep:
    """
    Pipeline step that filters ``ctx.html`` in place.

    Only applies in HTML mode; in accessibility-tree mode the role
    dispatch of the renderer does the filtering and this step is a no-op.
    """

    name = "filter"

    def __init__(self, node_filter: Optional[NodeFilter] = None):
        self._filter = node_filter or NodeFilter()

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.mode is not ExtractionMode.HTML:
            return ctx

        if ctx.html is None:
            raise ExtractionError("No HTML content to filter")

        before = len(ctx.html)
        ctx.html = self._filter.filter_html(ctx.html)
        ctx.stage = PipelineStage.FILTERED

        if emit:
            emit(
                FetchEvent(
                    type=EventType.CONTENT_FILTERED,
                    url=ctx.url,
                    message=f"Filtered HTML from {before} to {len(ctx.html)} chars",
                    stage=ctx.stage,
                    bytes_processed=len(ctx.html),
                )
            )

        logger.debug(f"Filtered {ctx.url}: {before} -> {len(ctx.html)} chars")
        return ctx
