"""Pipeline step for the optional LLM cleanup."""

import logging
from typing import Optional

from ...models.events import EventType, FetchEvent, PipelineStage
from ...postprocess.llm import LLMPostProcessor
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class CleanStep:
    """
    Pipeline step that runs ``ctx.markdown`` through an LLM.

    Never fails the run: the post-processor returns the input unchanged
    when cleanup does not succeed. The pre-cleanup text is kept in
    ``ctx.raw_markdown``.
    """

    name = "clean"

    def __init__(self, post_processor: LLMPostProcessor):
        self._post_processor = post_processor

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        markdown = ctx.markdown or ""
        ctx.raw_markdown = markdown

        if emit:
            emit(
                FetchEvent(
                    type=EventType.CLEANUP_STARTED,
                    url=ctx.url,
                    message="Cleaning Markdown with LLM",
                    stage=ctx.stage,
                )
            )

        ctx.markdown = await self._post_processor.clean(markdown)
        ctx.stage = PipelineStage.CLEANED

        if emit:
            emit(
                FetchEvent(
                    type=EventType.CLEANUP_COMPLETED,
                    url=ctx.url,
                    message=f"Cleaned Markdown: {len(markdown)} -> {len(ctx.markdown)} chars",
                    stage=ctx.stage,
                    bytes_processed=len(ctx.markdown),
                )
            )

        return ctx
