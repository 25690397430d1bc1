"""Pipeline step that loads the target page."""

import logging
from typing import Optional

from ...browser.protocols import PageSnapshotProvider
from ...models.events import EventType, FetchEvent, PipelineStage
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class NavigateStep:
    """
    Pipeline step that navigates the browser to ``ctx.url``.

    Blocks until the page reports load-complete. NavigationError and
    NavigationTimeoutError propagate and end the run.
    """

    name = "navigate"

    def __init__(self, provider: PageSnapshotProvider):
        self._provider = provider

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        # The provider is live by the time any step runs
        ctx.stage = PipelineStage.BROWSER_READY

        if emit:
            emit(
                FetchEvent(
                    type=EventType.FETCH_STARTED,
                    url=ctx.url,
                    message=f"Loading {ctx.url}",
                    stage=ctx.stage,
                )
            )

        ctx.status_code = await self._provider.navigate(ctx.url)
        ctx.stage = PipelineStage.NAVIGATED

        if emit:
            emit(
                FetchEvent(
                    type=EventType.FETCH_COMPLETED,
                    url=ctx.url,
                    message=f"Loaded {ctx.url}",
                    stage=ctx.stage,
                )
            )

        logger.debug(f"Navigated to {ctx.url} (status={ctx.status_code})")
        return ctx
