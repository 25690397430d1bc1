"""Base classes for the conversion pipeline."""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, runtime_checkable

from ..axtree.nodes import AXNode
from ..models.config import ExtractionMode
from ..models.events import EventType, FetchEvent, PipelineStage

# Type alias for event emitter function
EventEmitter = Callable[[FetchEvent], None]


@dataclass
class PageContext:
    """
    Context object passed through pipeline steps.

    Contains all state for converting a single page, accumulated
    as it moves through the pipeline.

    Attributes:
        url: The URL being converted
        mode: Whether the DOM or the accessibility tree is converted
        stage: Last state the page reached
        html: Page HTML (HTML mode; filtered after the filter step)
        axtree: Accessibility tree root (AXTree mode)
        markdown: Converted (and possibly cleaned) Markdown
        raw_markdown: Markdown before LLM cleanup, when cleanup ran
        error: Error message if a step failed
        exception: The exception that stopped the pipeline
    """

    url: str
    mode: ExtractionMode = ExtractionMode.HTML
    stage: PipelineStage = PipelineStage.IDLE

    # Content (accumulated through pipeline)
    html: Optional[str] = None
    axtree: Optional[AXNode] = None
    markdown: Optional[str] = None
    raw_markdown: Optional[str] = None

    status_code: Optional[int] = None

    # Status
    error: Optional[str] = None
    exception: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.stage is PipelineStage.FAILED


@runtime_checkable
class PipelineStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a PageContext, processes it, and returns the
    (possibly modified) context, advancing ``ctx.stage``.

    Error Handling Contract:
    - For fatal failures: raise an exception (NavigationError, ExtractionError, ...)
    - Recoverable problems are handled inside the step
    - The pipeline catches exceptions, marks the context failed and stops

    Example implementation:
        class UppercaseStep:
            name = "uppercase"

            async def execute(
                self,
                ctx: PageContext,
                emit: Optional[EventEmitter] = None
            ) -> PageContext:
                ctx.markdown = (ctx.markdown or "").upper()
                return ctx
    """

    name: str

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The page context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) page context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Pipeline for converting a single page through multiple steps.

    Steps run in order, once each. If a step raises, the error is
    captured on the context, the stage becomes FAILED and processing
    stops. There are no retries.

    Example:
        pipeline = ConversionPipeline(steps=[
            NavigateStep(session),
            ExtractStep(session),
            FilterStep(NodeFilter()),
            ConvertStep(),
        ])

        ctx = await pipeline.execute(url, ExtractionMode.HTML, emit=log_event)
        if ctx.failed:
            logger.error(f"Failed: {ctx.error}")
        else:
            print(ctx.markdown)
    """

    steps: list[PipelineStep]

    async def execute(
        self,
        url: str,
        mode: ExtractionMode = ExtractionMode.HTML,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute the pipeline for a URL.

        Args:
            url: The URL to convert
            mode: Extraction mode
            emit: Optional callback for emitting events

        Returns:
            PageContext with final state (check ``failed``/``error`` for status)
        """
        ctx = PageContext(url=url, mode=mode)

        if emit:
            emit(FetchEvent(type=EventType.STARTED, url=url, message=f"Converting {url}", stage=ctx.stage))

        for step in self.steps:
            try:
                ctx = await step.execute(ctx, emit)
            except Exception as e:
                ctx.error = f"{step.name}: {e}"
                ctx.exception = e
                ctx.stage = PipelineStage.FAILED

                if emit:
                    emit(
                        FetchEvent(
                            type=EventType.FETCH_FAILED,
                            url=url,
                            error=ctx.error,
                            stage=ctx.stage,
                        )
                    )
                return ctx

        ctx.stage = PipelineStage.DONE
        if emit:
            emit(
                FetchEvent(
                    type=EventType.COMPLETED,
                    url=url,
                    message=f"Converted {url}",
                    stage=ctx.stage,
                    bytes_processed=len(ctx.markdown or ""),
                )
            )
        return ctx

    def add_step(self, step: PipelineStep) -> "ConversionPipeline":
        """
        Add a step to the pipeline (fluent API).

        Args:
            step: The step to add

        Returns:
            Self for chaining
        """
        self.steps.append(step)
        return self
