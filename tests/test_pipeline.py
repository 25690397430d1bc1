"""Tests for pipeline steps, the pipeline runner and PageConverter."""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from page2md.axtree import AXNode, Role
from page2md.core.converter import PageConverter, convert_blocking
from page2md.errors import ExtractionError, NavigationError, NavigationTimeoutError
from page2md.models.config import ExtractionMode, Page2MdConfig
from page2md.models.events import EventType, PipelineStage
from page2md.pipeline import ConversionPipeline, PageContext, PipelineStep
from page2md.pipeline.steps import CleanStep, ConvertStep, ExtractStep, FilterStep, NavigateStep
from page2md.postprocess import LLMPostProcessor

URL = "https://example.com/page"

PAGE_HTML = """
<html>
  <head><title>Example</title><script>alert('x')</script></head>
  <body>
    <h1>Title</h1>
    <p>Body text.</p>
    <footer><p>Footer text</p></footer>
  </body>
</html>
"""


def make_tree():
    return AXNode.of(
        "RootWebArea",
        "",
        AXNode.of("heading", "Title", level=1),
        AXNode.of(
            "list",
            "",
            AXNode.of("listitem", "a"),
            AXNode.of("listitem", "b"),
            ordered=True,
        ),
    )


def make_provider(html=PAGE_HTML, tree=None, status=200):
    provider = AsyncMock()
    provider.navigate.return_value = status
    provider.get_html.return_value = html
    provider.get_accessibility_tree.return_value = tree if tree is not None else make_tree()
    return provider


def make_steps(provider):
    return [NavigateStep(provider), ExtractStep(provider), FilterStep(), ConvertStep()]


class TestSteps:
    """Tests for individual pipeline steps."""

    def test_steps_satisfy_protocol(self):
        """Test that all steps implement PipelineStep."""
        provider = make_provider()
        post_processor = LLMPostProcessor("https://llm.test", "k")
        steps = make_steps(provider) + [CleanStep(post_processor)]

        for step in steps:
            assert isinstance(step, PipelineStep)
        assert [s.name for s in steps] == ["navigate", "extract", "filter", "convert", "clean"]

    @pytest.mark.asyncio
    async def test_navigate_records_status(self):
        """Test NavigateStep."""
        provider = make_provider(status=203)
        ctx = await NavigateStep(provider).execute(PageContext(url=URL))

        provider.navigate.assert_awaited_once_with(URL)
        assert ctx.status_code == 203
        assert ctx.stage is PipelineStage.NAVIGATED

    @pytest.mark.asyncio
    async def test_extract_html(self):
        """Test ExtractStep in HTML mode."""
        provider = make_provider()
        ctx = await ExtractStep(provider).execute(PageContext(url=URL))

        assert ctx.html == PAGE_HTML
        assert ctx.axtree is None
        assert ctx.stage is PipelineStage.EXTRACTED
        provider.get_accessibility_tree.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_extract_axtree(self):
        """Test ExtractStep in accessibility-tree mode."""
        provider = make_provider()
        ctx = await ExtractStep(provider).execute(PageContext(url=URL, mode=ExtractionMode.AXTREE))

        assert ctx.axtree is not None
        assert ctx.html is None
        provider.get_html.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_extract_empty_html_fails(self):
        """Test that a blank HTML snapshot is fatal."""
        provider = make_provider(html="   ")

        with pytest.raises(ExtractionError):
            await ExtractStep(provider).execute(PageContext(url=URL))

    @pytest.mark.asyncio
    async def test_filter_skipped_in_axtree_mode(self):
        """Test FilterStep is a no-op for accessibility trees."""
        ctx = PageContext(url=URL, mode=ExtractionMode.AXTREE, stage=PipelineStage.EXTRACTED)
        ctx = await FilterStep().execute(ctx)
        assert ctx.stage is PipelineStage.EXTRACTED

    @pytest.mark.asyncio
    async def test_filter_html(self):
        """Test FilterStep removes excluded subtrees."""
        ctx = PageContext(url=URL, html="<div><script>x()</script><p>y</p></div>")
        ctx = await FilterStep().execute(ctx)

        assert ctx.html == "<div><p>y</p></div>"
        assert ctx.stage is PipelineStage.FILTERED

    @pytest.mark.asyncio
    async def test_convert_without_content_fails(self):
        """Test ConvertStep with nothing extracted."""
        with pytest.raises(ExtractionError):
            await ConvertStep().execute(PageContext(url=URL))
        with pytest.raises(ExtractionError):
            await ConvertStep().execute(PageContext(url=URL, mode=ExtractionMode.AXTREE))

    @pytest.mark.asyncio
    async def test_clean_keeps_raw_markdown(self):
        """Test CleanStep stores the pre-cleanup text."""
        post_processor = LLMPostProcessor("https://llm.test", "k")
        ctx = PageContext(url=URL, markdown="# Raw\n")

        with patch.object(LLMPostProcessor, "_request", AsyncMock(return_value="# Clean\n")):
            ctx = await CleanStep(post_processor).execute(ctx)

        assert ctx.raw_markdown == "# Raw\n"
        assert ctx.markdown == "# Clean\n"
        assert ctx.stage is PipelineStage.CLEANED


class TestConversionPipeline:
    """Tests for ConversionPipeline."""

    @pytest.mark.asyncio
    async def test_html_mode(self):
        """Test a full HTML-mode run."""
        events = []
        pipeline = ConversionPipeline(steps=make_steps(make_provider()))

        ctx = await pipeline.execute(URL, emit=events.append)

        assert not ctx.failed
        assert ctx.stage is PipelineStage.DONE
        assert "# Title" in ctx.markdown
        assert "Body text." in ctx.markdown
        assert "alert" not in ctx.markdown
        assert "Footer text" not in ctx.markdown
        assert [e.type for e in events] == [
            EventType.STARTED,
            EventType.FETCH_STARTED,
            EventType.FETCH_COMPLETED,
            EventType.CONTENT_EXTRACTED,
            EventType.CONTENT_FILTERED,
            EventType.PAGE_CONVERTED,
            EventType.COMPLETED,
        ]

    @pytest.mark.asyncio
    async def test_axtree_mode(self):
        """Test a full accessibility-tree run."""
        pipeline = ConversionPipeline(steps=make_steps(make_provider()))

        ctx = await pipeline.execute(URL, ExtractionMode.AXTREE)

        assert ctx.stage is PipelineStage.DONE
        assert ctx.markdown == "# Title\n\n1. a\n2. b\n"

    @pytest.mark.asyncio
    async def test_empty_axtree_succeeds(self):
        """Test that an empty accessibility tree gives empty Markdown."""
        provider = make_provider(tree=AXNode(role=Role.ROOT))
        pipeline = ConversionPipeline(steps=make_steps(provider))

        ctx = await pipeline.execute(URL, ExtractionMode.AXTREE)

        assert not ctx.failed
        assert ctx.markdown == ""

    @pytest.mark.asyncio
    async def test_navigation_timeout_stops_pipeline(self):
        """Test that a load timeout fails the run before extraction."""
        events = []
        provider = make_provider()
        provider.navigate.side_effect = NavigationTimeoutError(f"Timed out loading {URL}")
        pipeline = ConversionPipeline(steps=make_steps(provider))

        ctx = await pipeline.execute(URL, emit=events.append)

        assert ctx.failed
        assert isinstance(ctx.exception, NavigationTimeoutError)
        assert isinstance(ctx.exception, NavigationError)
        assert ctx.error.startswith("navigate:")
        assert ctx.markdown is None
        provider.get_html.assert_not_awaited()
        assert events[-1].type is EventType.FETCH_FAILED
        assert events[-1].is_error

    @pytest.mark.asyncio
    async def test_empty_html_fails(self):
        """Test that an empty document fails at extraction."""
        pipeline = ConversionPipeline(steps=make_steps(make_provider(html="")))

        ctx = await pipeline.execute(URL)

        assert ctx.failed
        assert isinstance(ctx.exception, ExtractionError)
        assert ctx.error.startswith("extract:")

    @pytest.mark.asyncio
    async def test_html_filtered_to_nothing_fails(self):
        """Test that a page with only excluded content fails at conversion."""
        html = "<html><head><title>T</title></head><body><script>app()</script></body></html>"
        pipeline = ConversionPipeline(steps=make_steps(make_provider(html=html)))

        ctx = await pipeline.execute(URL)

        assert ctx.failed
        assert isinstance(ctx.exception, ExtractionError)
        assert ctx.error.startswith("convert:")

    @pytest.mark.asyncio
    async def test_add_step(self):
        """Test the fluent step API."""
        provider = make_provider()
        pipeline = ConversionPipeline(steps=[]).add_step(NavigateStep(provider)).add_step(ExtractStep(provider))

        ctx = await pipeline.execute(URL)

        assert len(pipeline.steps) == 2
        assert ctx.stage is PipelineStage.DONE
        assert ctx.markdown is None


class TestPageConverter:
    """Tests for PageConverter."""

    @pytest.mark.asyncio
    async def test_convert_with_provider(self):
        """Test conversion with an injected snapshot provider."""
        config = Page2MdConfig(url=URL, conversion={"mode": "axtree"})

        async with PageConverter(config, provider=make_provider()) as converter:
            ctx = await converter.convert()

        assert ctx.url == URL
        assert ctx.markdown == "# Title\n\n1. a\n2. b\n"

    @pytest.mark.asyncio
    async def test_step_selection(self):
        """Test which steps run per configuration."""
        provider = make_provider()

        async with PageConverter(Page2MdConfig(), provider=provider) as converter:
            names = [s.name for s in converter.build_pipeline().steps]
        assert names == ["navigate", "extract", "filter", "convert"]

        async with PageConverter(Page2MdConfig(conversion={"mode": "axtree"}), provider=provider) as converter:
            names = [s.name for s in converter.build_pipeline().steps]
        assert names == ["navigate", "extract", "convert"]

        config = Page2MdConfig(llm={"endpoint": "https://llm.test", "api_key": "k"})
        async with PageConverter(config, provider=provider) as converter:
            names = [s.name for s in converter.build_pipeline().steps]
        assert names == ["navigate", "extract", "filter", "convert", "clean"]

    @pytest.mark.asyncio
    async def test_renderer_options_from_config(self):
        """Test that conversion settings reach the renderer."""
        nested = AXNode.of("list", "", AXNode.of("listitem", "b"))
        tree = AXNode.of(
            "RootWebArea",
            "",
            AXNode.of("list", "", AXNode.of("listitem", "", AXNode.of("StaticText", "a"), nested)),
            AXNode.of("contentinfo", "", AXNode.of("paragraph", "footer")),
        )
        config = Page2MdConfig(
            url=URL,
            conversion={"mode": "axtree", "indent_width": 4, "include_low_priority": False},
        )

        async with PageConverter(config, provider=make_provider(tree=tree)) as converter:
            ctx = await converter.convert()

        assert ctx.markdown == "- a\n    - b\n"

    @pytest.mark.asyncio
    async def test_cleanup_failure_keeps_markdown(self):
        """Test that an LLM failure does not fail the run."""
        events = []
        config = Page2MdConfig(
            url=URL,
            conversion={"mode": "axtree"},
            llm={"endpoint": "https://llm.test/v1/chat/completions", "api_key": "k"},
        )

        with patch.object(
            LLMPostProcessor,
            "_request",
            AsyncMock(side_effect=aiohttp.ClientConnectionError("refused")),
        ):
            async with PageConverter(config, provider=make_provider()) as converter:
                ctx = await converter.convert(emit=events.append)

        assert ctx.stage is PipelineStage.DONE
        assert ctx.markdown == "# Title\n\n1. a\n2. b\n"
        assert ctx.raw_markdown == ctx.markdown
        types = [e.type for e in events]
        assert EventType.CLEANUP_STARTED in types
        assert EventType.CLEANUP_COMPLETED in types

    @pytest.mark.asyncio
    async def test_convert_url_override(self):
        """Test passing the URL to convert()."""
        provider = make_provider()

        async with PageConverter(Page2MdConfig(), provider=provider) as converter:
            ctx = await converter.convert("https://other.test/")

        provider.navigate.assert_awaited_once_with("https://other.test/")
        assert ctx.url == "https://other.test/"

    @pytest.mark.asyncio
    async def test_convert_requires_url(self):
        """Test convert() without any URL."""
        async with PageConverter(Page2MdConfig(), provider=make_provider()) as converter:
            with pytest.raises(ValueError):
                await converter.convert()

    def test_build_pipeline_requires_start(self):
        """Test build_pipeline outside the context manager."""
        with pytest.raises(RuntimeError):
            PageConverter(Page2MdConfig(url=URL)).build_pipeline()

    @pytest.mark.asyncio
    async def test_convert_blocking_rejects_running_loop(self):
        """Test convert_blocking inside an event loop."""
        with pytest.raises(RuntimeError, match="async context"):
            convert_blocking(URL)
