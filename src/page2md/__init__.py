"""
page2md - Render a web page in Chromium and convert it to Markdown.

Usage:
    from page2md import PageConverter, Page2MdConfig

    config = Page2MdConfig(
        url="https://example.com",
        conversion={"mode": "axtree"},
    )

    async with PageConverter(config) as converter:
        ctx = await converter.convert()
        print(ctx.markdown)
"""

__version__ = "0.3.0"

from .axtree import AXNode, AXTreeRenderer, Role, axtree_to_markdown, parse_cdp_tree, render_inline
from .conversion import HtmlToMarkdown, NodeFilter
from .core.converter import PageConverter, convert_blocking
from .errors import (
    ExtractionError,
    NavigationError,
    NavigationTimeoutError,
    Page2MdError,
    PostProcessError,
)
from .models.config import (
    BrowserConfig,
    ConversionConfig,
    ExtractionMode,
    LLMConfig,
    Page2MdConfig,
)
from .models.events import EventType, FetchEvent, PipelineStage
from .postprocess import LLMPostProcessor, clean_markdown

__all__ = [
    "__version__",
    # Core
    "PageConverter",
    "convert_blocking",
    # Conversion
    "AXNode",
    "AXTreeRenderer",
    "Role",
    "axtree_to_markdown",
    "parse_cdp_tree",
    "render_inline",
    "HtmlToMarkdown",
    "NodeFilter",
    "LLMPostProcessor",
    "clean_markdown",
    # Config
    "Page2MdConfig",
    "BrowserConfig",
    "ConversionConfig",
    "ExtractionMode",
    "LLMConfig",
    # Events
    "EventType",
    "FetchEvent",
    "PipelineStage",
    # Errors
    "Page2MdError",
    "NavigationError",
    "NavigationTimeoutError",
    "ExtractionError",
    "PostProcessError",
]
