"""Content conversion for page2md (HTML filtering, HTML to Markdown)."""

from .filter import NodeFilter
from .markdown import HtmlToMarkdown
from .protocols import MarkdownConverter, TreeRenderer

__all__ = [
    # Protocols
    "MarkdownConverter",
    "TreeRenderer",
    # Implementations
    "NodeFilter",
    "HtmlToMarkdown",
]
