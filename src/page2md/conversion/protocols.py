"""Protocol definitions for content conversion."""

from typing import Protocol

from ..axtree.nodes import AXNode


class MarkdownConverter(Protocol):
    """
    Protocol for converting filtered HTML to Markdown.

    Implementations must not raise on malformed input; they degrade to
    best-effort text instead.
    """

    def convert(self, html: str, url: str = "") -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            url: Source URL (for resolving relative links)

        Returns:
            Markdown string
        """
        ...


class TreeRenderer(Protocol):
    """Protocol for rendering an accessibility tree to Markdown."""

    def render(self, root: AXNode) -> str:
        """
        Render a tree.

        Args:
            root: Root accessibility node

        Returns:
            Markdown string
        """
        ...
