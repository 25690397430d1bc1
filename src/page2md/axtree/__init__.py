"""Accessibility tree model, CDP parsing and Markdown rendering."""

from .nodes import AXNode, Role
from .parser import parse_cdp_tree
from .renderer import AXTreeRenderer, ConversionContext, axtree_to_markdown, render_inline

__all__ = [
    "AXNode",
    "Role",
    "parse_cdp_tree",
    "AXTreeRenderer",
    "ConversionContext",
    "axtree_to_markdown",
    "render_inline",
]
