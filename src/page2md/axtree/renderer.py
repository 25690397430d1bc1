"""Accessibility tree to Markdown conversion."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Callable

from .nodes import LANDMARK_ROLES, LOW_PRIORITY_ROLES, AXNode, Role

logger = logging.getLogger(__name__)

# Children of these roles are separated by a space when flattened inline.
_BLOCK_ROLES = frozenset({Role.HEADING, Role.PARAGRAPH, Role.LIST, Role.LIST_ITEM, Role.SEPARATOR})

# Roles that fall back to their accessible name when they have no children.
_NAMED_ROLES = frozenset({Role.TEXT, Role.HEADING, Role.PARAGRAPH, Role.LIST_ITEM})


def _collapse(text: str) -> str:
    """Join words with single spaces."""
    return " ".join(text.split())


def _inline(node: AXNode, skip_lists: bool) -> str:
    if node.ignored:
        return "".join(_inline(child, skip_lists) for child in node.children)

    role = node.role
    if role is Role.LIST_MARKER:
        return ""
    if role is Role.LIST and skip_lists:
        return ""
    if role is Role.TEXT and node.name:
        return node.name
    if role is Role.IMAGE:
        return node.value or node.name or ""
    if role is Role.LINK:
        text = _collapse(node.name) or _children_text(node, skip_lists)
        if not text:
            return ""
        return f"[{text}]({node.value})" if node.value else text
    if role is Role.BUTTON:
        text = _collapse(node.name) or _children_text(node, skip_lists)
        return f"[{text}](button)" if text else ""

    text = _children_text(node, skip_lists, collapse=False)
    if not text.strip() and role in _NAMED_ROLES:
        return node.name
    return text


def _children_text(node: AXNode, skip_lists: bool, collapse: bool = True) -> str:
    pieces = []
    for child in node.children:
        piece = _inline(child, skip_lists)
        if child.role in _BLOCK_ROLES and not child.ignored:
            piece = f" {piece} "
        pieces.append(piece)
    text = "".join(pieces)
    return _collapse(text) if collapse else text


def render_inline(node: AXNode, skip_lists: bool = False) -> str:
    """
    Flatten a node to a single line of Markdown.

    Links become ``[text](url)``, buttons ``[text](button)``, images their
    alt text, and everything else the concatenation of its children.

    Example:
        >>> render_inline(AXNode.of("link", "Home", value="https://x.test"))
        '[Home](https://x.test)'
    """
    return _collapse(_inline(node, skip_lists))


@dataclass
class _Block:
    text: str
    low_priority: bool = False


@dataclass
class ConversionContext:
    """
    State threaded through one conversion.

    Inline output (text, links, buttons, images) accumulates in ``pending``
    until the next block boundary turns it into a paragraph. A fresh context
    is created per ``render`` call.
    """

    indent_width: int = 2
    include_low_priority: bool = True
    list_depth: int = 0
    block_ended: bool = True
    low_priority_depth: int = 0
    pending: list[str] = field(default_factory=list)
    blocks: list[_Block] = field(default_factory=list)

    def add_inline(self, text: str) -> None:
        if not text:
            return
        if not self.pending:
            self.pending.append("")
        self.pending[-1] += text
        self.block_ended = False

    def break_line(self) -> None:
        """Start a new line within the pending paragraph."""
        if not self.block_ended and self.pending and self.pending[-1].strip():
            self.pending.append("")

    def end_block(self) -> None:
        lines = [line for line in (_collapse(p) for p in self.pending) if line]
        self.pending = []
        if lines:
            self._append("\n".join(lines))
        self.block_ended = True

    def add_block(self, text: str) -> None:
        self.end_block()
        if text.strip():
            self._append(text)

    def _append(self, text: str) -> None:
        self.blocks.append(_Block(text, low_priority=self.low_priority_depth > 0))

    def finish(self) -> str:
        """Close the pending paragraph and join blocks with one blank line."""
        self.end_block()
        kept = [b.text for b in self.blocks if self.include_low_priority or not b.low_priority]
        if not kept:
            return ""
        return "\n\n".join(kept) + "\n"


class AXTreeRenderer:
    """
    Converts an accessibility tree into Markdown.

    Nodes are dispatched on their role. Roles without a handler (generic
    containers, landmarks, anything unrecognised) are transparent: their
    children are rendered in place with no markup of their own, so
    unfamiliar roles never drop content and never raise.

    Example:
        renderer = AXTreeRenderer(indent_width=4)
        markdown = renderer.render(parse_cdp_tree(payload))
    """

    def __init__(
        self,
        indent_width: int = 2,
        include_low_priority: bool = True,
        main_content_only: bool = False,
    ):
        """
        Initialize the renderer.

        Args:
            indent_width: Spaces per nested list level
            include_low_priority: Render footer/banner regions
            main_content_only: Only render main/article regions when present
        """
        self._indent_width = indent_width
        self._include_low_priority = include_low_priority
        self._main_content_only = main_content_only
        self._handlers: dict[Role, Callable[[AXNode, ConversionContext], None]] = {
            Role.HEADING: self._render_heading,
            Role.PARAGRAPH: self._render_paragraph,
            Role.TEXT: self._render_inline,
            Role.LINK: self._render_inline,
            Role.BUTTON: self._render_inline,
            Role.IMAGE: self._render_inline,
            Role.LIST: self._render_list,
            Role.LIST_ITEM: self._render_list_item,
            Role.LIST_MARKER: self._render_nothing,
            Role.SEPARATOR: self._render_separator,
        }

    def new_context(self) -> ConversionContext:
        return ConversionContext(
            indent_width=self._indent_width,
            include_low_priority=self._include_low_priority,
        )

    def render(self, root: AXNode) -> str:
        """
        Render a tree to a Markdown document.

        Args:
            root: Root of the accessibility tree

        Returns:
            Markdown ending in a single newline, or "" for an empty tree
        """
        ctx = self.new_context()
        try:
            for node in self._scope(root):
                self.render_node(node, ctx)
            markdown = ctx.finish()
        except RecursionError:
            logger.warning("Accessibility tree too deep to render with structure, flattening to plain text")
            return _flatten(root)
        logger.debug(f"Rendered accessibility tree to {len(markdown)} chars in {len(ctx.blocks)} blocks")
        return markdown

    def render_node(self, node: AXNode, ctx: ConversionContext) -> None:
        if node.ignored:
            self._render_container(node, ctx)
            return
        handler = self._handlers.get(node.role, self._render_container)
        handler(node, ctx)

    def _scope(self, root: AXNode) -> list[AXNode]:
        if not self._main_content_only:
            return [root]
        landmarks = list(_outermost(root, LANDMARK_ROLES))
        if not landmarks:
            logger.debug("No main/article landmark found, rendering whole tree")
            return [root]
        return landmarks

    def _render_container(self, node: AXNode, ctx: ConversionContext) -> None:
        low_priority = node.role in LOW_PRIORITY_ROLES and not node.ignored
        if low_priority:
            ctx.end_block()
            ctx.low_priority_depth += 1

        ctx.break_line()
        for child in node.children:
            self.render_node(child, ctx)
        ctx.break_line()

        if low_priority:
            ctx.end_block()
            ctx.low_priority_depth -= 1

    def _render_heading(self, node: AXNode, ctx: ConversionContext) -> None:
        text = render_inline(node)
        if not text:
            return
        level = max(1, min(6, node.level or 1))
        ctx.add_block(f"{'#' * level} {text}")

    def _render_paragraph(self, node: AXNode, ctx: ConversionContext) -> None:
        ctx.add_block(render_inline(node))

    def _render_inline(self, node: AXNode, ctx: ConversionContext) -> None:
        # Edge spaces separate sibling runs; end_block collapses each line
        ctx.add_inline(_inline(node, skip_lists=False))

    def _render_list_item(self, node: AXNode, ctx: ConversionContext) -> None:
        """An item outside any list: its text inline, nested lists as blocks."""
        ctx.add_inline(_inline(node, skip_lists=True))
        for nested in _outermost(node, {Role.LIST}, include_self=False):
            self._render_list(nested, ctx)

    def _render_nothing(self, node: AXNode, ctx: ConversionContext) -> None:
        return None

    def _render_separator(self, node: AXNode, ctx: ConversionContext) -> None:
        ctx.add_block("---")

    def _render_list(self, node: AXNode, ctx: ConversionContext) -> None:
        ctx.add_block("\n".join(self._list_lines(node, ctx)))

    def _list_lines(self, node: AXNode, ctx: ConversionContext) -> list[str]:
        indent = " " * (ctx.indent_width * ctx.list_depth)
        lines: list[str] = []
        number = 0

        for item in _list_items(node):
            if item.role is Role.LIST:
                nested = [item]
                text = ""
            else:
                nested = list(_outermost(item, {Role.LIST}, include_self=False))
                text = render_inline(item, skip_lists=True)

            if text:
                number += 1
                marker = f"{number}." if node.ordered else "-"
                lines.append(f"{indent}{marker} {text}")

            ctx.list_depth += 1
            try:
                for sub_list in nested:
                    lines.extend(self._list_lines(sub_list, ctx))
            finally:
                ctx.list_depth -= 1

        return lines


def _outermost(node: AXNode, roles: frozenset[Role] | set[Role], include_self: bool = True) -> Iterator[AXNode]:
    """Yield the highest descendants with one of ``roles``, without descending into them."""
    if include_self and node.role in roles and not node.ignored:
        yield node
        return
    for child in node.children:
        yield from _outermost(child, roles)


def _contains_item(node: AXNode) -> bool:
    for child in node.children:
        if child.role is Role.LIST_ITEM and not child.ignored:
            return True
        if child.role is not Role.LIST and child.is_container and _contains_item(child):
            return True
    return False


def _list_items(node: AXNode) -> Iterator[AXNode]:
    """
    Yield the entries of a list.

    Wrappers between the list and its items are looked through. Children
    that are neither items nor wrappers of items are yielded as-is and
    rendered as items of their own.
    """
    for child in node.children:
        if child.role is Role.LIST_MARKER:
            continue
        if child.role is Role.LIST_ITEM and not child.ignored:
            yield child
        elif child.role is not Role.LIST and child.is_container and _contains_item(child):
            yield from _list_items(child)
        else:
            yield child


def _flatten(root: AXNode) -> str:
    """Plain text of every leaf, in document order, without recursion."""
    pieces = [_inline(node, skip_lists=False) for node in root.walk() if not node.children and not node.ignored]
    text = _collapse(" ".join(pieces))
    return text + "\n" if text else ""


def axtree_to_markdown(root: AXNode, **options: object) -> str:
    """Render ``root`` with a one-off AXTreeRenderer built from ``options``."""
    return AXTreeRenderer(**options).render(root)  # type: ignore[arg-type]
