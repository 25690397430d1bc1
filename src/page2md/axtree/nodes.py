"""Accessibility tree node model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """
    Semantic roles the renderer knows how to emit.

    Anything the browser reports that is not listed in ``_ROLE_ALIASES``
    becomes ``Role.OTHER``; the raw string stays on ``AXNode.raw_role``.
    """

    ROOT = "root"
    HEADING = "heading"
    LINK = "link"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    LIST = "list"
    LIST_ITEM = "listitem"
    LIST_MARKER = "listmarker"
    BUTTON = "button"
    IMAGE = "image"
    ARTICLE = "article"
    MAIN = "main"
    FOOTER = "footer"
    BANNER = "banner"
    SEPARATOR = "separator"
    GENERIC = "generic"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Role:
        """Map a browser role string onto a known role (case-insensitive)."""
        if not raw:
            return cls.OTHER
        return _ROLE_ALIASES.get(raw.strip().lower(), cls.OTHER)


_ROLE_ALIASES: dict[str, Role] = {
    "rootwebarea": Role.ROOT,
    "webarea": Role.ROOT,
    "document": Role.ROOT,
    "heading": Role.HEADING,
    "link": Role.LINK,
    "paragraph": Role.PARAGRAPH,
    "statictext": Role.TEXT,
    "inlinetextbox": Role.TEXT,
    "text": Role.TEXT,
    "list": Role.LIST,
    "listitem": Role.LIST_ITEM,
    "listmarker": Role.LIST_MARKER,
    "button": Role.BUTTON,
    "image": Role.IMAGE,
    "img": Role.IMAGE,
    "graphics-document": Role.IMAGE,
    "article": Role.ARTICLE,
    "main": Role.MAIN,
    "contentinfo": Role.FOOTER,
    "footer": Role.FOOTER,
    "banner": Role.BANNER,
    "header": Role.BANNER,
    "separator": Role.SEPARATOR,
    "generic": Role.GENERIC,
    "none": Role.GENERIC,
    "presentation": Role.GENERIC,
    "group": Role.GENERIC,
    "section": Role.GENERIC,
    "div": Role.GENERIC,
}


# Roles that only mark a region; their children are rendered as if in place.
CONTAINER_ROLES = frozenset(
    {
        Role.ROOT,
        Role.ARTICLE,
        Role.MAIN,
        Role.FOOTER,
        Role.BANNER,
        Role.GENERIC,
        Role.OTHER,
    }
)

LANDMARK_ROLES = frozenset({Role.MAIN, Role.ARTICLE})
LOW_PRIORITY_ROLES = frozenset({Role.FOOTER, Role.BANNER})


@dataclass
class AXNode:
    """
    A node of the accessibility tree.

    Attributes:
        role: Known role, or Role.OTHER
        raw_role: Role string as reported by the browser
        name: Accessible name ("" when absent)
        value: URL for links, alt text for images
        level: Heading level
        ordered: Whether a list is numbered
        ignored: Browser marked the node as uninteresting
        node_id: Browser node id, if any
        children: Child nodes in document order
    """

    role: Role = Role.OTHER
    raw_role: str = ""
    name: str = ""
    value: Optional[str] = None
    level: Optional[int] = None
    ordered: bool = False
    ignored: bool = False
    node_id: Optional[str] = None
    children: list[AXNode] = field(default_factory=list)

    @classmethod
    def of(cls, role: str, name: str = "", *children: AXNode, **kwargs: object) -> AXNode:
        """
        Build a node from a role string.

        Example:
            AXNode.of("list", "", AXNode.of("listitem", "a"), ordered=True)
        """
        return cls(
            role=Role.parse(role),
            raw_role=role,
            name=name,
            children=list(children),
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def is_container(self) -> bool:
        return self.ignored or self.role in CONTAINER_ROLES

    def walk(self):
        """Yield this node and all descendants, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))
