"""Removal of non-content subtrees from an HTML document."""

import logging
from collections.abc import Iterable
from typing import Optional, TypeVar

from bs4 import BeautifulSoup, Tag

from ..models.config import DEFAULT_EXCLUDE_TAGS

logger = logging.getLogger(__name__)

# Elements that typically contain main content, in order of preference
CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
]

TreeT = TypeVar("TreeT", bound=Tag)


class NodeFilter:
    """
    Drops every subtree rooted at an excluded tag.

    The excluded element and all of its descendants are removed; siblings
    and surrounding text are left alone. Filtering is idempotent.

    Example:
        node_filter = NodeFilter()
        clean_html = node_filter.filter_html("<div><script>x()</script><p>Hi</p></div>")
        # '<div><p>Hi</p></div>'
    """

    def __init__(
        self,
        exclude_tags: Optional[Iterable[str]] = None,
        main_content_only: bool = False,
    ):
        """
        Initialize the filter.

        Args:
            exclude_tags: Tag names to drop (defaults to DEFAULT_EXCLUDE_TAGS)
            main_content_only: Keep only the main/article element when one exists
        """
        tags = DEFAULT_EXCLUDE_TAGS if exclude_tags is None else exclude_tags
        self._exclude = frozenset(t.lower() for t in tags)
        self._main_content_only = main_content_only

    @property
    def exclude_tags(self) -> frozenset:
        return self._exclude

    def parse(self, html: str) -> BeautifulSoup:
        """Parse an HTML string into a tree."""
        return BeautifulSoup(html, "html.parser")

    def filter(self, tree: TreeT) -> TreeT:
        """
        Remove excluded subtrees from ``tree`` in place.

        Args:
            tree: Parsed document or element

        Returns:
            The same tree, or an empty document when the root itself is excluded
        """
        if not isinstance(tree, BeautifulSoup) and tree.name in self._exclude:
            return BeautifulSoup("", "html.parser")  # type: ignore[return-value]

        removed = 0
        for element in tree.find_all(list(self._exclude)):
            # Descendants of an already removed element are gone with it
            if element.decomposed:
                continue
            element.decompose()
            removed += 1

        if removed:
            logger.debug(f"Removed {removed} excluded subtrees")
        return tree

    def _select_main(self, soup: BeautifulSoup) -> Optional[Tag]:
        for selector in CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element and element.get_text(strip=True):
                return element
        return None

    def filter_html(self, html: str) -> str:
        """
        Parse, optionally narrow to the main content, filter and serialize.

        Args:
            html: Raw HTML document

        Returns:
            Filtered HTML as string
        """
        soup = self.parse(html)

        if self._main_content_only:
            main = self._select_main(soup)
            if main is None:
                logger.debug("No main content element found, keeping whole document")
            else:
                soup = BeautifulSoup(str(main), "html.parser")

        return str(self.filter(soup))
