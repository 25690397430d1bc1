"""Protocol definitions for page snapshot providers."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..axtree.nodes import AXNode


@runtime_checkable
class PageSnapshotProvider(Protocol):
    """
    Protocol for something that loads a page and snapshots it.

    This abstraction allows for:
    - Mock implementations in tests
    - Different browser backends
    """

    async def navigate(self, url: str) -> Optional[int]:
        """
        Load a URL, blocking until it has finished loading.

        Raises:
            NavigationTimeoutError: Load signal not received in time
            NavigationError: Page could not be loaded
        """
        ...

    async def get_html(self) -> str:
        """Return the full HTML document of the loaded page."""
        ...

    async def get_accessibility_tree(self) -> AXNode:
        """Return the root of the loaded page's accessibility tree."""
        ...
