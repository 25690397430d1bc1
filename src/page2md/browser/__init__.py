"""Browser-backed page snapshots."""

from .protocols import PageSnapshotProvider
from .session import BrowserSession

__all__ = ["BrowserSession", "PageSnapshotProvider"]
