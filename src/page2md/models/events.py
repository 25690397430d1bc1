"""Event types emitted while a page moves through the pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class PipelineStage(str, Enum):
    """Linear states of a single page conversion."""

    IDLE = "idle"
    BROWSER_READY = "browser_ready"
    NAVIGATED = "navigated"
    EXTRACTED = "extracted"
    FILTERED = "filtered"
    CONVERTED = "converted"
    CLEANED = "cleaned"
    DONE = "done"
    FAILED = "failed"


class EventType(str, Enum):
    """Types of events emitted during a conversion."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"

    FETCH_STARTED = "fetch_started"
    FETCH_COMPLETED = "fetch_completed"
    FETCH_FAILED = "fetch_failed"

    CONTENT_EXTRACTED = "content_extracted"
    CONTENT_FILTERED = "content_filtered"
    PAGE_CONVERTED = "page_converted"
    CLEANUP_STARTED = "cleanup_started"
    CLEANUP_COMPLETED = "cleanup_completed"


@dataclass
class FetchEvent:
    """
    Event emitted during a conversion.

    Example:
        def on_event(event: FetchEvent) -> None:
            if event.is_error:
                print(f"Error: {event.url} - {event.error}")

        await pipeline.execute(url, emit=on_event)
    """

    type: EventType

    # Timestamp (always UTC)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    stage: Optional[PipelineStage] = None
    bytes_processed: Optional[int] = None

    @property
    def is_error(self) -> bool:
        """Check if this is an error event."""
        return self.type in (EventType.FAILED, EventType.FETCH_FAILED)
