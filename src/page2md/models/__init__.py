"""page2md configuration and event models."""

from .config import (
    DEFAULT_EXCLUDE_TAGS,
    BrowserConfig,
    ConversionConfig,
    ExtractionMode,
    LLMConfig,
    Page2MdConfig,
)
from .events import EventType, FetchEvent, PipelineStage

__all__ = [
    # Config
    "DEFAULT_EXCLUDE_TAGS",
    "BrowserConfig",
    "ConversionConfig",
    "ExtractionMode",
    "LLMConfig",
    "Page2MdConfig",
    # Events
    "EventType",
    "FetchEvent",
    "PipelineStage",
]
