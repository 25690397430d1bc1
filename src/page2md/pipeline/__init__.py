"""Pipeline architecture for page conversion."""

from .base import ConversionPipeline, EventEmitter, PageContext, PipelineStep

__all__ = ["ConversionPipeline", "EventEmitter", "PageContext", "PipelineStep"]
