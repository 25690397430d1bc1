"""Post-processing of converted Markdown."""

from .llm import DEFAULT_SYSTEM_PROMPT, LLMPostProcessor, clean_markdown

__all__ = ["DEFAULT_SYSTEM_PROMPT", "LLMPostProcessor", "clean_markdown"]
