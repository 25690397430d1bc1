"""Core conversion API."""

from .converter import PageConverter, convert_blocking

__all__ = ["PageConverter", "convert_blocking"]
