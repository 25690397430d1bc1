"""Pipeline steps for page conversion."""

from .clean import CleanStep
from .convert import ConvertStep
from .extract import ExtractStep
from .filter import FilterStep
from .navigate import NavigateStep

__all__ = [
    "CleanStep",
    "ConvertStep",
    "ExtractStep",
    "FilterStep",
    "NavigateStep",
]
