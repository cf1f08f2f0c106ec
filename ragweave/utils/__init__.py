"""Utility functions and helpers."""

from .async_utils import gather_with_concurrency, map_with_concurrency
from .text_utils import filter_models, flatten_metadata, slugify

__all__ = [
    "gather_with_concurrency",
    "map_with_concurrency",
    "filter_models",
    "flatten_metadata",
    "slugify",
]
