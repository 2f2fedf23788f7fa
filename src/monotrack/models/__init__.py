"""Data models and enums for pages and blocks."""

from monotrack.models.blocks import Block, BlockKind
from monotrack.models.ids import IdAllocator
from monotrack.models.pages import Page, PageKind, default_emoji

__all__ = [
    "Block",
    "BlockKind",
    "IdAllocator",
    "Page",
    "PageKind",
    "default_emoji",
]
