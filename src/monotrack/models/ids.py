"""Identifier allocation for pages and blocks.

Ids are ``<prefix>-<n>``: a random per-allocator prefix plus a monotonic
counter, so two ids from the same allocator can never collide.
"""

import itertools
import uuid


class IdAllocator:
    """Issues process-unique opaque identifiers."""

    def __init__(self, prefix: str | None = None) -> None:
        self.prefix = prefix or uuid.uuid4().hex[:8]
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter):x}"
