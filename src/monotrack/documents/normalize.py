"""Normalization of externally supplied block descriptions.

Generated content is untrusted. Each entry becomes a fresh Block or is
dropped; nothing with an unrecognized kind ever reaches a page.

Policy:
- entries without a string ``content`` or a recognized ``kind`` are dropped
- ``kind`` is read from ``kind`` and falls back to ``type``
- legacy generator aliases ``h1``, ``h2`` and ``text`` map to
  heading1, heading2 and paragraph
- ``checked`` is only kept for todo blocks and only when it is literally True
- incoming ids are ignored
"""

import logging
from collections.abc import Callable, Collection, Iterable, Mapping
from typing import Any

from monotrack.models.blocks import Block, BlockKind

logger = logging.getLogger(__name__)

KIND_ALIASES: dict[str, BlockKind] = {
    "h1": BlockKind.HEADING1,
    "h2": BlockKind.HEADING2,
    "text": BlockKind.PARAGRAPH,
}


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def parse_kind(value: Any) -> BlockKind | None:
    """Map a raw kind value to a BlockKind, or None if unrecognized."""
    if isinstance(value, BlockKind):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if key in KIND_ALIASES:
        return KIND_ALIASES[key]
    try:
        return BlockKind(key)
    except ValueError:
        return None


def normalize_blocks(
    raw_blocks: Iterable[Any],
    new_id: Callable[[], str],
    allowed: Collection[BlockKind] | None = None,
) -> list[Block]:
    """Turn raw block descriptors into Blocks with fresh ids.

    Args:
        raw_blocks: Mappings or attribute objects with ``kind``/``content``/``checked``.
        new_id: Identifier factory; called once per surviving entry.
        allowed: Optional subset of kinds to accept; others are dropped.

    Returns:
        Blocks in the same relative order as their source entries.
    """
    blocks: list[Block] = []
    dropped = 0

    for entry in raw_blocks:
        if entry is None or isinstance(entry, (str, bytes, int, float)):
            dropped += 1
            continue

        kind_value = _field(entry, "kind")
        if kind_value is None:
            kind_value = _field(entry, "type")
        kind = parse_kind(kind_value)
        content = _field(entry, "content")

        if kind is None or not isinstance(content, str):
            logger.debug("Dropping malformed block descriptor: %r", entry)
            dropped += 1
            continue
        if allowed is not None and kind not in allowed:
            logger.debug("Dropping block of disallowed kind %s", kind.value)
            dropped += 1
            continue

        checked = kind == BlockKind.TODO and _field(entry, "checked") is True
        blocks.append(Block(id=new_id(), kind=kind, content=content, checked=checked))

    if dropped:
        logger.info("Dropped %d malformed generated block(s)", dropped)
    return blocks
