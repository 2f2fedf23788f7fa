"""Pure function deriving a page's completion percentage from its blocks."""

from collections.abc import Iterable

from monotrack.models.blocks import Block, BlockKind


def compute_progress(blocks: Iterable[Block], current: int = 0) -> int:
    """Return the percentage of checked todo blocks, rounded half up.

    A block list with no todos keeps ``current`` unchanged, so a manually set
    progress survives edits that never introduce a todo.

    Args:
        blocks: The page's blocks, in any order.
        current: The page's existing progress value.

    Returns:
        Integer in [0, 100].
    """
    total = 0
    done = 0
    for block in blocks:
        if block.kind != BlockKind.TODO:
            continue
        total += 1
        if block.checked:
            done += 1

    if total == 0:
        return current

    # round(100 * done / total) with halves rounded up, in integer arithmetic
    return (200 * done + total) // (2 * total)
