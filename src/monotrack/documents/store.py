"""In-memory document store: the single owner of pages and their blocks.

Every mutation goes through a DocumentStore method. Pages and blocks are
frozen models, so the store commits a new Page copy per mutation and callers
only ever see snapshots.

Invariants held after every call:
- a page always has at least one block
- block ids are unique within a page
- progress is recomputed whenever a page's block list changes

Unknown page or block ids are silent no-ops. A delete can race an in-flight
mutation from the presentation layer, and that must never raise.
"""

import logging
from collections.abc import Callable, Collection, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import Field, TypeAdapter

from monotrack.documents.normalize import normalize_blocks
from monotrack.documents.progress import compute_progress
from monotrack.models.blocks import Block, BlockKind
from monotrack.models.ids import IdAllocator
from monotrack.models.pages import Page, PageKind, default_emoji

logger = logging.getLogger(__name__)

PAGE_FIELDS = frozenset({"title", "emoji", "kind", "progress", "blocks"})
BLOCK_FIELDS = frozenset({"kind", "content", "checked"})

_PROGRESS = TypeAdapter(Annotated[int, Field(ge=0, le=100)])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_fields(fields: dict[str, Any], allowed: frozenset[str], what: str) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise TypeError(f"Cannot update {what} field(s): {', '.join(sorted(unknown))}")


class DocumentStore:
    """Owns all pages and exposes the only mutation entry points.

    Args:
        new_id: Identifier factory shared by pages and blocks.
        clock: Returns the current timestamp (UTC). Injected for tests.
    """

    def __init__(
        self,
        new_id: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._pages: list[Page] = []  # Front is the most recently created page
        self._new_id = new_id or IdAllocator()
        self._clock = clock or _utcnow
        self._generating: dict[str, int] = {}  # page id -> outstanding calls

    # --- Queries ---

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, page_id: object) -> bool:
        return self._index(page_id) is not None

    def get_page(self, page_id: str) -> Page | None:
        """Return the current snapshot of a page, or None if unknown."""
        index = self._index(page_id)
        return None if index is None else self._pages[index]

    def list_pages(self, kind: PageKind | None = None) -> list[Page]:
        """Return pages, optionally filtered by kind, most recently updated first."""
        pages = [p for p in self._pages if kind is None or p.kind == kind]
        return sorted(pages, key=lambda p: p.updated_at, reverse=True)

    def is_generating(self, page_id: str) -> bool:
        """True while a content generation call is outstanding for the page."""
        return self._generating.get(page_id, 0) > 0

    @contextmanager
    def generating(self, page_id: str) -> Iterator[None]:
        """Mark a page as having generation in progress for the duration of the block.

        Advisory only: nothing is locked, and mutations proceed as normal.
        """
        self._generating[page_id] = self._generating.get(page_id, 0) + 1
        try:
            yield
        finally:
            remaining = self._generating.get(page_id, 0) - 1
            if remaining > 0:
                self._generating[page_id] = remaining
            else:
                self._generating.pop(page_id, None)

    # --- Page operations ---

    def create_page(self, kind: PageKind = PageKind.PROJECT) -> Page:
        """Create a page seeded with one empty heading1 block and put it first."""
        kind = PageKind(kind)
        now = self._clock()
        page = Page(
            id=self._new_id(),
            kind=kind,
            title="",
            emoji=default_emoji(kind),
            created_at=now,
            updated_at=now,
            blocks=(Block(id=self._new_id(), kind=BlockKind.HEADING1),),
            progress=0,
        )
        self._pages.insert(0, page)
        logger.info("Created %s page %s", kind.value, page.id)
        return page

    def update_page(self, page_id: str, **fields: Any) -> None:
        """Merge fields into a page and refresh updated_at.

        Accepts title, emoji, kind, progress and blocks. A new block list is
        refused if it is empty or repeats an id; progress is recomputed from
        any accepted block list before the page is committed.

        Raises:
            TypeError: If a field outside the updatable set is given.
            pydantic.ValidationError: If a value is invalid (e.g. progress > 100).
        """
        _check_fields(fields, PAGE_FIELDS, "page")
        if "progress" in fields:
            fields["progress"] = _PROGRESS.validate_python(fields["progress"])
        index = self._index(page_id)
        if index is None:
            logger.debug("update_page: unknown page %s", page_id)
            return

        if "blocks" in fields:
            blocks = tuple(
                b if isinstance(b, Block) else Block.model_validate(b) for b in fields.pop("blocks")
            )
            if self._valid_block_list(blocks):
                fields["blocks"] = blocks
            else:
                logger.warning("Refusing block list for page %s: empty or duplicate ids", page_id)

        self._commit(index, **fields)

    def delete_page(self, page_id: str) -> None:
        """Remove a page and, with it, all of its blocks."""
        index = self._index(page_id)
        if index is None:
            logger.debug("delete_page: unknown page %s", page_id)
            return
        del self._pages[index]
        self._generating.pop(page_id, None)
        logger.info("Deleted page %s", page_id)

    # --- Block operations ---

    def insert_block_after(self, page_id: str, after_block_id: str) -> Block | None:
        """Splice a new empty paragraph right after an existing block.

        Returns:
            The new block, or None when the page or anchor block is unknown.
        """
        index = self._index(page_id)
        if index is None:
            logger.debug("insert_block_after: unknown page %s", page_id)
            return None

        blocks = self._pages[index].blocks
        position = self._block_index(blocks, after_block_id)
        if position is None:
            logger.debug("insert_block_after: unknown block %s in page %s", after_block_id, page_id)
            return None

        block = Block(id=self._new_id(), kind=BlockKind.PARAGRAPH)
        self._commit(index, blocks=blocks[: position + 1] + (block,) + blocks[position + 1 :])
        return block

    def update_block(self, page_id: str, block_id: str, **fields: Any) -> None:
        """Merge kind, content and/or checked into a block.

        Raises:
            TypeError: If a field outside the updatable set is given.
            pydantic.ValidationError: If a value is invalid (e.g. an unknown kind).
        """
        _check_fields(fields, BLOCK_FIELDS, "block")
        index = self._index(page_id)
        if index is None:
            logger.debug("update_block: unknown page %s", page_id)
            return

        blocks = self._pages[index].blocks
        position = self._block_index(blocks, block_id)
        if position is None:
            logger.debug("update_block: unknown block %s in page %s", block_id, page_id)
            return

        updated = Block(**{**dict(blocks[position]), **fields})
        self._commit(index, blocks=blocks[:position] + (updated,) + blocks[position + 1 :])

    def delete_block(self, page_id: str, block_id: str) -> None:
        """Remove a block unless it is the last one left on its page."""
        index = self._index(page_id)
        if index is None:
            logger.debug("delete_block: unknown page %s", page_id)
            return

        blocks = self._pages[index].blocks
        position = self._block_index(blocks, block_id)
        if position is None:
            logger.debug("delete_block: unknown block %s in page %s", block_id, page_id)
            return
        if len(blocks) <= 1:
            logger.debug("delete_block: keeping last block of page %s", page_id)
            return

        self._commit(index, blocks=blocks[:position] + blocks[position + 1 :])

    def append_generated_blocks(
        self,
        page_id: str,
        raw_blocks: Iterable[Any],
        allowed: Collection[BlockKind] | None = None,
        heading: str | None = None,
    ) -> list[Block]:
        """Normalize generated block descriptors and append them in one update.

        Descriptors with an unrecognized kind or no content are dropped (see
        ``monotrack.documents.normalize``), as are kinds outside ``allowed``.
        Nothing is committed when the page is unknown or no descriptor survives.

        Args:
            heading: Text of a heading2 block placed before the appended blocks,
                only when at least one descriptor survives.

        Returns:
            The blocks that were appended, in order.
        """
        index = self._index(page_id)
        if index is None:
            logger.debug("append_generated_blocks: unknown page %s", page_id)
            return []

        new_blocks = normalize_blocks(raw_blocks, self._new_id, allowed)
        if not new_blocks:
            return []
        if heading is not None:
            marker = Block(id=self._new_id(), kind=BlockKind.HEADING2, content=heading)
            new_blocks.insert(0, marker)

        self._commit(index, blocks=self._pages[index].blocks + tuple(new_blocks))
        logger.info("Appended %d generated block(s) to page %s", len(new_blocks), page_id)
        return new_blocks

    # --- Internals ---

    def _index(self, page_id: object) -> int | None:
        for i, page in enumerate(self._pages):
            if page.id == page_id:
                return i
        return None

    @staticmethod
    def _block_index(blocks: tuple[Block, ...], block_id: str) -> int | None:
        for i, block in enumerate(blocks):
            if block.id == block_id:
                return i
        return None

    @staticmethod
    def _valid_block_list(blocks: tuple[Block, ...]) -> bool:
        if not blocks:
            return False
        ids = [b.id for b in blocks]
        return len(set(ids)) == len(ids)

    def _commit(self, index: int, **changes: Any) -> Page:
        """Replace the page at ``index`` with a validated, timestamped copy."""
        page = self._pages[index]
        if "blocks" in changes or "progress" in changes:
            # Todos dictate progress; a manual value only sticks on todo-free pages
            blocks = changes.get("blocks", page.blocks)
            changes["progress"] = compute_progress(blocks, changes.get("progress", page.progress))
        changes["updated_at"] = self._clock()
        updated = Page(**{**dict(page), **changes})
        self._pages[index] = updated
        return updated
