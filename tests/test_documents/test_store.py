"""Tests for the in-memory document store."""

import pytest
from pydantic import ValidationError

from monotrack.documents.store import DocumentStore
from monotrack.models.blocks import Block, BlockKind
from monotrack.models.pages import DAILY_LOG_EMOJI, DEFAULT_EMOJI, PageKind


def _ids(store: DocumentStore, page_id: str) -> list[str]:
    return [b.id for b in store.get_page(page_id).blocks]


def _page_with_blocks(store: DocumentStore, count: int) -> tuple[str, list[str]]:
    """Create a page and grow it to ``count`` blocks by chained inserts."""
    page = store.create_page()
    last = page.blocks[0].id
    for _ in range(count - 1):
        last = store.insert_block_after(page.id, last).id
    return page.id, _ids(store, page.id)


# --- create_page ---


def test_create_page_seeds_one_empty_heading(store: DocumentStore):
    page = store.create_page(PageKind.WORK)
    assert page.kind == PageKind.WORK
    assert page.title == ""
    assert page.progress == 0
    assert len(page.blocks) == 1
    assert page.blocks[0].kind == BlockKind.HEADING1
    assert page.blocks[0].content == ""
    assert page.created_at == page.updated_at


def test_create_page_defaults_to_project(store: DocumentStore):
    assert store.create_page().kind == PageKind.PROJECT


def test_create_page_accepts_kind_string(store: DocumentStore):
    assert store.create_page("daily_log").kind == PageKind.DAILY_LOG


def test_create_page_default_emoji(store: DocumentStore):
    assert store.create_page(PageKind.DAILY_LOG).emoji == DAILY_LOG_EMOJI
    assert store.create_page(PageKind.PAPER).emoji == DEFAULT_EMOJI


def test_create_page_inserts_at_front(store: DocumentStore):
    first = store.create_page()
    second = store.create_page()
    assert len(store) == 2
    assert store.list_pages()[0].id == second.id
    assert first.id in store


def test_create_page_ids_unique(store: DocumentStore):
    pages = [store.create_page() for _ in range(5)]
    ids = [p.id for p in pages] + [p.blocks[0].id for p in pages]
    assert len(set(ids)) == len(ids)


def test_default_store_uses_id_allocator():
    store = DocumentStore()
    page = store.create_page()
    assert page.id != page.blocks[0].id


# --- update_page ---


def test_update_page_merges_fields(store: DocumentStore):
    page = store.create_page()
    store.update_page(page.id, title="Website Redesign", emoji="*", kind=PageKind.WORK)
    updated = store.get_page(page.id)
    assert updated.title == "Website Redesign"
    assert updated.emoji == "*"
    assert updated.kind == PageKind.WORK
    assert updated.created_at == page.created_at


def test_update_page_refreshes_updated_at(store: DocumentStore):
    page = store.create_page()
    store.update_page(page.id)
    assert store.get_page(page.id).updated_at > page.updated_at


def test_update_page_unknown_id_is_noop(store: DocumentStore):
    page = store.create_page()
    store.update_page("missing", title="x")
    assert store.get_page(page.id) == page


def test_update_page_rejects_immutable_fields(store: DocumentStore):
    page = store.create_page()
    with pytest.raises(TypeError):
        store.update_page(page.id, id="other")
    with pytest.raises(TypeError):
        store.update_page(page.id, created_at=page.created_at)


def test_update_page_manual_progress_without_todos(store: DocumentStore):
    page = store.create_page()
    store.update_page(page.id, progress=42)
    assert store.get_page(page.id).progress == 42


def test_update_page_progress_out_of_range(store: DocumentStore):
    page = store.create_page()
    with pytest.raises(ValidationError):
        store.update_page(page.id, progress=150)
    assert store.get_page(page.id).progress == 0


def test_update_page_progress_out_of_range_with_todos(store: DocumentStore):
    """Out-of-range progress is rejected even when todos would override it."""
    page = store.create_page()
    store.update_block(page.id, page.blocks[0].id, kind=BlockKind.TODO)
    before = store.get_page(page.id)
    with pytest.raises(ValidationError):
        store.update_page(page.id, progress=150)
    with pytest.raises(ValidationError):
        store.update_page(page.id, progress=-1)
    assert store.get_page(page.id) == before


def test_update_page_progress_overridden_by_todos(store: DocumentStore):
    """With todos present, the derived value wins over a manual one."""
    page = store.create_page()
    store.update_block(page.id, page.blocks[0].id, kind=BlockKind.TODO, checked=True)
    store.update_page(page.id, progress=10)
    assert store.get_page(page.id).progress == 100


def test_update_page_with_blocks_recalculates(store: DocumentStore):
    page = store.create_page()
    blocks = [
        Block(id="t1", kind=BlockKind.TODO, checked=True),
        Block(id="t2", kind=BlockKind.TODO, checked=False),
    ]
    store.update_page(page.id, blocks=blocks)
    updated = store.get_page(page.id)
    assert [b.id for b in updated.blocks] == ["t1", "t2"]
    assert updated.progress == 50


def test_update_page_accepts_block_dicts(store: DocumentStore):
    page = store.create_page()
    store.update_page(page.id, blocks=[{"id": "x", "kind": "todo", "checked": True}])
    assert store.get_page(page.id).progress == 100


def test_update_page_refuses_empty_blocks(store: DocumentStore):
    page = store.create_page()
    store.update_page(page.id, blocks=[], title="Kept")
    updated = store.get_page(page.id)
    assert updated.blocks == page.blocks
    assert updated.title == "Kept"


def test_update_page_refuses_duplicate_block_ids(store: DocumentStore):
    page = store.create_page()
    dupes = [Block(id="d", kind=BlockKind.PARAGRAPH), Block(id="d", kind=BlockKind.TODO)]
    store.update_page(page.id, blocks=dupes)
    assert store.get_page(page.id).blocks == page.blocks


# --- delete_page ---


def test_delete_page_removes_page_and_blocks(store: DocumentStore):
    page = store.create_page()
    block_id = page.blocks[0].id
    store.delete_page(page.id)
    assert store.get_page(page.id) is None
    assert page.id not in store
    assert len(store) == 0
    # Block operations on the vanished page find nothing
    store.update_block(page.id, block_id, content="x")
    assert store.insert_block_after(page.id, block_id) is None
    assert store.list_pages() == []


def test_delete_page_unknown_is_noop(store: DocumentStore):
    store.create_page()
    store.delete_page("missing")
    assert len(store) == 1


# --- insert_block_after ---


def test_insert_block_after_splices_paragraph(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 3)
    new = store.insert_block_after(page_id, ids[0])
    assert new.kind == BlockKind.PARAGRAPH
    assert new.content == ""
    assert _ids(store, page_id) == [ids[0], new.id, ids[1], ids[2]]


def test_insert_block_after_last(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 2)
    new = store.insert_block_after(page_id, ids[-1])
    assert _ids(store, page_id) == ids + [new.id]


def test_insert_block_after_unknown_anchor_leaves_blocks(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 3)
    before = store.get_page(page_id)
    assert store.insert_block_after(page_id, "missing") is None
    assert store.get_page(page_id) == before
    assert _ids(store, page_id) == ids


def test_insert_block_after_unknown_page(store: DocumentStore):
    assert store.insert_block_after("missing", "b") is None


def test_insert_block_refreshes_updated_at(store: DocumentStore):
    page = store.create_page()
    store.insert_block_after(page.id, page.blocks[0].id)
    assert store.get_page(page.id).updated_at > page.updated_at


# --- update_block ---


def test_update_block_merges_content(store: DocumentStore):
    page = store.create_page()
    block_id = page.blocks[0].id
    store.update_block(page.id, block_id, content="Project Goals")
    block = store.get_page(page.id).blocks[0]
    assert block.id == block_id
    assert block.kind == BlockKind.HEADING1
    assert block.content == "Project Goals"


def test_update_block_checked_recalculates(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 3)
    for block_id in ids:
        store.update_block(page_id, block_id, kind=BlockKind.TODO)
    assert store.get_page(page_id).progress == 0
    store.update_block(page_id, ids[0], checked=True)
    store.update_block(page_id, ids[2], checked=True)
    assert store.get_page(page_id).progress == 67


def test_update_block_unknown_ids_are_noops(store: DocumentStore):
    page = store.create_page()
    store.update_block(page.id, "missing", content="x")
    store.update_block("missing", page.blocks[0].id, content="x")
    assert store.get_page(page.id) == page


def test_update_block_rejects_id_change(store: DocumentStore):
    page = store.create_page()
    with pytest.raises(TypeError):
        store.update_block(page.id, page.blocks[0].id, id="new")


def test_update_block_invalid_kind(store: DocumentStore):
    page = store.create_page()
    with pytest.raises(ValidationError):
        store.update_block(page.id, page.blocks[0].id, kind="quote")


# --- delete_block ---


def test_delete_block_removes(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 3)
    store.delete_block(page_id, ids[1])
    assert _ids(store, page_id) == [ids[0], ids[2]]


def test_delete_block_never_removes_last(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 4)
    for block_id in ids:
        store.delete_block(page_id, block_id)
    assert _ids(store, page_id) == [ids[-1]]
    store.delete_block(page_id, ids[-1])
    assert len(store.get_page(page_id).blocks) == 1


def test_delete_block_unknown_is_noop(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 2)
    before = store.get_page(page_id)
    store.delete_block(page_id, "missing")
    store.delete_block("missing", ids[0])
    assert store.get_page(page_id) == before


def test_delete_block_recalculates(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 2)
    store.update_block(page_id, ids[0], kind=BlockKind.TODO, checked=True)
    store.update_block(page_id, ids[1], kind=BlockKind.TODO)
    assert store.get_page(page_id).progress == 50
    store.delete_block(page_id, ids[1])
    assert store.get_page(page_id).progress == 100


def test_progress_preserved_without_todos(store: DocumentStore):
    """A todo-free page keeps its manual progress across block edits."""
    page_id, ids = _page_with_blocks(store, 2)
    store.update_page(page_id, progress=42)
    store.update_block(page_id, ids[0], content="Notes")
    new = store.insert_block_after(page_id, ids[1])
    store.update_block(page_id, new.id, kind=BlockKind.BULLET)
    store.delete_block(page_id, ids[0])
    assert store.get_page(page_id).progress == 42


def test_progress_kept_when_last_todo_removed(store: DocumentStore):
    """Removing the last todo leaves the last derived value in place."""
    page_id, ids = _page_with_blocks(store, 2)
    store.update_block(page_id, ids[1], kind=BlockKind.TODO, checked=True)
    store.delete_block(page_id, ids[1])
    assert store.get_page(page_id).progress == 100


# --- append_generated_blocks ---


def test_append_generated_drops_bogus(store: DocumentStore):
    page = store.create_page()
    appended = store.append_generated_blocks(
        page.id, [{"kind": "bogus", "content": "x"}, {"kind": "todo", "content": "y"}]
    )
    blocks = store.get_page(page.id).blocks
    assert len(blocks) == 2
    assert len(appended) == 1
    assert blocks[-1] == appended[0]
    assert blocks[-1].kind == BlockKind.TODO
    assert blocks[-1].content == "y"
    assert blocks[-1].checked is False


def test_append_generated_keeps_order_at_end(store: DocumentStore):
    page_id, ids = _page_with_blocks(store, 2)
    raw = [{"kind": "heading2", "content": "Plan"}, {"kind": "todo", "content": "Step 1"}]
    appended = store.append_generated_blocks(page_id, raw)
    assert _ids(store, page_id) == ids + [b.id for b in appended]
    assert [b.content for b in appended] == ["Plan", "Step 1"]


def test_append_generated_fresh_ids_even_if_colliding(store: DocumentStore):
    page = store.create_page()
    existing = page.blocks[0].id
    store.append_generated_blocks(page.id, [{"id": existing, "kind": "bullet", "content": "a"}])
    ids = _ids(store, page.id)
    assert len(set(ids)) == len(ids) == 2


def test_append_generated_recalculates(store: DocumentStore):
    page = store.create_page()
    store.append_generated_blocks(
        page.id,
        [
            {"kind": "todo", "content": "a", "checked": True},
            {"kind": "todo", "content": "b"},
            {"kind": "todo", "content": "c", "checked": True},
        ],
    )
    assert store.get_page(page.id).progress == 67


def test_append_generated_nothing_valid_is_noop(store: DocumentStore):
    page = store.create_page()
    assert store.append_generated_blocks(page.id, [{"kind": "bogus", "content": "x"}]) == []
    assert store.get_page(page.id) == page


def test_append_generated_unknown_page(store: DocumentStore):
    assert store.append_generated_blocks("missing", [{"kind": "todo", "content": "y"}]) == []


def test_ids_unique_after_many_inserts_and_appends(store: DocumentStore):
    page_id, _ = _page_with_blocks(store, 5)
    for _ in range(3):
        store.append_generated_blocks(page_id, [{"kind": "todo", "content": "t"}] * 4)
        anchor = _ids(store, page_id)[2]
        store.insert_block_after(page_id, anchor)
    ids = _ids(store, page_id)
    assert len(ids) == 5 + 12 + 3
    assert len(set(ids)) == len(ids)


# --- queries and generation flag ---


def test_list_pages_filters_and_sorts(store: DocumentStore):
    project = store.create_page(PageKind.PROJECT)
    log = store.create_page(PageKind.DAILY_LOG)
    work = store.create_page(PageKind.WORK)
    store.update_page(project.id, title="Touched last")

    assert [p.id for p in store.list_pages()] == [project.id, work.id, log.id]
    assert [p.id for p in store.list_pages(PageKind.DAILY_LOG)] == [log.id]
    assert store.list_pages(PageKind.PAPER) == []


def test_snapshots_do_not_change(store: DocumentStore):
    """Returned pages are snapshots; later mutations produce new objects."""
    page = store.create_page()
    store.update_page(page.id, title="New")
    assert page.title == ""
    assert store.get_page(page.id).title == "New"


def test_generating_flag(store: DocumentStore):
    page = store.create_page()
    assert not store.is_generating(page.id)
    with store.generating(page.id):
        assert store.is_generating(page.id)
    assert not store.is_generating(page.id)


def test_generating_flag_cleared_on_error(store: DocumentStore):
    page = store.create_page()
    with pytest.raises(RuntimeError):
        with store.generating(page.id):
            raise RuntimeError("boom")
    assert not store.is_generating(page.id)


def test_generating_flag_cleared_on_delete(store: DocumentStore):
    page = store.create_page()
    with store.generating(page.id):
        store.delete_page(page.id)
        assert not store.is_generating(page.id)


def test_generating_flag_is_advisory(store: DocumentStore):
    """Mutations still go through while generation is in progress."""
    page = store.create_page()
    with store.generating(page.id):
        store.update_page(page.id, title="Still editable")
    assert store.get_page(page.id).title == "Still editable"


def test_generating_flag_held_while_any_call_outstanding(store: DocumentStore):
    """Overlapping generation calls keep the flag set until the last one ends."""
    page = store.create_page()
    with store.generating(page.id):
        with store.generating(page.id):
            assert store.is_generating(page.id)
        assert store.is_generating(page.id)
    assert not store.is_generating(page.id)


def test_append_generated_allowed_kinds(store: DocumentStore):
    page = store.create_page()
    appended = store.append_generated_blocks(
        page.id,
        [{"kind": "bullet", "content": "x"}, {"kind": "todo", "content": "y"}],
        allowed={BlockKind.TODO},
    )
    assert [b.kind for b in appended] == [BlockKind.TODO]
    assert len(store.get_page(page.id).blocks) == 2


def test_append_generated_heading_only_with_survivors(store: DocumentStore):
    page = store.create_page()
    appended = store.append_generated_blocks(
        page.id, [{"kind": "todo", "content": "y"}], heading="Next"
    )
    assert [(b.kind, b.content) for b in appended] == [
        (BlockKind.HEADING2, "Next"),
        (BlockKind.TODO, "y"),
    ]

    other = store.create_page()
    assert store.append_generated_blocks(other.id, [{"kind": "bogus"}], heading="Next") == []
    assert store.get_page(other.id) == other
