"""HTTP adapter exposing the document store's operations.

Reads of an unknown page return 404. Mutations that target an unknown page
or block return 204 with no effect, mirroring the store's silent no-op
policy. Block lists can only change through the insert, update and delete
endpoints; there is no way to reorder or replace them wholesale over HTTP.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from google import genai
from pydantic import BaseModel, Field

from monotrack.documents.generation import generate_breakdown, generate_suggestions
from monotrack.documents.store import DocumentStore
from monotrack.llm.client import get_gemini_client
from monotrack.llm.prompts import DEFAULT_BREAKDOWN_CONTEXT
from monotrack.models.blocks import Block, BlockKind
from monotrack.models.pages import Page, PageKind

router = APIRouter(prefix="/pages", tags=["pages"])


class PageCreate(BaseModel):
    kind: PageKind = PageKind.PROJECT


class PageUpdate(BaseModel):
    title: str | None = None
    emoji: str | None = None
    kind: PageKind | None = None
    progress: int | None = Field(default=None, ge=0, le=100)


class BlockInsert(BaseModel):
    after_block_id: str


class BlockUpdate(BaseModel):
    kind: BlockKind | None = None
    content: str | None = None
    checked: bool | None = None


class BreakdownRequest(BaseModel):
    context: str = DEFAULT_BREAKDOWN_CONTEXT


class PageStatus(BaseModel):
    """A page snapshot plus the advisory generation flag."""

    page: Page
    generating: bool


def get_store(request: Request) -> DocumentStore:
    """Return the store created by the application lifespan."""
    return request.app.state.store


def _no_effect() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("")
async def list_pages(
    kind: PageKind | None = None, store: DocumentStore = Depends(get_store)
) -> list[Page]:
    """List pages, optionally of one kind, most recently updated first."""
    return store.list_pages(kind)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_page(
    body: PageCreate | None = None, store: DocumentStore = Depends(get_store)
) -> Page:
    """Create a page seeded with one empty heading."""
    return store.create_page((body or PageCreate()).kind)


@router.get("/{page_id}")
async def get_page(page_id: str, store: DocumentStore = Depends(get_store)) -> PageStatus:
    """Return a page and whether a generation call is outstanding for it."""
    page = store.get_page(page_id)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return PageStatus(page=page, generating=store.is_generating(page_id))


@router.patch("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_page(
    page_id: str, body: PageUpdate, store: DocumentStore = Depends(get_store)
) -> Response:
    store.update_page(page_id, **body.model_dump(exclude_unset=True, exclude_none=True))
    return _no_effect()


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(page_id: str, store: DocumentStore = Depends(get_store)) -> Response:
    store.delete_page(page_id)
    return _no_effect()


@router.post("/{page_id}/blocks", status_code=status.HTTP_201_CREATED, response_model=None)
async def insert_block(
    page_id: str, body: BlockInsert, store: DocumentStore = Depends(get_store)
) -> Block | Response:
    """Insert an empty paragraph after ``after_block_id``; 204 if either id is unknown."""
    block = store.insert_block_after(page_id, body.after_block_id)
    if block is None:
        return _no_effect()
    return block


@router.patch("/{page_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_block(
    page_id: str, block_id: str, body: BlockUpdate, store: DocumentStore = Depends(get_store)
) -> Response:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    store.update_block(page_id, block_id, **fields)
    return _no_effect()


@router.delete("/{page_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    page_id: str, block_id: str, store: DocumentStore = Depends(get_store)
) -> Response:
    store.delete_block(page_id, block_id)
    return _no_effect()


@router.post("/{page_id}/breakdown")
async def breakdown_page(
    page_id: str,
    body: BreakdownRequest | None = None,
    store: DocumentStore = Depends(get_store),
    client: genai.Client = Depends(get_gemini_client),
) -> list[Block]:
    """Append a Gemini-generated plan; returns the appended blocks."""
    context = (body or BreakdownRequest()).context
    return await generate_breakdown(store, client, page_id, context)


@router.post("/{page_id}/suggestions")
async def suggest_for_page(
    page_id: str,
    store: DocumentStore = Depends(get_store),
    client: genai.Client = Depends(get_gemini_client),
) -> list[Block]:
    """Append suggested next-step todos; returns the appended blocks."""
    return await generate_suggestions(store, client, page_id)
