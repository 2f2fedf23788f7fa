"""Glue between the document store and the content generation client.

Each workflow snapshots the page, marks it as generating, awaits Gemini, and
then appends the result to the page's blocks as they are when the response
arrives. A page deleted while the call was in flight is left alone: the
store's append is a no-op for unknown ids.
"""

import logging

from google import genai

from monotrack.documents.store import DocumentStore
from monotrack.llm.generator import breakdown, suggest_next_steps
from monotrack.llm.prompts import DEFAULT_BREAKDOWN_CONTEXT, UNTITLED
from monotrack.models.blocks import Block, BlockKind

logger = logging.getLogger(__name__)

SUGGESTIONS_HEADING = "AI Suggestions"


async def generate_breakdown(
    store: DocumentStore,
    client: genai.Client,
    page_id: str,
    context: str = DEFAULT_BREAKDOWN_CONTEXT,
) -> list[Block]:
    """Append a generated plan for the page's title to the end of the page.

    Returns:
        The appended blocks; empty if the page is unknown or vanished.
    """
    page = store.get_page(page_id)
    if page is None:
        logger.debug("generate_breakdown: unknown page %s", page_id)
        return []

    with store.generating(page_id):
        raw_blocks = await breakdown(client, page.title or UNTITLED, context)

    if page_id not in store:
        logger.info("Discarding breakdown for deleted page %s", page_id)
        return []
    return store.append_generated_blocks(page_id, raw_blocks)


async def generate_suggestions(
    store: DocumentStore,
    client: genai.Client,
    page_id: str,
) -> list[Block]:
    """Append suggested next-step todos under an "AI Suggestions" heading.

    Nothing is appended, not even the heading, when there are no valid
    suggestions.

    Returns:
        The appended blocks (heading first); empty when nothing was added.
    """
    page = store.get_page(page_id)
    if page is None:
        logger.debug("generate_suggestions: unknown page %s", page_id)
        return []

    with store.generating(page_id):
        raw_blocks = await suggest_next_steps(client, page.blocks)

    if page_id not in store:
        logger.info("Discarding suggestions for deleted page %s", page_id)
        return []

    appended = store.append_generated_blocks(
        page_id, raw_blocks, allowed={BlockKind.TODO}, heading=SUGGESTIONS_HEADING
    )
    if not appended:
        logger.info("No suggestions for page %s", page_id)
    return appended
