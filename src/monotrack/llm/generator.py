"""Content generation via Gemini: project breakdowns and next-step suggestions.

Both entry points return raw block descriptors (dicts with ``kind``,
``content`` and optionally ``checked``) for the document store to normalize.
Neither raises: API, network and parse failures are logged and replaced by a
fallback value, so a failed call can at worst add one explanatory block.
"""

import json
import logging
from collections.abc import Iterable

import httpx
from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from monotrack.config import get_settings
from monotrack.cost import extract_usage, log_usage
from monotrack.llm.prompts import (
    BREAKDOWN_SYSTEM_PROMPT,
    DEFAULT_BREAKDOWN_CONTEXT,
    blocks_to_transcript,
    build_breakdown_content,
    build_suggestion_content,
)
from monotrack.llm.schemas import LLMBlock, LLMSuggestion
from monotrack.models.blocks import Block

logger = logging.getLogger(__name__)

MISSING_KEY_NOTICE = "API key missing. Please configure your environment."
FAILURE_NOTICE = "Failed to generate plan. Please try again."


def _notice(text: str) -> dict:
    return {"kind": "paragraph", "content": text, "checked": False}


def _is_retryable(error: BaseException) -> bool:
    """Determine if a Gemini call failure is transient and worth retrying.

    Returns True for server errors (5xx), rate limits (429) and HTTP timeouts.
    Returns False for permanent client errors (400, 401, 403).
    """
    if isinstance(error, ServerError):
        return True
    if isinstance(error, ClientError) and error.code == 429:
        return True
    if isinstance(error, httpx.TimeoutException):
        return True
    return False


@retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=1, max=30, jitter=2),
    stop=stop_after_attempt(4),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _call_gemini(
    client: genai.Client,
    user_content: str,
    response_schema: type,
    system_prompt: str | None = None,
) -> object:
    """Call Gemini for a JSON array, retrying on transient errors.

    Raises:
        ClientError: On permanent API errors.
        ServerError: After exhausting retries on server errors.
    """
    response = await client.aio.models.generate_content(
        model=get_settings().gemini_model,
        contents=user_content,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt,
            response_mime_type="application/json",
            response_schema=response_schema,
        ),
    )
    return response


def _parse_array(response: object) -> list:
    """Decode the response text as a JSON array.

    Reads ``response.text`` rather than ``response.parsed``: validating the
    whole array against the schema would reject it over one bad entry, while
    block normalization drops bad entries one at a time.

    Raises:
        ValueError: If the text is not valid JSON or not an array.
    """
    data = json.loads(getattr(response, "text", None) or "[]")
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
    return data


async def breakdown(
    client: genai.Client, title: str, context: str = DEFAULT_BREAKDOWN_CONTEXT
) -> list[dict]:
    """Ask Gemini to break a project or topic down into blocks.

    Args:
        client: Configured Gemini client instance.
        title: Page title; an empty title is sent as "Untitled".
        context: Extra guidance appended to the prompt.

    Returns:
        Raw block descriptors in generation order, or a single paragraph
        notice when the API key is missing or the call fails.
    """
    settings = get_settings()
    if not settings.gemini_api_key:
        logger.warning("No Gemini API key configured; skipping breakdown")
        return [_notice(MISSING_KEY_NOTICE)]

    try:
        response = await _call_gemini(
            client,
            build_breakdown_content(title, context),
            list[LLMBlock],
            system_prompt=BREAKDOWN_SYSTEM_PROMPT,
        )
        raw_blocks = _parse_array(response)
    except Exception:
        logger.error("Gemini breakdown failed for %r", title, exc_info=True)
        return [_notice(FAILURE_NOTICE)]

    log_usage("breakdown", settings.gemini_model, extract_usage(response))
    return raw_blocks


async def suggest_next_steps(client: genai.Client, blocks: Iterable[Block]) -> list[dict]:
    """Ask Gemini for the next actionable todos given a page's current blocks.

    Returns:
        Todo descriptors (kind forced to ``todo``, unchecked). Empty when there
        is nothing to suggest, the API key is missing, or the call fails.
    """
    settings = get_settings()
    if not settings.gemini_api_key:
        logger.warning("No Gemini API key configured; skipping suggestions")
        return []

    transcript = blocks_to_transcript(blocks)
    try:
        response = await _call_gemini(
            client,
            build_suggestion_content(transcript),
            list[LLMSuggestion],
        )
        raw_blocks = _parse_array(response)
    except Exception:
        logger.error("Gemini suggestion failed", exc_info=True)
        return []

    log_usage("suggest_next_steps", settings.gemini_model, extract_usage(response))
    return [
        {"kind": "todo", "content": entry["content"], "checked": False}
        for entry in raw_blocks
        if isinstance(entry, dict) and isinstance(entry.get("content"), str)
    ]
