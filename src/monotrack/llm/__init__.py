"""Content generation: Gemini-backed block proposals.

Public API:
    breakdown(client, title, context) -> list[dict]
        Structured plan for a project/topic as raw block descriptors.
    suggest_next_steps(client, blocks) -> list[dict]
        Up to a few todo descriptors continuing the given page content.
"""

from monotrack.llm.client import get_gemini_client, reset_client
from monotrack.llm.generator import breakdown, suggest_next_steps
from monotrack.llm.schemas import LLMBlock, LLMSuggestion

__all__ = [
    "get_gemini_client",
    "reset_client",
    "breakdown",
    "suggest_next_steps",
    "LLMBlock",
    "LLMSuggestion",
]
