"""System prompts and user content builders for Gemini."""

from collections.abc import Iterable

from monotrack.models.blocks import Block

UNTITLED = "Untitled"
DEFAULT_BREAKDOWN_CONTEXT = "General project breakdown"
SUGGESTION_COUNT = 3

BREAKDOWN_SYSTEM_PROMPT = """\
You are a project management assistant. Your goal is to break down complex projects \
or topics into actionable steps or detailed outlines.
Output MUST be a strictly structured JSON array of blocks.
Block kinds available: heading1, heading2, paragraph, todo, bullet.
Keep titles concise. Make todos actionable.
"""


def build_breakdown_content(title: str, context: str) -> str:
    """Assemble the user message asking for a structured plan."""
    return (
        f'Break down the following project/topic into a structured plan: "{title or UNTITLED}".\n'
        f"Context: {context}"
    )


def blocks_to_transcript(blocks: Iterable[Block]) -> str:
    """Flatten blocks into ``kind: content`` lines."""
    return "\n".join(f"{block.kind.value}: {block.content}" for block in blocks)


def build_suggestion_content(transcript: str) -> str:
    """Assemble the user message asking for next steps."""
    return (
        f"Based on the following project content, suggest {SUGGESTION_COUNT} immediate "
        "next actionable steps (todos).\n\n"
        f"Content:\n{transcript}"
    )
