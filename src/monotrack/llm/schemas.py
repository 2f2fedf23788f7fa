"""Response schemas for Gemini structured output.

Only used to describe the JSON shape to Gemini. Responses are parsed as raw
JSON and passed through block normalization, so an entry that slips past the
schema is dropped there rather than failing the whole call.
"""

from typing import Literal

from pydantic import BaseModel, Field


class LLMBlock(BaseModel):
    """A single generated block in a project breakdown."""

    kind: Literal["heading1", "heading2", "paragraph", "todo", "bullet"] = Field(
        description="Block type. Use headings for sections and todo for actionable steps."
    )
    content: str = Field(description="Text of the block, one line, no markdown")
    checked: bool = Field(default=False, description="Completion state, false for new todos")


class LLMSuggestion(BaseModel):
    """A single suggested next step."""

    kind: Literal["todo"] = Field(description="Always 'todo'")
    content: str = Field(description="Short, actionable next step")
