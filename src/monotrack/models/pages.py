"""Page model and page kind enum."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from monotrack.models.blocks import Block


class PageKind(str, Enum):
    """Kinds of page the tracker organizes content into."""

    PROJECT = "project"
    WORK = "work"
    PAPER = "paper"
    DAILY_LOG = "daily_log"


DEFAULT_EMOJI = "\U0001f4c4"  # page facing up
DAILY_LOG_EMOJI = "\U0001f4c5"  # calendar


def default_emoji(kind: PageKind) -> str:
    """Return the glyph a freshly created page of this kind starts with."""
    return DAILY_LOG_EMOJI if kind == PageKind.DAILY_LOG else DEFAULT_EMOJI


class Page(BaseModel):
    """A titled, ordered sequence of blocks plus metadata and derived progress."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: PageKind
    title: str = ""  # "Untitled" is a display fallback, never stored
    emoji: str = DEFAULT_EMOJI
    created_at: datetime
    updated_at: datetime
    blocks: tuple[Block, ...] = Field(min_length=1)
    progress: int = Field(default=0, ge=0, le=100)
