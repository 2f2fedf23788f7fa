"""Block model and block kind enum."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BlockKind(str, Enum):
    """Fixed set of block kinds a page can contain."""

    HEADING1 = "heading1"
    HEADING2 = "heading2"
    PARAGRAPH = "paragraph"
    TODO = "todo"
    BULLET = "bullet"


class Block(BaseModel):
    """An atomic unit of page content. Immutable; the store swaps in copies."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: BlockKind
    content: str = ""
    checked: bool = False  # Only meaningful for TODO blocks
