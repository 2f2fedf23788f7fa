"""Document model: the page store, progress derivation, and generated-content merging."""

from monotrack.documents.generation import generate_breakdown, generate_suggestions
from monotrack.documents.normalize import normalize_blocks
from monotrack.documents.progress import compute_progress
from monotrack.documents.store import DocumentStore

__all__ = [
    "DocumentStore",
    "compute_progress",
    "generate_breakdown",
    "generate_suggestions",
    "normalize_blocks",
]
