"""HTTP adapter for the document store."""

from monotrack.api.router import get_store, router

__all__ = ["get_store", "router"]
