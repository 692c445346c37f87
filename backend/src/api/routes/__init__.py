"""HTTP API route handlers."""

from . import index, notes, search

__all__ = ["notes", "search", "index"]
