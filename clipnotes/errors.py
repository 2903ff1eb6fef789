from __future__ import annotations


class ClipNotesError(Exception):
    pass


class StoreError(ClipNotesError):
    """Raised when a store mutation could not be written to disk."""
