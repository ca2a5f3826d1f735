"""Exceptions raised while loading, saving and querying mappings."""
from __future__ import annotations

__all__ = [
    "TagseqError",
    "MissingMappingError",
    "NotFoundError",
    "CorruptMappingError",
]


class TagseqError(Exception):
    """Base class for all errors raised by this package."""


class MissingMappingError(TagseqError, FileNotFoundError):
    """A feature or label mapping file is absent or cannot be opened."""


class NotFoundError(TagseqError, KeyError):
    """A bidirectional mapping was queried for a key or value it does not hold."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class CorruptMappingError(TagseqError, ValueError):
    """A mapping stream ended in the middle of a record."""
