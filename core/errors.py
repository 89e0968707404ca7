"""
Error taxonomy for mapped owning lists.

All errors denote programming/configuration mistakes: they propagate to the
caller immediately and are never retried or suppressed here.
"""

from __future__ import annotations


class MappedListError(Exception):
    """Base class for mapped-list failures."""


class InvalidArgumentError(MappedListError, ValueError):
    """Negative/oversized order component, mismatched sizes, malformed stream."""


class NotFoundError(MappedListError, KeyError):
    """Order not mapped, or mapped to a slot that holds no element."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class OwnershipViolationError(MappedListError, RuntimeError):
    """Transfer from an owning handle that was already emptied."""
