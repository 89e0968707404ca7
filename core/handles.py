"""
Owning handles accepted by IndexedOwningList.set().

- Owned: exclusive handle. Transferring it empties the handle; the receiver
  becomes the sole owner.
- Tmp: temporary that may be shared between several handles, or may wrap a
  constant the caller keeps using. Transferring it hands over the object when
  the handle is its sole referrer, otherwise a deep copy.

take_ownership() normalises a plain object, an Owned or a Tmp into the single
object the container will store.
"""

from __future__ import annotations

import copy
from typing import Any, Generic, List, Optional, TypeVar

from .errors import OwnershipViolationError

T = TypeVar("T")


class Owned(Generic[T]):
    """Exclusive owning handle."""

    __slots__ = ("_obj",)

    def __init__(self, obj: Optional[T] = None) -> None:
        self._obj = obj

    def valid(self) -> bool:
        return self._obj is not None

    def empty(self) -> bool:
        return self._obj is None

    def get(self) -> T:
        if self._obj is None:
            raise OwnershipViolationError("Owned handle is empty")
        return self._obj

    def release(self) -> T:
        """Give up ownership and return the object; the handle is left empty."""
        obj = self.get()
        self._obj = None
        return obj

    def reset(self, obj: Optional[T] = None) -> None:
        self._obj = obj

    def __bool__(self) -> bool:
        return self.valid()

    def __repr__(self) -> str:
        return f"Owned({self._obj!r})" if self._obj is not None else "Owned(<empty>)"


class Tmp(Generic[T]):
    """
    Temporary handle with shared reference counting.

    Tmp(obj) wraps a freshly computed temporary; share() returns another handle
    to the same temporary. Tmp.const(obj) wraps an object the caller still owns,
    so it is always copied on transfer.
    """

    __slots__ = ("_obj", "_refs", "_is_const")

    def __init__(self, obj: Optional[T] = None) -> None:
        self._obj = obj
        self._refs: List[int] = [1 if obj is not None else 0]
        self._is_const = False

    @classmethod
    def const(cls, obj: T) -> "Tmp[T]":
        handle = cls(obj)
        handle._is_const = True
        return handle

    def share(self) -> "Tmp[T]":
        """Another handle referring to the same temporary."""
        if self._obj is None:
            raise OwnershipViolationError("Cannot share an empty Tmp handle")
        other = Tmp.__new__(Tmp)
        other._obj = self._obj
        other._refs = self._refs
        other._is_const = self._is_const
        self._refs[0] += 1
        return other

    def valid(self) -> bool:
        return self._obj is not None

    def is_tmp(self) -> bool:
        return not self._is_const

    def unique(self) -> bool:
        """True when this handle is the only referrer of a (non-const) temporary."""
        return self._obj is not None and not self._is_const and self._refs[0] == 1

    def ref_count(self) -> int:
        return self._refs[0]

    def get(self) -> T:
        if self._obj is None:
            raise OwnershipViolationError("Tmp handle is empty")
        return self._obj

    def take(self) -> T:
        """
        Return an object the caller may own outright and empty this handle.

        The wrapped object itself when this handle is its sole referrer,
        otherwise a deep copy.
        """
        obj = self.get()
        if not self.unique():
            obj = copy.deepcopy(obj)
        self.clear()
        return obj

    def clear(self) -> None:
        if self._obj is not None and not self._is_const:
            self._refs[0] -= 1
        self._obj = None
        self._refs = [0]

    def __bool__(self) -> bool:
        return self.valid()

    def __repr__(self) -> str:
        if self._obj is None:
            return "Tmp(<empty>)"
        kind = "const" if self._is_const else f"refs={self._refs[0]}"
        return f"Tmp({self._obj!r}, {kind})"


def take_ownership(entry: Any) -> Any:
    """Normalise a plain object / Owned / Tmp into the object to store."""
    if isinstance(entry, Owned):
        if entry.empty():
            raise OwnershipViolationError("Transfer from an Owned handle that was already released")
        return entry.release()
    if isinstance(entry, Tmp):
        if not entry.valid():
            raise OwnershipViolationError("Transfer from a Tmp handle that was already emptied")
        return entry.take()
    return entry
