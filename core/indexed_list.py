"""
IndexedOwningList: a dense owning list addressed by order tuples.

Layout:
- storage: list of slots, each None (empty) or exactly one owned element.
- index map: integer key (encoded order) -> slot position in storage.
- dimension_count: expected order arity (0 = natural arity of each order).

Principles:
- Slot positions are stable; storage only grows by appending, so existing
  slots are never relocated.
- found() asks "is the order mapped", is_set() asks "does the slot hold an
  element". A mapped slot may be empty.
- The list is the sole owner of what it stores. Replacing or clearing a slot
  drops the list's reference to the previous element.
- No locking: callers sharing one instance across threads must serialise
  mutation themselves.
"""

from __future__ import annotations

import operator
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Generic,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

import numpy as np

from .encoding import (
    DEFAULT_FIELD_WIDTH,
    Order,
    check_field_width,
    fits_field_width,
    label_arity,
    label_to_list,
    list_to_label,
    list_to_word,
    max_arity,
    normalize_components,
    normalize_order,
)
from .errors import InvalidArgumentError, NotFoundError
from .handles import take_ownership

T = TypeVar("T")


def _is_slot(target: Any) -> bool:
    """An integer (not an order sequence) addresses a raw slot."""
    if isinstance(target, (bool, np.bool_)):
        return False
    if isinstance(target, np.ndarray):
        return False
    try:
        operator.index(target)
    except TypeError:
        return False
    return True


def _check_size(size: Any) -> int:
    if not _is_slot(size):
        raise InvalidArgumentError(f"size must be an integer, got {size!r}")
    size = operator.index(size)
    if size < 0:
        raise InvalidArgumentError(f"size must be non-negative, got {size}")
    return int(size)


def _check_mapping(mapping: Mapping[int, int]) -> Dict[int, int]:
    out: Dict[int, int] = {}
    for key, slot in mapping.items():
        if not _is_slot(key) or operator.index(key) < 0:
            raise InvalidArgumentError(f"Map key must be a non-negative integer, got {key!r}")
        if not _is_slot(slot) or operator.index(slot) < 0:
            raise InvalidArgumentError(f"Map slot must be a non-negative integer, got {slot!r} (key={key})")
        out[int(operator.index(key))] = int(operator.index(slot))
    return out


class IndexedOwningList(Generic[T]):
    """
    Owning list of elements addressed by order tuples.

    >>> moments = IndexedOwningList(3, [(0, 0), (1, 0), (0, 1)])
    >>> moments.set((1, 0), 2.5)
    >>> moments(1, 0)
    2.5
    """

    __slots__ = ("_storage", "_map", "_n_dims", "_width")

    list_to_label = staticmethod(list_to_label)
    list_to_word = staticmethod(list_to_word)

    def __init__(
        self,
        size: int,
        orders: Sequence[Sequence[int]] = (),
        *,
        dimension_count: Optional[int] = None,
        field_width: int = DEFAULT_FIELD_WIDTH,
    ) -> None:
        size = _check_size(size)
        orders = list(orders)
        if len(orders) > size:
            raise InvalidArgumentError(
                f"{len(orders)} orders given for a list of only {size} slots"
            )

        self._storage: List[Optional[T]] = [None] * size
        self._map: Dict[int, int] = {}
        self._width = check_field_width(field_width)
        self._n_dims = self._resolve_dims(orders, dimension_count)
        self._register_orders(orders)

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_map(
        cls,
        size: int,
        mapping: Mapping[int, int],
        *,
        dimension_count: int = 0,
        field_width: int = DEFAULT_FIELD_WIDTH,
    ) -> "IndexedOwningList[T]":
        """
        Empty list of `size` slots adopting a prebuilt key -> slot map.

        With dimension_count=0 the arity used by orders()/words() is taken from
        the widest key, so keys with leading zero components decode padded.
        """
        out = cls(size, dimension_count=dimension_count, field_width=field_width)
        adopted = _check_mapping(mapping)
        bad = {k: s for k, s in adopted.items() if s >= out.size}
        if bad:
            raise InvalidArgumentError(f"Map refers to slots outside [0, {out.size}): {bad}")
        out._map = adopted
        return out

    @classmethod
    def from_list(
        cls,
        elements: Sequence[Any],
        orders: Sequence[Sequence[int]],
        *,
        dimension_count: Optional[int] = None,
        field_width: int = DEFAULT_FIELD_WIDTH,
    ) -> "IndexedOwningList[T]":
        """
        Adopt already-built elements slot by slot and map orders[i] -> slot i.

        None entries become empty slots; Owned/Tmp entries are transferred.
        """
        elements = list(elements)
        out = cls(
            len(elements),
            orders,
            dimension_count=dimension_count,
            field_width=field_width,
        )
        for slot, entry in enumerate(elements):
            if entry is not None:
                out._storage[slot] = take_ownership(entry)
        return out

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._storage)

    @property
    def dimension_count(self) -> int:
        return self._n_dims

    @property
    def field_width(self) -> int:
        return self._width

    def map(self) -> Mapping[int, int]:
        """Read-only view of the key -> slot map."""
        return MappingProxyType(self._map)

    # ------------------------------------------------------------------
    # Key computation
    # ------------------------------------------------------------------

    def _resolve_dims(self, orders: Sequence[Sequence[int]], dimension_count: Optional[int]) -> int:
        if dimension_count is None:
            return max_arity(orders)
        if not _is_slot(dimension_count) or operator.index(dimension_count) < 0:
            raise InvalidArgumentError(f"dimension_count must be a non-negative integer, got {dimension_count!r}")
        n_dims = int(operator.index(dimension_count))
        too_long = [tuple(o) for o in orders if len(o) > n_dims] if n_dims else []
        if too_long:
            raise InvalidArgumentError(
                f"Orders longer than dimension_count={n_dims}: {too_long[:5]}"
            )
        return n_dims

    def _register_orders(self, orders: Sequence[Sequence[int]]) -> None:
        for slot, order in enumerate(orders):
            key = self.key(order)
            if key in self._map:
                raise InvalidArgumentError(
                    f"Order {tuple(order)} (key {key}) given twice: slots {self._map[key]} and {slot}"
                )
            self._map[key] = slot

    def key(self, order: Sequence[int] | np.ndarray) -> int:
        """Integer key of an order under this list's dimension_count/field_width."""
        return list_to_label(order, self._n_dims, self._width)

    def word(self, order: Sequence[int] | np.ndarray) -> str:
        """Printable key of an order, padded to dimension_count components."""
        comps = normalize_order(order, self._width)
        if len(comps) < self._n_dims:
            comps = comps + (0,) * (self._n_dims - len(comps))
        return list_to_word(comps, self._width)

    @staticmethod
    def _order_from_args(args: Tuple[Any, ...]) -> Any:
        # lst(1, 0, 0) and lst((1, 0, 0)) address the same element.
        if len(args) == 1 and not _is_slot(args[0]):
            return args[0]
        return args

    def _slot_of(self, order: Any) -> Optional[int]:
        # Orders that cannot be encoded under this list's shape are never mapped.
        comps = normalize_components(order)
        if self._n_dims and len(comps) > self._n_dims:
            return None
        if not fits_field_width(comps, self._width):
            return None
        return self._map.get(list_to_label(comps, self._n_dims, self._width))

    def _slot_in_range(self, slot: int) -> bool:
        return 0 <= slot < len(self._storage)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __call__(self, *components: Any) -> T:
        """Element stored for an order, given as components or one sequence."""
        order = self._order_from_args(components)
        slot = self._slot_of(order)
        if slot is None:
            raise NotFoundError(f"Order {normalize_components(order)} is not mapped")
        if not self._slot_in_range(slot) or self._storage[slot] is None:
            raise NotFoundError(
                f"Order {normalize_components(order)} maps to slot {slot}, which holds no element"
            )
        return self._storage[slot]

    def __getitem__(self, slot: int) -> T:
        """Raw positional access."""
        if not _is_slot(slot):
            raise InvalidArgumentError(f"Slot index must be an integer, got {slot!r}")
        slot = operator.index(slot)
        if not self._slot_in_range(slot):
            raise NotFoundError(f"Slot {slot} out of range [0, {len(self._storage)})")
        element = self._storage[slot]
        if element is None:
            raise NotFoundError(f"Slot {slot} holds no element")
        return element

    def found(self, *components: Any) -> bool:
        """True if the order has a key in the map, populated or not."""
        return self._slot_of(self._order_from_args(components)) is not None

    def is_set(self, target: Any) -> bool:
        """True if the slot (or the slot an order maps to) holds an element."""
        if _is_slot(target):
            slot = operator.index(target)
        else:
            slot = self._slot_of(target)
            if slot is None:
                return False
        return self._slot_in_range(slot) and self._storage[slot] is not None

    def __contains__(self, order: Any) -> bool:
        return self.found(order)

    def __len__(self) -> int:
        return len(self._storage)

    def __iter__(self) -> Iterator[T]:
        """Occupied elements in slot order."""
        return (e for e in self._storage if e is not None)

    def orders(self) -> Iterator[Tuple[Order, int]]:
        """
        (order, slot) pairs for every mapped key, in slot order.

        Without a dimension_count, orders are decoded to the arity of the
        widest key in the map.
        """
        n_dims = self._n_dims
        if n_dims < 1:
            n_dims = max((label_arity(k, self._width) for k in self._map), default=1)
        for key, slot in sorted(self._map.items(), key=lambda kv: (kv[1], kv[0])):
            yield label_to_list(key, n_dims, self._width), slot

    def words(self, name: str = "") -> Dict[str, int]:
        """
        Printable names -> slot for every mapped order, e.g. "moment.210".

        Without a name the bare word ("210") is used.
        """
        out: Dict[str, int] = {}
        for order, slot in self.orders():
            word = list_to_word(order, self._width)
            out[f"{name}.{word}" if name else word] = slot
        return out

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def set_map(self, mapping: Mapping[int, int]) -> None:
        """
        Replace the key -> slot map.

        Storage is not resized: keys mapped beyond the current size resolve to
        NotFoundError on access until the caller resizes.
        """
        self._map = _check_mapping(mapping)

    def _next_free_slot(self) -> int:
        used = set(self._map.values())
        for slot, element in enumerate(self._storage):
            if slot not in used and element is None:
                return slot
        self._storage.append(None)
        return len(self._storage) - 1

    def _key_for_set(self, order: Any) -> Tuple[int, Optional[int]]:
        """Key of an order to be stored, and its current slot (None if unmapped)."""
        comps = normalize_order(order, self._width)
        if self._n_dims and len(comps) > self._n_dims:
            raise InvalidArgumentError(
                f"Order {comps} has more than dimension_count={self._n_dims} components"
            )
        key = list_to_label(comps, self._n_dims, self._width)
        slot = self._map.get(key)
        if slot is not None and not self._slot_in_range(slot):
            raise InvalidArgumentError(
                f"Order {comps} maps to slot {slot}, beyond list size {len(self._storage)}"
            )
        return key, slot

    def set(self, target: Any, entry: Any) -> None:
        """
        Store an element at a slot or order, taking ownership of it.

        `entry` may be a plain object, an Owned handle (left empty) or a Tmp
        handle (taken if unshared, else copied); None empties the slot. An
        unmapped order is registered at the lowest free slot, growing the list
        by one slot when none is free. The target is validated before the
        handle is touched, so a rejected call leaves both list and handle as
        they were.
        """
        key: Optional[int] = None
        if _is_slot(target):
            slot = operator.index(target)
            if not self._slot_in_range(slot):
                raise InvalidArgumentError(f"Slot {slot} out of range [0, {len(self._storage)})")
        else:
            key, slot = self._key_for_set(target)

        obj = take_ownership(entry) if entry is not None else None

        if slot is None:
            slot = self._next_free_slot()
            self._map[key] = slot
        self._storage[slot] = obj

    def release(self, target: Any) -> T:
        """Detach and return the element at a slot or order; the slot is left empty."""
        if _is_slot(target):
            element = self[target]
            slot = operator.index(target)
        else:
            element = self(target)
            slot = self._slot_of(target)
        self._storage[slot] = None
        return element

    def resize(self, size: int) -> None:
        """Grow (or shrink past unused tail) the slot storage; existing slots keep their positions."""
        size = _check_size(size)
        if size >= len(self._storage):
            self._storage.extend([None] * (size - len(self._storage)))
            return
        mapped = [s for s in self._map.values() if s >= size]
        if mapped:
            raise InvalidArgumentError(f"Cannot shrink to {size}: slots {sorted(set(mapped))} are mapped")
        del self._storage[size:]

    def clear(self) -> None:
        """Drop every stored element; map and size are kept."""
        for slot in range(len(self._storage)):
            self._storage[slot] = None

    def __repr__(self) -> str:
        n_set = sum(1 for e in self._storage if e is not None)
        return (
            f"{type(self).__name__}(size={len(self._storage)}, mapped={len(self._map)}, "
            f"set={n_set}, dimension_count={self._n_dims}, field_width={self._width})"
        )
