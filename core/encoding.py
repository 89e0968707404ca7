"""
Order tuple <-> key encoding.

Conventions:
- An order is a tuple of non-negative integers, most-significant component first.
- Each component occupies `field_width` decimal digits; the digits are
  concatenated and read as one integer (label) or kept as text (word).
- Orders shorter than `dimension_count` are right-padded with zero components,
  so (1,) with 3 dimensions encodes like (1, 0, 0).
- A component that does not fit its field is rejected (no silent carry into
  the neighbouring field).

Example (field_width=1):

    order      label
    (0, 0, 0)      0
    (1, 0, 0)    100
    (0, 1, 0)     10
    (0, 0, 1)      1
    (2, 0, 0)    200
    (2, 1, 0)    210
"""

from __future__ import annotations

import operator
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import InvalidArgumentError

# Decimal digits per order component when none is configured.
DEFAULT_FIELD_WIDTH = 1

Order = Tuple[int, ...]


def check_field_width(field_width: int) -> int:
    try:
        width = operator.index(field_width)
    except TypeError:
        raise InvalidArgumentError(f"field_width must be an integer, got {field_width!r}") from None
    if width < 1:
        raise InvalidArgumentError(f"field_width must be >= 1, got {width}")
    return width


def _as_component(value) -> int:
    if isinstance(value, (bool, np.bool_)):
        raise InvalidArgumentError(f"Order component must be an integer, got {value!r}")
    try:
        comp = operator.index(value)
    except TypeError:
        raise InvalidArgumentError(f"Order component must be an integer, got {value!r}") from None
    if comp < 0:
        raise InvalidArgumentError(f"Order component must be non-negative, got {comp}")
    return int(comp)


def normalize_components(order: Iterable[int] | np.ndarray) -> Order:
    """
    Validate order components (integers, non-negative) without a width check.

    Accepts any iterable of integers, numpy integer scalars and 1-D integer
    arrays included.
    """
    if isinstance(order, np.ndarray):
        if order.ndim != 1:
            raise InvalidArgumentError(f"Order array must be 1-D, got shape {order.shape}")
        if order.size and not np.issubdtype(order.dtype, np.integer):
            raise InvalidArgumentError(f"Order array must have integer dtype, got {order.dtype}")
        order = order.tolist()
    elif isinstance(order, (str, bytes)):
        raise InvalidArgumentError(f"Order must be a sequence of integers, got {order!r}")

    try:
        comps = tuple(_as_component(v) for v in order)
    except TypeError:
        raise InvalidArgumentError(f"Order must be a sequence of integers, got {order!r}") from None
    return comps


def fits_field_width(comps: Order, field_width: int = DEFAULT_FIELD_WIDTH) -> bool:
    """True if every component fits in `field_width` decimal digits."""
    limit = 10**check_field_width(field_width)
    return all(comp < limit for comp in comps)


def normalize_order(order: Iterable[int] | np.ndarray, field_width: int = DEFAULT_FIELD_WIDTH) -> Order:
    """Validate an order (components and field width); return it as a tuple of ints."""
    width = check_field_width(field_width)
    comps = normalize_components(order)
    if not fits_field_width(comps, width):
        raise InvalidArgumentError(
            f"Order component {max(comps)} does not fit field_width={width} (max {10**width - 1}) in {comps}"
        )
    return comps


def list_to_label(
    order: Iterable[int] | np.ndarray,
    dimension_count: int = 0,
    field_width: int = DEFAULT_FIELD_WIDTH,
) -> int:
    """Pack an order into a single integer key. (0, 2, 3) -> 23."""
    width = check_field_width(field_width)
    comps = normalize_order(order, width)
    if dimension_count < 0:
        raise InvalidArgumentError(f"dimension_count must be >= 0, got {dimension_count}")

    n = max(int(dimension_count), len(comps))
    base = 10**width
    label = 0
    for i, comp in enumerate(comps):
        label += comp * base ** (n - i - 1)
    return label


def list_to_word(order: Iterable[int] | np.ndarray, field_width: int = DEFAULT_FIELD_WIDTH) -> str:
    """Pack an order into a printable key. (1, 2, 3) -> "123"."""
    width = check_field_width(field_width)
    comps = normalize_order(order, width)
    return "".join(f"{comp:0{width}d}" for comp in comps)


def label_to_list(label: int, dimension_count: int, field_width: int = DEFAULT_FIELD_WIDTH) -> Order:
    """
    Unpack a label into a `dimension_count`-long order.

    Diagnostics only: a label does not remember the arity it was built with.
    """
    width = check_field_width(field_width)
    label = operator.index(label)
    if label < 0:
        raise InvalidArgumentError(f"Label must be non-negative, got {label}")
    if dimension_count < 1:
        raise InvalidArgumentError("label_to_list requires dimension_count >= 1")

    base = 10**width
    comps = []
    rest = label
    for _ in range(dimension_count):
        rest, comp = divmod(rest, base)
        comps.append(comp)
    if rest:
        raise InvalidArgumentError(
            f"Label {label} does not fit {dimension_count} fields of width {width}"
        )
    return tuple(reversed(comps))


def max_arity(orders: Sequence[Sequence[int]]) -> int:
    """Largest order length in a list of orders (0 if empty)."""
    return max((len(o) for o in orders), default=0)


def label_arity(label: int, field_width: int = DEFAULT_FIELD_WIDTH) -> int:
    """Fewest fields of `field_width` digits that hold `label` (at least 1)."""
    width = check_field_width(field_width)
    digits = len(str(operator.index(label)))
    return max(1, -(-digits // width))
