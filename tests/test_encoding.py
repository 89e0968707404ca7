"""
Order encoding tests.

Tests:
1. Label table for the six reference orders (field_width=1)
2. Short orders are padded to dimension_count
3. No collisions among distinct orders of equal arity
4. Leading-component ordering is preserved
5. Word keys are stable and padded to field_width
6. Negative / oversized / non-integer components are rejected
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from core.encoding import (
    DEFAULT_FIELD_WIDTH,
    label_to_list,
    list_to_label,
    list_to_word,
    normalize_order,
)
from core.errors import InvalidArgumentError
from core.indexed_list import IndexedOwningList

REFERENCE_TABLE = [
    ((0, 0, 0), 0),
    ((1, 0, 0), 100),
    ((0, 1, 0), 10),
    ((0, 0, 1), 1),
    ((2, 0, 0), 200),
    ((2, 1, 0), 210),
]


@pytest.mark.parametrize("order,label", REFERENCE_TABLE)
def test_reference_labels(order, label):
    assert list_to_label(order) == label
    assert list_to_label(order, 3) == label
    assert IndexedOwningList.list_to_label(order, 3) == label


def test_default_field_width_is_single_digit():
    assert DEFAULT_FIELD_WIDTH == 1
    assert list_to_label((0, 2, 3)) == 23


def test_short_order_padded_to_dimension_count():
    assert list_to_label((1,), 3) == 100
    assert list_to_label((2, 1), 3) == 210
    assert list_to_label((1,)) == 1


def test_numpy_orders_accepted():
    assert list_to_label(np.array([2, 1, 0])) == 210
    assert list_to_label((np.int64(1), np.int32(0), 0)) == 100
    assert list_to_word(np.array([1, 2, 3], dtype=np.int16)) == "123"


def test_distinct_orders_never_collide():
    for width in (1, 2):
        top = 10**width
        orders = list(itertools.product(range(0, top, max(1, top // 7)), repeat=3))
        labels = {list_to_label(o, 3, width) for o in orders}
        assert len(labels) == len(orders)


def test_leading_component_ordering():
    assert list_to_label((2, 0, 0)) > list_to_label((1, 0, 0))
    assert list_to_label((0, 2, 0)) > list_to_label((0, 1, 0))
    assert list_to_label((0, 0, 9)) < list_to_label((0, 1, 0))


def test_wider_fields():
    assert list_to_label((1, 2, 3), 3, 2) == 10203
    assert list_to_label((12, 0), 2, 2) == 1200
    assert list_to_word((1, 2, 3), 2) == "010203"


def test_word_is_stable():
    first = list_to_word((1, 2, 3))
    assert first == "123"
    assert all(list_to_word([1, 2, 3]) == first for _ in range(5))


def test_label_to_list_inverts():
    for order, label in REFERENCE_TABLE:
        assert label_to_list(label, 3) == order
    assert label_to_list(10203, 3, 2) == (1, 2, 3)
    with pytest.raises(InvalidArgumentError):
        label_to_list(1000, 3)


@pytest.mark.parametrize(
    "order",
    [(-1, 0, 0), (0, 10, 0), (1.0, 0), (True, 0), "123", np.array([[1, 2]]), np.array([0.5, 1.0])],
)
def test_invalid_orders_rejected(order):
    with pytest.raises(InvalidArgumentError):
        list_to_label(order)


def test_invalid_field_width_rejected():
    with pytest.raises(InvalidArgumentError):
        normalize_order((1, 2), field_width=0)


def test_invalid_argument_is_value_error():
    with pytest.raises(ValueError):
        list_to_word((-3,))
