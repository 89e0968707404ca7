"""
Stream persistence of IndexedOwningList.

Tests:
1. Written document carries size/map/dimension_count/entries
2. Reading back with a constructor policy restores elements and empty slots
3. File save is atomic (no leftover .tmp) and loadable
4. Malformed streams raise InvalidArgumentError
"""

from __future__ import annotations

import io
import json

import numpy as np
import pytest

from core.errors import InvalidArgumentError
from core.indexed_list import IndexedOwningList
from streams.serialize import (
    load_mapped_list,
    mapped_list_to_dict,
    read_mapped_list,
    save_mapped_list,
    write_mapped_list,
)

ORDERS = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1), (2, 0, 0), (2, 1, 0)]


def _moments() -> IndexedOwningList:
    lst = IndexedOwningList(7, ORDERS)
    for slot, order in enumerate(ORDERS[:4]):
        lst.set(order, np.full(3, float(slot)))
    return lst


def test_document_layout():
    doc = mapped_list_to_dict(_moments())
    assert doc["format"] == "indexed_owning_list"
    assert doc["size"] == 7
    assert doc["dimension_count"] == 3
    assert doc["field_width"] == 1
    assert doc["map"]["210"] == 5
    assert doc["entries"][1] == [1.0, 1.0, 1.0]
    assert doc["entries"][4] is None
    assert doc["entries"][6] is None
    json.dumps(doc)


def test_stream_restores_list_with_constructor_policy():
    buf = io.StringIO()
    write_mapped_list(_moments(), buf)
    buf.seek(0)

    seen = []

    def construct(slot, payload):
        seen.append(slot)
        return np.asarray(payload, dtype=np.float64)

    lst = read_mapped_list(buf, construct)
    assert seen == [0, 1, 2, 3]
    assert lst.size == 7
    assert lst.dimension_count == 3
    np.testing.assert_allclose(lst(0, 0, 1), [3.0, 3.0, 3.0])
    assert lst.found(2, 1, 0)
    assert not lst.is_set((2, 1, 0))
    assert not lst.is_set(6)


def test_save_and_load_file(tmp_path):
    path = tmp_path / "state" / "moments.json"
    out = save_mapped_list(_moments(), path)
    assert out == path
    assert path.exists()
    assert not (tmp_path / "state" / "moments.json.tmp").exists()

    lst = load_mapped_list(path)
    assert lst(1, 0, 0) == [1.0, 1.0, 1.0]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_mapped_list(tmp_path / "nope.json")


def _doc(**overrides):
    doc = mapped_list_to_dict(_moments())
    doc.update(overrides)
    return io.StringIO(json.dumps(doc))


@pytest.mark.parametrize(
    "stream",
    [
        io.StringIO("not json"),
        io.StringIO("[1, 2, 3]"),
        _doc(format="something_else"),
        _doc(version=99),
        _doc(size="7"),
        _doc(entries=[None]),
        _doc(map={"abc": 0}),
        _doc(map={"100": 1.5}),
        _doc(map={"100": 9}),
        _doc(field_width=0),
    ],
)
def test_malformed_stream_rejected(stream):
    with pytest.raises(InvalidArgumentError):
        read_mapped_list(stream)


def test_missing_key_rejected():
    doc = mapped_list_to_dict(_moments())
    del doc["map"]
    with pytest.raises(InvalidArgumentError):
        read_mapped_list(io.StringIO(json.dumps(doc)))
