"""
Stream persistence for IndexedOwningList.

- write_mapped_list / read_mapped_list: one JSON document on a text stream.
- save_mapped_list / load_mapped_list: same document in a file (atomic write).

Document layout:

    {
      "format": "indexed_owning_list",
      "version": 1,
      "size": 6,
      "dimension_count": 3,
      "field_width": 1,
      "map": {"0": 0, "100": 1, ...},
      "entries": [payload | null, ...]
    }

Element payloads are produced by a serializer callable and turned back into
elements by a constructor policy constructor(slot, payload).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, TextIO

import numpy as np

from core.errors import InvalidArgumentError
from core.indexed_list import IndexedOwningList

logger = logging.getLogger(__name__)

FORMAT_NAME = "indexed_owning_list"
FORMAT_VERSION = 1

Serializer = Callable[[Any], Any]
Constructor = Callable[[int, Any], Any]


def default_serializer(element: Any) -> Any:
    """numpy arrays/scalars -> lists/Python numbers; everything else as-is."""
    if isinstance(element, np.ndarray):
        return element.tolist()
    if isinstance(element, np.generic):
        return element.item()
    return element


def default_constructor(slot: int, payload: Any) -> Any:
    return payload


def mapped_list_to_dict(lst: IndexedOwningList, serializer: Serializer = default_serializer) -> Dict[str, Any]:
    entries = []
    for slot in range(lst.size):
        entries.append(serializer(lst[slot]) if lst.is_set(slot) else None)
    return {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "size": int(lst.size),
        "dimension_count": int(lst.dimension_count),
        "field_width": int(lst.field_width),
        "map": {str(k): int(s) for k, s in sorted(lst.map().items())},
        "entries": entries,
    }


def _require(raw: Mapping[str, Any], name: str, kind: type) -> Any:
    if name not in raw:
        raise InvalidArgumentError(f"Malformed stream: missing '{name}'")
    value = raw[name]
    if kind is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise InvalidArgumentError(f"Malformed stream: '{name}' must be an integer, got {value!r}")
    if kind is not int and not isinstance(value, kind):
        raise InvalidArgumentError(f"Malformed stream: '{name}' must be {kind.__name__}, got {type(value).__name__}")
    return value


def mapped_list_from_dict(raw: Any, constructor: Constructor = default_constructor) -> IndexedOwningList:
    if not isinstance(raw, dict):
        raise InvalidArgumentError(f"Malformed stream: expected a JSON object, got {type(raw).__name__}")
    fmt = raw.get("format")
    if fmt != FORMAT_NAME:
        raise InvalidArgumentError(f"Malformed stream: format {fmt!r} != {FORMAT_NAME!r}")
    version = _require(raw, "version", int)
    if version > FORMAT_VERSION:
        raise InvalidArgumentError(f"Unsupported stream version {version} (max {FORMAT_VERSION})")

    size = _require(raw, "size", int)
    dimension_count = _require(raw, "dimension_count", int)
    field_width = _require(raw, "field_width", int)
    map_raw = _require(raw, "map", dict)
    entries = _require(raw, "entries", list)

    if len(entries) != size:
        raise InvalidArgumentError(f"Malformed stream: {len(entries)} entries for size {size}")

    mapping: Dict[int, int] = {}
    for key_text, slot in map_raw.items():
        try:
            key = int(key_text)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"Malformed stream: map key {key_text!r} is not an integer") from None
        if isinstance(slot, bool) or not isinstance(slot, int):
            raise InvalidArgumentError(f"Malformed stream: map slot {slot!r} is not an integer")
        mapping[key] = slot

    lst = IndexedOwningList.from_map(
        size,
        mapping,
        dimension_count=dimension_count,
        field_width=field_width,
    )
    for slot, payload in enumerate(entries):
        if payload is None:
            continue
        lst.set(slot, constructor(slot, payload))
    return lst


def write_mapped_list(
    lst: IndexedOwningList,
    stream: TextIO,
    serializer: Serializer = default_serializer,
) -> None:
    """Write `lst` as one JSON document to a text stream."""
    json.dump(mapped_list_to_dict(lst, serializer), stream, indent=2)
    stream.write("\n")


def read_mapped_list(stream: TextIO, constructor: Constructor = default_constructor) -> IndexedOwningList:
    """Rebuild a list from a text stream written by write_mapped_list."""
    try:
        raw = json.load(stream)
    except json.JSONDecodeError as exc:
        raise InvalidArgumentError(f"Malformed stream: {exc}") from exc
    lst = mapped_list_from_dict(raw, constructor)
    logger.debug("Read %r", lst)
    return lst


def save_mapped_list(
    lst: IndexedOwningList,
    path: str | Path,
    serializer: Serializer = default_serializer,
) -> Path:
    """
    Write `lst` to a file.

    Uses atomic write (temp file + rename) to avoid corruption.
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = out_path.with_name(out_path.name + ".tmp")

    with open(tmp_path, "w", encoding="utf-8") as f:
        write_mapped_list(lst, f, serializer)

    os.replace(tmp_path, out_path)
    logger.info("Wrote mapped list: %s", out_path)
    return out_path


def load_mapped_list(path: str | Path, constructor: Constructor = default_constructor) -> IndexedOwningList:
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Mapped list file not found: {in_path}")
    with open(in_path, "r", encoding="utf-8") as f:
        return read_mapped_list(f, constructor)
