"""
Build and describe moment lists from a MomentSetConfig.

Slot order follows the order list in the config: orders[i] -> slot i.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .encoding import Order
from .indexed_list import IndexedOwningList
from .types import MomentSetConfig

logger = logging.getLogger(__name__)

ElementFactory = Callable[[Order, int], Any]


def build_moment_list(
    cfg: MomentSetConfig,
    factory: Optional[ElementFactory] = None,
) -> IndexedOwningList:
    """
    Build the moment list described by `cfg`.

    factory(order, slot), when given, constructs the element stored for each
    configured order; otherwise every slot starts empty.
    """
    lst: IndexedOwningList = IndexedOwningList(
        cfg.n_slots,
        cfg.orders,
        dimension_count=cfg.dimension_count,
        field_width=cfg.field_width,
    )
    logger.debug(
        "Built moment list '%s': slots=%d orders=%d dimension_count=%d field_width=%d",
        cfg.name,
        lst.size,
        len(cfg.orders),
        lst.dimension_count,
        lst.field_width,
    )

    if factory is not None:
        for slot, order in enumerate(cfg.orders):
            lst.set(order, factory(order, slot))
        logger.debug("Populated %d elements of '%s'", len(cfg.orders), cfg.name)

    return lst


def order_table(lst: IndexedOwningList) -> np.ndarray:
    """(n_mapped, dimension_count) int64 array of mapped orders, in slot order."""
    rows: List[Tuple[int, ...]] = [order for order, _ in lst.orders()]
    if not rows:
        return np.zeros((0, lst.dimension_count), dtype=np.int64)
    return np.asarray(rows, dtype=np.int64)


def describe_moment_list(lst: IndexedOwningList, name: str = "moment") -> Dict[str, object]:
    """Plain-dict summary of a moment list (for logs / JSON)."""
    entries = []
    for order, slot in lst.orders():
        entries.append(
            {
                "order": list(order),
                "key": int(lst.key(order)),
                "word": lst.word(order),
                "field": f"{name}.{lst.word(order)}",
                "slot": int(slot),
                "set": bool(lst.is_set(slot)),
            }
        )
    return {
        "size": int(lst.size),
        "dimension_count": int(lst.dimension_count),
        "field_width": int(lst.field_width),
        "n_mapped": len(entries),
        "n_set": sum(1 for e in entries if e["set"]),
        "entries": entries,
    }
