"""
Typed containers for moment-set configuration (YAML-aligned).

YAML layout:

    moment_set:
      name: moments
      dimension_count: 3   # optional, default = longest order
      field_width: 1       # optional
      size: 6              # optional, default = number of orders
      orders:
        - [0, 0, 0]
        - [1, 0, 0]
    logging:
      level: INFO
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .encoding import DEFAULT_FIELD_WIDTH, normalize_order


@dataclass(slots=True)
class MomentSetConfig:
    """Moment set definition (YAML moment_set block)."""

    name: str
    orders: List[Tuple[int, ...]] = field(default_factory=list)
    dimension_count: Optional[int] = None
    field_width: int = DEFAULT_FIELD_WIDTH
    size: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("moment_set.name must be provided.")
        if not self.orders:
            raise ValueError(f"moment_set '{self.name}' must list at least one order.")
        if self.field_width < 1:
            raise ValueError(f"moment_set.field_width must be >= 1, got {self.field_width}")
        self.orders = [normalize_order(o, self.field_width) for o in self.orders]
        if self.dimension_count is not None and self.dimension_count < 0:
            raise ValueError(f"moment_set.dimension_count must be >= 0, got {self.dimension_count}")
        if self.size is not None and self.size < len(self.orders):
            raise ValueError(
                f"moment_set.size={self.size} is smaller than the number of orders ({len(self.orders)})"
            )

    @property
    def n_slots(self) -> int:
        return len(self.orders) if self.size is None else int(self.size)


@dataclass(slots=True)
class LoggingConfig:
    """Logging options (YAML logging block)."""

    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass(slots=True)
class MomentCaseConfig:
    """Top-level case file."""

    moment_set: MomentSetConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
