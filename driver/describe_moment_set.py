"""
Driver: load a moment-set YAML file, build the indexed list and report it.

Responsibilities:
- Load MomentCaseConfig from YAML.
- Build the IndexedOwningList (optionally populated with a constant value).
- Log the order -> key -> slot table, print JSON on request.
- Optionally persist the list as a stream document.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import yaml

from core.errors import MappedListError
from core.logging_utils import get_log_level_from_env, setup_logging
from core.moment_set import build_moment_list, describe_moment_list
from core.types import LoggingConfig, MomentCaseConfig, MomentSetConfig
from streams.serialize import save_mapped_list

logger = logging.getLogger(__name__)

_MOMENT_SET_KEYS = {"name", "orders", "dimension_count", "field_width", "size"}
_LOGGING_KEYS = {"level", "log_file"}


def _read_yaml_text(cfg_file: Path) -> str:
    try:
        return cfg_file.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return cfg_file.read_text()


def _optional_int(raw: dict, name: str) -> Optional[int]:
    value = raw.get(name)
    return None if value is None else int(value)


def load_case_config(cfg_path: str | Path) -> MomentCaseConfig:
    """Load YAML file into MomentCaseConfig."""
    cfg_file = Path(cfg_path).expanduser().resolve()
    if not cfg_file.exists():
        raise FileNotFoundError(f"Config file not found at {cfg_file}")
    raw = yaml.safe_load(_read_yaml_text(cfg_file)) or {}
    if not isinstance(raw, dict) or "moment_set" not in raw:
        raise ValueError(f"{cfg_file}: missing top-level 'moment_set' block.")

    ms_raw = raw["moment_set"] or {}
    unknown = set(ms_raw) - _MOMENT_SET_KEYS
    if unknown:
        raise ValueError(f"Unsupported keys in moment_set: {sorted(unknown)}")
    moment_set = MomentSetConfig(
        name=str(ms_raw.get("name", "moment")),
        orders=[tuple(o) for o in (ms_raw.get("orders") or [])],
        dimension_count=_optional_int(ms_raw, "dimension_count"),
        field_width=int(ms_raw.get("field_width", 1)),
        size=_optional_int(ms_raw, "size"),
    )

    log_raw = raw.get("logging") or {}
    unknown = set(log_raw) - _LOGGING_KEYS
    if unknown:
        raise ValueError(f"Unsupported keys in logging: {sorted(unknown)}")
    log_file = log_raw.get("log_file")
    if log_file:
        log_path = Path(log_file)
        log_file = str(log_path if log_path.is_absolute() else (cfg_file.parent / log_path).resolve())
    logging_cfg = LoggingConfig(level=str(log_raw.get("level", "INFO")), log_file=log_file)

    return MomentCaseConfig(moment_set=moment_set, logging=logging_cfg)


def run_case(
    cfg_path: str,
    *,
    init_value: Optional[float] = None,
    save_path: Optional[str] = None,
    as_json: bool = False,
) -> int:
    """Build and report one moment set; returns a process exit code."""
    try:
        cfg = load_case_config(cfg_path)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
        setup_logging(level=get_log_level_from_env())
        logger.error("Failed to load config %s: %s", cfg_path, exc)
        return 2

    setup_logging(level=get_log_level_from_env(cfg.logging.level), log_file=cfg.logging.log_file)
    ms = cfg.moment_set

    factory = None
    if init_value is not None:

        def factory(order, slot):
            return np.float64(init_value)

    try:
        lst = build_moment_list(ms, factory)
        summary = describe_moment_list(lst, name=ms.name)
    except MappedListError as exc:
        logger.error("Invalid moment set '%s': %s", ms.name, exc)
        return 2

    logger.info(
        "Moment set '%s': size=%d mapped=%d set=%d dimension_count=%d",
        ms.name,
        summary["size"],
        summary["n_mapped"],
        summary["n_set"],
        summary["dimension_count"],
    )
    for entry in summary["entries"]:
        logger.info(
            "  %-16s order=%s key=%d slot=%d set=%s",
            entry["field"],
            tuple(entry["order"]),
            entry["key"],
            entry["slot"],
            entry["set"],
        )

    if as_json:
        json.dump(summary, sys.stdout, indent=2)
        sys.stdout.write("\n")

    if save_path:
        save_mapped_list(lst, save_path)

    return 0


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and describe a moment set.")
    parser.add_argument("case_yaml", help="Path to moment-set YAML file.")
    parser.add_argument(
        "--init",
        type=float,
        default=None,
        dest="init_value",
        help="Populate every configured moment with this value (default: leave slots empty).",
    )
    parser.add_argument(
        "--save",
        default=None,
        help="Write the built list to this path as a stream document.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the order/key/slot table as JSON on stdout.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    return run_case(
        args.case_yaml,
        init_value=args.init_value,
        save_path=args.save,
        as_json=args.json,
    )


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
