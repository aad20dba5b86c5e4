"""Config for the WQP pull"""

# pylint: disable=W1201

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from src.utils.pull_logger import pullLogger


# -----------------------------------------------------------------------------
# Load .env from project root
# -----------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent.parent
env_path = ROOT / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=False)

WQP_BASE_URL = "https://www.waterqualitydata.us"


# -----------------------------------------------------------------------------
# Helpers for parsing & validation
# -----------------------------------------------------------------------------
def _clean(raw: str) -> str:
    return raw.strip().strip("'").strip('"')

def _get_str(name: str, default: Optional[str] = None) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        if default is None:
            msg = f"Missing required env var: {name}"
            pullLogger.error(msg)
            raise RuntimeError(msg)
        return default
    return _clean(raw)

def _get_float(name: str, default: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        if default is None:
            msg = f"Missing required float env var: {name}"
            pullLogger.error(msg)
            raise RuntimeError(msg)
        return default
    try:
        return float(_clean(raw))
    except ValueError as e:
        msg = f"Invalid float for {name}: {raw!r}"
        pullLogger.error(msg)
        raise RuntimeError(msg) from e

def _get_int(name: str, default: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        if default is None:
            msg = f"Missing required int env var: {name}"
            pullLogger.error(msg)
            raise RuntimeError(msg)
        return default
    try:
        return int(_clean(raw))
    except ValueError as e:
        msg = f"Invalid int for {name}: {raw!r}"
        pullLogger.error(msg)
        raise RuntimeError(msg) from e

def _parse_date(name: str, default: date) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default.isoformat()
    s = _clean(raw)
    try:
        return date.fromisoformat(s).isoformat()
    except ValueError as e:
        msg = f"Invalid date for {name}: {raw!r} (expected YYYY-MM-DD)"
        pullLogger.error(msg)
        raise RuntimeError(msg) from e

def _log_level_to_std(name: str) -> str:
    lvl = _get_str(name, "INFO").upper()
    valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
    if lvl not in valid:
        msg = f"Invalid WQP_LOG_LEVEL {lvl!r}. Choose one of {sorted(valid)}."
        pullLogger.error(msg)
        raise RuntimeError(msg)
    return lvl


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PartitionConfig:
    """Per-partition caps: max results (target_pull_size) and max sites (target_inv_size)."""
    target_pull_size: int
    target_inv_size: int

    def __post_init__(self) -> None:
        if self.target_pull_size <= 0:
            raise ValueError("target_pull_size must be positive")
        if self.target_inv_size <= 0:
            raise ValueError("target_inv_size must be positive")


@dataclass(frozen=True)
class PullParams:
    """
    What to ask WQP for.

    characteristic_names maps a constituent (e.g. "temperature") to every
    WQP characteristicName synonym for it; drop_location_types lists
    ResolvedMonitoringLocationTypeName values excluded from partitioning.
    """
    characteristic_names: Mapping[str, Tuple[str, ...]]
    drop_location_types: Tuple[str, ...] = ()

    @property
    def flat_characteristic_names(self) -> List[str]:
        """All synonyms of all constituents, in file order."""
        return [name for names in self.characteristic_names.values() for name in names]


@dataclass(frozen=True)
class PullConfig:
    """Run-scoped settings for one pull cycle"""
    # System
    log_level: str

    # Remote
    wqp_base_url: str
    min_interval_sec: float

    # Inputs
    pull_params_file: str
    partition: PartitionConfig
    pull_date: str

    # Outputs
    output_folder: str = field(default="out")

    @property
    def inventory_file(self) -> str:
        """Feather file holding the combined inventory."""
        return os.path.join(self.output_folder, "wqp_inventory.feather")

    @property
    def partitions_file(self) -> str:
        """Feather file holding the partition assignments."""
        return os.path.join(self.output_folder, "wqp_partitions.feather")


def load_pull_params(path: str | os.PathLike) -> PullParams:
    """Read the YAML pull parameters (characteristicName, DropLocationTypeName)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Cannot read pull parameters from {path}: {e}"
        pullLogger.error(msg)
        raise RuntimeError(msg) from e

    groups = raw.get("characteristicName")
    if not isinstance(groups, dict) or not groups:
        msg = f"{path}: characteristicName must be a non-empty mapping of constituent -> synonyms"
        pullLogger.error(msg)
        raise RuntimeError(msg)

    names: Dict[str, Tuple[str, ...]] = {}
    for constituent, synonyms in groups.items():
        if isinstance(synonyms, str):
            synonyms = [synonyms]
        names[str(constituent)] = tuple(str(s) for s in synonyms or ())

    drop = raw.get("DropLocationTypeName") or []
    if isinstance(drop, str):
        drop = [drop]
    return PullParams(characteristic_names=names, drop_location_types=tuple(str(d) for d in drop))


def load_config() -> PullConfig:
    """Load config"""
    log_level = _log_level_to_std("WQP_LOG_LEVEL")

    wqp_base_url = _get_str("WQP_BASE_URL", WQP_BASE_URL).rstrip("/")
    min_interval_sec = _get_float("WQP_MIN_INTERVAL_SEC", 0.0)

    pull_params_file = _get_str("WQP_PULL_PARAMS_FILE", str(ROOT / "config" / "wqp_pull_params.yml"))
    try:
        partition = PartitionConfig(
            target_pull_size=_get_int("WQP_TARGET_PULL_SIZE"),
            target_inv_size=_get_int("WQP_TARGET_INV_SIZE"),
        )
    except ValueError as e:
        pullLogger.error(str(e))
        raise RuntimeError(str(e)) from e
    pull_date = _parse_date("WQP_PULL_DATE", date.today())

    output_folder = _get_str("WQP_OUTPUT_FOLDER", "out")

    cfg = PullConfig(
        log_level=log_level,
        wqp_base_url=wqp_base_url,
        min_interval_sec=min_interval_sec,
        pull_params_file=pull_params_file,
        partition=partition,
        pull_date=pull_date,
        output_folder=output_folder,
    )

    pullLogger.info("WQP_LOG_LEVEL: " + cfg.log_level)
    pullLogger.info("WQP: " + cfg.wqp_base_url)
    pullLogger.info("Partition targets (results, sites): (" + str(partition.target_pull_size) + ","
                    + str(partition.target_inv_size) + ")")
    pullLogger.info("Pull date: " + cfg.pull_date)
    pullLogger.info("Output folder: " + cfg.output_folder)
    return cfg
