"""
YAML → typed settings loader.

Python defaults from config.py are merged with an optional user override
file at ``~/.liftlog/config.yaml`` (or ``$LIFTLOG_HOME/config.yaml``).

Usage:
    from liftlog.core.config_loader import load_settings
    settings = load_settings()
    settings.data_dir, settings.zero_rir_policy

If the user override file exists but cannot be parsed, or holds values
outside the allowed set, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .config import (
    DEFAULT_WEIGHT_UNIT,
    DEFAULT_ZERO_RIR_POLICY,
    RIR_MAX,
    WEIGHT_UNITS,
    ZERO_RIR_POLICIES,
)

HOME_ENV_VAR = "LIFTLOG_HOME"
CONFIG_FILE_NAME = "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Resolved user settings."""

    data_dir: Path
    weight_unit: str = DEFAULT_WEIGHT_UNIT
    zero_rir_policy: str = DEFAULT_ZERO_RIR_POLICY
    rir_max: int = RIR_MAX


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; warn and return {} when it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        warnings.warn(f"liftlog: ignoring unreadable config {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(f"liftlog: ignoring config {path}: top level must be a mapping")
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _check_overrides(raw: dict[str, Any]) -> list[str]:
    """Return a list of problems with user-supplied values."""
    problems: list[str] = []
    if "weight_unit" in raw and raw["weight_unit"] not in WEIGHT_UNITS:
        problems.append(f"weight_unit must be one of {WEIGHT_UNITS}")
    if "zero_rir_policy" in raw and raw["zero_rir_policy"] not in ZERO_RIR_POLICIES:
        problems.append(f"zero_rir_policy must be one of {ZERO_RIR_POLICIES}")
    if "rir_max" in raw:
        v = raw["rir_max"]
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            problems.append("rir_max must be a non-negative integer")
    return problems


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_base_dir() -> Path:
    """Return $LIFTLOG_HOME, or ~/.liftlog when it is not set."""
    env = os.environ.get(HOME_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".liftlog"


def get_user_config_path() -> Path | None:
    """Return the user config.yaml if it exists, else None."""
    p = get_base_dir() / CONFIG_FILE_NAME
    return p if p.exists() else None


def default_settings_dict() -> dict[str, Any]:
    base = get_base_dir()
    return {
        "data_dir": str(base / "data"),
        "weight_unit": DEFAULT_WEIGHT_UNIT,
        "zero_rir_policy": DEFAULT_ZERO_RIR_POLICY,
        "rir_max": RIR_MAX,
    }


def load_settings(config_path: Path | None = None) -> Settings:
    """
    Load and merge settings.

    Load order (later overrides earlier):
    1. Python defaults from config.py
    2. User override file (config_path, or the default location)

    Args:
        config_path: Explicit override file; defaults to the user config

    Returns:
        Frozen Settings
    """
    merged = default_settings_dict()

    path = config_path if config_path is not None else get_user_config_path()
    if path is not None and path.exists():
        user_cfg = _load_yaml_file(path)
        problems = _check_overrides(user_cfg)
        if problems:
            warnings.warn(f"liftlog: ignoring config {path}: {'; '.join(problems)}")
        elif user_cfg:
            merged = _deep_merge(merged, user_cfg)

    return Settings(
        data_dir=Path(str(merged["data_dir"])).expanduser(),
        weight_unit=str(merged["weight_unit"]),
        zero_rir_policy=str(merged["zero_rir_policy"]),
        rir_max=int(merged["rir_max"]),
    )
