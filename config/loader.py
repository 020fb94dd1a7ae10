#!/usr/bin/env python3
"""config/loader.py

Loader for the waiter's YAML config.

Design goals:
- No extra deps beyond PyYAML.
- Every key must be a WaiterConfig field; typos fail fast.
- Deterministic config hash (sha256 of file bytes) for the startup log.
"""

from __future__ import annotations

import hashlib
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from config.waiter_schema import WaiterConfig


class ConfigError(RuntimeError):
    pass


def config_hash(path: str | Path) -> str:
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML: {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must be a YAML mapping (dict at top-level)")
    return raw


def load_waiter_config(
    path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> WaiterConfig:
    """Build a WaiterConfig from defaults, an optional YAML file and overrides.

    Overrides with a value of None are ignored, so argparse namespaces can be
    passed through directly.
    """
    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_read_yaml(Path(path)))
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(values) - WaiterConfig.field_names())
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    try:
        return replace(WaiterConfig(), **values)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid waiter config: {exc}") from exc
