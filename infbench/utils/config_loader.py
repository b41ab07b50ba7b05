# infbench/utils/config_loader.py

"""Config loading and merging.

- Benchmark knobs live in YAML (`configs/benchmark.yaml`).
- Several files merge into one resolved dict; later files win.
- Missing optional keys are read through `lookup` with a default.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml


def _deep_update(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively update a nested dict.
    Values in `other` override values in `base`.
    """
    for k, v in other.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            base[k] = _deep_update(dict(base[k]), v)
        else:
            base[k] = copy.deepcopy(v)
    return base


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load a YAML file into a dict (empty file -> {})."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{p}: top-level YAML value must be a mapping, got {type(data).__name__}")
    return dict(data)


def merge_configs(paths: Iterable[str | Path],
                  overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Merge multiple YAML configs in order, then apply in-memory overrides."""
    merged: Dict[str, Any] = {}
    for p in paths:
        merged = _deep_update(merged, load_yaml(p))
    if overrides:
        merged = _deep_update(merged, overrides)
    return merged


def lookup(cfg: Mapping[str, Any], dotted: str, default: Any = None) -> Any:
    """Read `a.b.c` from a nested mapping; `default` when any level is missing."""
    node: Any = cfg
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return default if node is None else node
