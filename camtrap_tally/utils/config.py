from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

log = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "project": {"name": "camtrap_tally"},
    "logging": {"level": "INFO"},
    "paths": {
        "input_dir": "input",
        "output_dir": "output",
        "output_prefix": "out-",
    },
    "tally": {
        "interval_minutes": None,
        "matrix_mode": False,
        "include_camera_id": True,
        "skip_header": {"flat": True, "matrix": True},
        "activity_file": None,
    },
}


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping/dict: {path}")
    return data


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, Mapping):
            out[k] = _deep_merge(out[k], v)  # type: ignore[arg-type]
        else:
            out[k] = v
    return out


def _load_with_parents(path: Path) -> Dict[str, Any]:
    cfg = load_yaml(path)

    extends = cfg.pop("extends", None)
    merged: Dict[str, Any] = {}
    if extends:
        if isinstance(extends, (str, Path)):
            parents = [extends]
        elif isinstance(extends, list):
            parents = extends
        else:
            raise ValueError("Config key 'extends' must be a string or a list of strings.")

        for parent in parents:
            parent_path = Path(parent)
            if not parent_path.is_absolute():
                parent_path = (path.parent / parent_path).resolve()
            merged = _deep_merge(merged, _load_with_parents(parent_path))

    return _deep_merge(merged, cfg)


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Built-in defaults, overlaid with a YAML file when one is given.

    The file may inherit from others:
      extends: "base.yaml"
    or
      extends:
        - "base.yaml"
        - "site.yaml"
    Parent paths resolve relative to the including file; later files win.
    """
    if path is None:
        return copy.deepcopy(DEFAULTS)

    path = Path(path)
    merged = _deep_merge(copy.deepcopy(DEFAULTS), _load_with_parents(path))
    merged.setdefault("_meta", {})
    merged["_meta"]["config_path"] = str(path.resolve())
    return merged


def skip_header_for(cfg: Mapping[str, Any], matrix_mode: bool) -> bool:
    """`tally.skip_header` is either one bool or a {flat, matrix} mapping."""
    value = cfg.get("tally", {}).get("skip_header", True)
    if isinstance(value, Mapping):
        return bool(value.get("matrix" if matrix_mode else "flat", True))
    return bool(value)


def ensure_dirs(cfg: Mapping[str, Any]) -> Dict[str, Path]:
    """
    Creates the input and output folders named under `paths`.
    Safe to call multiple times. Returns the resolved folders by key.
    """
    paths = cfg.get("paths", {}) or {}
    out: Dict[str, Path] = {}
    for key in ("input_dir", "output_dir"):
        p = paths.get(key)
        if not p or not str(p).strip():
            raise ValueError(f"Config is missing paths.{key}")
        folder = Path(p)
        if folder.exists():
            log.info('Folder "%s" exists, skipping creation...', folder)
        else:
            log.info('Folder "%s" doesn\'t exist, creating...', folder)
            folder.mkdir(parents=True, exist_ok=True)
        out[key] = folder
    return out
