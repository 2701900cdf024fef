"""Settings loading with bundled defaults and external override support.

Settings are plain nested dictionaries read from YAML files.  Files are
merged in this order, later files overriding earlier ones key by key:

1. Bundled ``data/defaults.yaml``
2. User config file (``~/.config/meshport/config.yaml``)
3. Files listed in the ``MESHPORT_CONFIG`` environment variable

Environment Variables:
    MESHPORT_CONFIG: ``os.pathsep`` separated list of YAML files.

Example:
    export MESHPORT_CONFIG="/path/to/site.yaml:/path/to/project.yaml"
"""

from __future__ import annotations

import copy
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml

__all__ = [
    "MESHPORT_CONFIG",
    "get_settings",
    "get",
    "clear_cache",
]

# Environment variable name for extra config files
MESHPORT_CONFIG = "MESHPORT_CONFIG"

_BUNDLED_DEFAULTS = Path(__file__).parent / "data" / "defaults.yaml"
_USER_CONFIG = Path("~/.config/meshport/config.yaml")

_MISSING = object()


def clear_cache() -> None:
    """Forget cached settings.

    Call this after changing ``MESHPORT_CONFIG`` or editing a config file.
    """
    _load_settings.cache_clear()


def _config_files() -> List[Path]:
    files = [_BUNDLED_DEFAULTS, _USER_CONFIG.expanduser()]
    env_path = os.environ.get(MESHPORT_CONFIG)
    if env_path:
        for p in env_path.split(os.pathsep):
            p = p.strip()
            if p:
                files.append(Path(p).expanduser())
    return files


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping at top level")
    return data


@lru_cache(maxsize=None)
def _load_settings() -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    for path in _config_files():
        if path.is_file():
            _merge(settings, _read_yaml(path))
    return settings


def get_settings() -> Dict[str, Any]:
    """Return a copy of the merged settings dictionary."""
    return copy.deepcopy(_load_settings())


def get(key: str, default: Any = None) -> Any:
    """Look up a dotted key such as ``"lwo.surface_name"``."""
    node: Any = _load_settings()
    for part in key.split("."):
        if not isinstance(node, dict):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return copy.deepcopy(node)
