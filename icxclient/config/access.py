"""Process-wide cached ClientConfig, keyed by config file path."""

from __future__ import annotations

import threading
from pathlib import Path

from icxclient.config.loader import get_config_path, load_config
from icxclient.config.schema import ClientConfig

_lock = threading.RLock()
_configs: dict[Path, ClientConfig] = {}


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> ClientConfig:
    path = _resolve(config_path)
    with _lock:
        config = None if force_reload else _configs.get(path)
        if config is None:
            config = _configs[path] = load_config(path)
        return config


def set_config(config: ClientConfig, *, config_path: Path | None = None) -> None:
    """Install ``config`` as the cached value without touching the file."""
    with _lock:
        _configs[_resolve(config_path)] = config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Drop one cached entry, or every entry when no path is given."""
    with _lock:
        if config_path is None:
            _configs.clear()
        else:
            _configs.pop(_resolve(config_path), None)
