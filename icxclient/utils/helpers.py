"""Small shared helpers."""

from __future__ import annotations

import itertools
import threading
from pathlib import Path

_id_lock = threading.Lock()
_id_counter = itertools.count(1)


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def next_request_id() -> int:
    """Return a process-wide, strictly increasing JSON-RPC request id."""
    with _id_lock:
        return next(_id_counter)


def strip_hex_prefix(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value
