"""
File I/O utilities for the JSON-backed local stores.

All functions operate on explicit paths; nothing looks up directories implicitly.
"""

from __future__ import annotations

import json
import os
from typing import Any

from equilibrium.core.exceptions import StorageError


def safe_write(filepath: str, content: str, encoding: str = "utf-8") -> None:
    """Write content atomically, creating parent directories as needed.

    Content goes to a sibling ``.tmp`` file first and is moved into place
    with ``os.replace`` so readers never observe a half-written file.
    """
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    tmp_path = f"{filepath}.tmp"
    with open(tmp_path, "w", encoding=encoding) as f:
        f.write(content)
    os.replace(tmp_path, filepath)


def read_json_list(filepath: str) -> list[dict[str, Any]]:
    """Read a JSON array of objects.  A missing file reads as ``[]``."""
    if not os.path.exists(filepath):
        return []
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Cannot read {filepath}: {e}") from e
    if not isinstance(data, list):
        raise StorageError(f"Expected a JSON list in {filepath}, got {type(data).__name__}")
    return data


def write_json_list(filepath: str, items: list[dict[str, Any]]) -> None:
    try:
        safe_write(filepath, json.dumps(items, indent=2, default=str))
    except OSError as e:
        raise StorageError(f"Cannot write {filepath}: {e}") from e
