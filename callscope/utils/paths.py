"""Read-only accessors for schema-less provider payloads (mapping-of-mappings)."""
from __future__ import annotations

from typing import Any, Mapping


def get_path(obj: Any, path: str) -> Any:
    """Follow a dotted path through nested mappings; None if any hop is missing."""
    cur = obj
    for part in path.split("."):
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(part)
    return cur

