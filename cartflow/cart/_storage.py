"""
Client-local storage — the durable key/value area the cart lives in.

Storage — protocol, JSON-serializable values.
MemoryStorage — for tests and single-process use.
JsonFileStorage — one JSON document on disk, survives restarts.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Storage(Protocol):
    """
    Key/value storage for client-local state.

    Note: Values are plain JSON data (dict, list, str, int, ...).
    get() returns a copy; mutating it never changes what is stored.
    """

    def get(self, key: str) -> Any | None:
        """Stored value, or None if absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def clear(self, key: str) -> None:
        """Remove the entry. Absent keys are ignored."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStorage:
    """In-process storage. Lost on restart."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


# ═══════════════════════════════════════════════════════════════════════════════
# JSON File Storage
# ═══════════════════════════════════════════════════════════════════════════════


class JsonFileStorage:
    """
    Storage backed by a single JSON file.

    Note: Every write replaces the file atomically (temp file + rename),
    so a crash mid-write leaves the previous state intact.
    An unreadable file is treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def clear(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("ignoring unreadable storage file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


__all__ = (
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
)
