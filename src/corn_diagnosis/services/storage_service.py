"""Service layer – persisted key-value store backing the history ledger.

Two implementations share the same ``get`` / ``set`` contract:

*  ``JsonFileStore``  → one JSON object (key → string) kept in a file on
   disk; survives process restarts.
*  ``InMemoryStore``  → a plain dict; used in tests and when no store path
   is configured.

Both raise ``StorageReadError`` / ``StorageWriteError`` and never anything
else, so callers only need to handle the storage taxonomy.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from src.corn_diagnosis.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStore:
    """Volatile store; contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Store every key as a string entry of a single JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            if not self.path.exists():
                return {}
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadError(f"Cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageReadError(f"Corrupt store file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageReadError(f"Store file {self.path} does not hold an object.")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise StorageReadError(f"Entry '{key}' in {self.path} is not a string.")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageReadError as exc:
            logger.warning("Overwriting unreadable store %s: %s", self.path, exc)
            data = {}
        data[key] = value

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, UnicodeEncodeError) as exc:
            raise StorageWriteError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug("💾 Saved key '%s' to %s", key, self.path)


def build_store(path: Optional[Path]) -> KeyValueStore:
    """Return a file-backed store for *path*, or an in-memory one when ``None``."""
    if path is None:
        logger.info("History store: in-memory (not persisted).")
        return InMemoryStore()
    logger.info("History store: %s", path)
    return JsonFileStore(path)
