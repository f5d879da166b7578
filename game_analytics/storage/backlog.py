"""Durable pending-session backlog backed by a small key-value store."""
from __future__ import annotations

from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional, Protocol
import json
import logging
import os


logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-valued storage with the shape of browser local storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store, mostly useful for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStore:
    """Keeps every key in one JSON object file, rewritten atomically on change."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = RLock()

    def _read(self) -> Dict[str, str]:
        if not self.path.is_file():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class PendingBacklog:
    """Append-only list of submitted payloads kept for later resubmission.

    ``max_entries`` caps the list; the oldest payloads are evicted first.
    ``None`` keeps every payload. Each read-modify-write holds the backlog lock,
    so a concurrent ``clear`` cannot resurrect entries.
    """

    def __init__(self, store: KeyValueStore, key: str, max_entries: Optional[int] = None) -> None:
        self.store = store
        self.key = key
        self.max_entries = max_entries
        self._lock = RLock()

    def append(self, payload: Dict[str, Any]) -> bool:
        """Persist ``payload``; failures are logged and reported as ``False``."""

        try:
            with self._lock:
                entries = self._load()
                entries.append(payload)
                if self.max_entries is not None and len(entries) > self.max_entries:
                    dropped = len(entries) - self.max_entries
                    entries = entries[dropped:] if self.max_entries > 0 else []
                    logger.debug("Backlog %s over capacity; evicted %d oldest entries", self.key, dropped)
                self.store.set_item(self.key, json.dumps(entries))
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Could not persist pending session under %s: %s", self.key, exc)
            return False
        return True

    def entries(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._load()

    def find(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entries = self._load()
        for entry in reversed(entries):
            if isinstance(entry, dict) and entry.get("sessionId") == session_id:
                return entry
        return None

    def clear(self) -> int:
        """Drop every entry, including an unreadable backlog; returns how many were readable."""

        with self._lock:
            try:
                count = len(self._load())
            except ValueError:
                logger.warning("Clearing unreadable backlog under %s", self.key)
                count = 0
            self.store.remove_item(self.key)
        return count

    def __len__(self) -> int:
        return len(self.entries())

    def _load(self) -> List[Dict[str, Any]]:
        raw = self.store.get_item(self.key)
        if raw is not None and not isinstance(raw, str):
            raise ValueError(f"Backlog under {self.key} is not stored as JSON text")
        entries = json.loads(raw or "[]")
        if not isinstance(entries, list):
            raise ValueError(f"Backlog under {self.key} is not a JSON list")
        return entries
