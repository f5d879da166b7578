"""Tests for the pending-session backlog."""
from __future__ import annotations

import json
import threading
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from game_analytics.storage.backlog import JsonFileStore, MemoryStore, PendingBacklog


class HookedStore(MemoryStore):
    """Runs ``on_write`` once, just before the first write lands."""

    def __init__(self) -> None:
        super().__init__()
        self.on_write = None

    def set_item(self, key: str, value: str) -> None:
        hook, self.on_write = self.on_write, None
        if hook is not None:
            hook()
        super().set_item(key, value)


class PendingBacklogTestCase(unittest.TestCase):
    def test_append_and_find(self) -> None:
        backlog = PendingBacklog(MemoryStore(), key="pending")
        self.assertTrue(backlog.append({"sessionId": "a", "xpEarnedTotal": 1}))
        self.assertTrue(backlog.append({"sessionId": "b", "xpEarnedTotal": 2}))
        self.assertEqual([entry["sessionId"] for entry in backlog.entries()], ["a", "b"])
        self.assertEqual(backlog.find("b")["xpEarnedTotal"], 2)
        self.assertIsNone(backlog.find("zzz"))
        self.assertEqual(len(backlog), 2)

    def test_cap_evicts_oldest(self) -> None:
        backlog = PendingBacklog(MemoryStore(), key="pending", max_entries=2)
        for session_id in ("a", "b", "c"):
            backlog.append({"sessionId": session_id})
        self.assertEqual([entry["sessionId"] for entry in backlog.entries()], ["b", "c"])

    def test_corrupt_store_is_reported_as_failure(self) -> None:
        store = MemoryStore()
        store.set_item("pending", "{not json")
        backlog = PendingBacklog(store, key="pending")
        self.assertFalse(backlog.append({"sessionId": "a"}))
        self.assertEqual(store.get_item("pending"), "{not json")

    def test_clear_returns_removed_count(self) -> None:
        backlog = PendingBacklog(MemoryStore(), key="pending")
        backlog.append({"sessionId": "a"})
        self.assertEqual(backlog.clear(), 1)
        self.assertEqual(backlog.entries(), [])

    def test_clear_waits_for_an_append_in_progress(self) -> None:
        store = HookedStore()
        backlog = PendingBacklog(store, key="pending")
        backlog.append({"sessionId": "a"})
        cleared = []
        clearer = threading.Thread(target=lambda: cleared.append(backlog.clear()))

        def start_clear_mid_append() -> None:
            clearer.start()
            clearer.join(timeout=0.2)
            self.assertTrue(clearer.is_alive())

        store.on_write = start_clear_mid_append
        self.assertTrue(backlog.append({"sessionId": "b"}))
        clearer.join(timeout=5)

        self.assertFalse(clearer.is_alive())
        self.assertEqual(cleared, [2])
        self.assertEqual(backlog.entries(), [])

    def test_clear_resets_unreadable_backlog(self) -> None:
        store = MemoryStore()
        store.set_item("pending", "{not json")
        backlog = PendingBacklog(store, key="pending")
        with self.assertRaises(ValueError):
            backlog.entries()
        with self.assertLogs("game_analytics.storage.backlog", level="WARNING"):
            self.assertEqual(backlog.clear(), 0)
        self.assertIsNone(store.get_item("pending"))
        self.assertTrue(backlog.append({"sessionId": "a"}))

    def test_json_file_store_persists_between_instances(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "store.json"
            PendingBacklog(JsonFileStore(path), key="pending").append({"sessionId": "a"})
            JsonFileStore(path).set_item("other", "kept")

            reopened = PendingBacklog(JsonFileStore(path), key="pending")
            self.assertEqual(reopened.entries(), [{"sessionId": "a"}])
            document = json.loads(path.read_text())
            self.assertEqual(set(document), {"pending", "other"})

            reopened.clear()
            self.assertEqual(json.loads(path.read_text()), {"other": "kept"})


if __name__ == "__main__":
    unittest.main()
