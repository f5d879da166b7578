"""Tests for configuration loading helpers."""
from __future__ import annotations

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from game_analytics.core.config_service import AnalyticsSettings, ConfigService, default_config_service


class ConfigServiceTestCase(unittest.TestCase):
    def test_load_analytics_settings(self) -> None:
        service = default_config_service()
        loaded = service.load("analytics.json")
        self.assertEqual(loaded.payload["backlogKey"], "ignite_pending_sessions_jsplugin")
        self.assertEqual(len(loaded.sha256), 64)

        settings = service.settings()
        self.assertEqual(settings.parent_origin, "*")
        self.assertEqual(settings.backlog_max_entries, 200)
        self.assertEqual(settings.telemetry_max_events, 1000)
        self.assertEqual(settings.config_sha256, loaded.sha256)

    def test_missing_document_falls_back_to_defaults(self) -> None:
        with TemporaryDirectory() as tmpdir:
            service = ConfigService(Path(tmpdir))
            self.assertEqual(service.settings(), AnalyticsSettings())
            with self.assertRaises(FileNotFoundError):
                service.load("analytics.json")

    def test_from_config_overrides(self) -> None:
        with TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "analytics.json").write_text(
                json.dumps({"parentOrigin": "https://host.example", "backlogMaxEntries": None, "telemetryMaxEvents": 50, "logLevel": "debug"})
            )
            settings = ConfigService(Path(tmpdir)).settings()
        self.assertEqual(settings.parent_origin, "https://host.example")
        self.assertIsNone(settings.backlog_max_entries)
        self.assertEqual(settings.telemetry_max_events, 50)
        self.assertEqual(settings.log_level, "DEBUG")


if __name__ == "__main__":
    unittest.main()
