"""Tests for the report builder."""
from __future__ import annotations

import csv
import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from game_analytics.core.session_reporter import SessionReporter
from game_analytics.reports.reporter import ReportBuilder
from game_analytics.storage.backlog import MemoryStore, PendingBacklog


class ReportBuilderTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.backlog = PendingBacklog(MemoryStore(), key="pending")
        reporter = SessionReporter(backlog=self.backlog)
        reporter.initialize("quiz-game", "Session 1")
        reporter.add_metric("difficulty", "hard")
        reporter.start_level("L1")
        reporter.record_task("L1", "t1", "2+2?", "4", "4", 1500, 10)
        reporter.record_task("L1", "t2", "3+3?", "6", "5", 900, 0)
        reporter.end_level("L1", True, 2400, 10)
        reporter.submit_report()
        self.payloads = self.backlog.entries()

    def test_summary_lines(self) -> None:
        lines = ReportBuilder.summary_lines(self.payloads[0])
        self.assertIn("REPORT SUBMITTED", lines)
        self.assertIn("Game ID: quiz-game", lines)
        self.assertIn("Total XP: 10", lines)
        self.assertIn("Levels Completed: 1", lines)
        self.assertIn("Raw Metrics: [difficulty=hard]", lines)

    def test_writes_expected_files(self) -> None:
        with TemporaryDirectory() as tmpdir:
            builder = ReportBuilder(Path(tmpdir))
            run_dir = builder.ensure_run_directory("export")
            builder.write_json(run_dir, self.payloads)
            builder.write_csv(run_dir, self.payloads)
            builder.write_run_log(run_dir, self.payloads)

            self.assertTrue((run_dir / "summary.json").is_file())
            self.assertTrue((run_dir / "levels.csv").is_file())
            self.assertTrue((run_dir / "sessions.log").is_file())

            summary = json.loads((run_dir / "summary.json").read_text())
            self.assertEqual(summary["sessions"], 1)
            self.assertEqual(summary["xpEarnedTotal"], 10)

            with (run_dir / "levels.csv").open(newline="") as handle:
                rows = list(csv.DictReader(handle))
            self.assertEqual(rows[0]["level_id"], "L1")
            self.assertEqual(rows[0]["tasks"], "2")
            self.assertEqual(rows[0]["tasks_successful"], "1")

            log = (run_dir / "sessions.log").read_text()
            self.assertIn("Level L1: success=True time=2.40s xp=10", log)
            self.assertIn("[miss] t2 3+3?", log)


if __name__ == "__main__":
    unittest.main()
