"""Summary and export writers for session report payloads."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence
import csv
import json


BANNER = "=" * 55


class ReportBuilder:
    """Generate log summaries plus JSON/CSV/text exports of report payloads."""

    def __init__(self, base_output_dir: Path) -> None:
        self.base_output_dir = base_output_dir

    def ensure_run_directory(self, run_id: str) -> Path:
        run_dir = self.base_output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir

    @staticmethod
    def summary_lines(payload: Dict[str, Any]) -> List[str]:
        """Key fields of a submitted payload, framed for the log."""

        levels = payload.get("diagnostics", {}).get("levels", [])
        metrics = ", ".join(f"{item['key']}={item['value']}" for item in payload.get("rawData", []))
        return [
            BANNER,
            "REPORT SUBMITTED",
            BANNER,
            f"Game ID: {payload.get('gameId', '')}",
            f"Session: {payload.get('sessionId', '')}",
            f"Name: {payload.get('name', '')}",
            f"Timestamp: {payload.get('timestamp', '')}",
            f"Total XP: {payload.get('xpEarnedTotal', 0)}",
            f"Levels Completed: {len(levels)}",
            f"Raw Metrics: [{metrics}]",
            BANNER,
        ]

    @staticmethod
    def payload_line(payload: Dict[str, Any]) -> str:
        return f"Full Payload: {json.dumps(payload, default=str)}"

    def write_json(self, run_dir: Path, payloads: Sequence[Dict[str, Any]]) -> Path:
        path = run_dir / "summary.json"
        document = {
            "sessions": len(payloads),
            "xpEarnedTotal": sum(_xp_total(payload) for payload in payloads),
            "payloads": list(payloads),
        }
        path.write_text(json.dumps(document, indent=2))
        return path

    def write_csv(self, run_dir: Path, payloads: Iterable[Dict[str, Any]]) -> Path:
        path = run_dir / "levels.csv"
        with path.open("w", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(
                [
                    "session_id",
                    "game_id",
                    "level_id",
                    "successful",
                    "time_taken_ms",
                    "xp_earned",
                    "tasks",
                    "tasks_successful",
                ]
            )
            for payload in payloads:
                for level in payload.get("diagnostics", {}).get("levels", []):
                    tasks = level.get("tasks", [])
                    writer.writerow(
                        [
                            payload.get("sessionId", ""),
                            payload.get("gameId", ""),
                            level.get("levelId", ""),
                            level.get("successful", False),
                            level.get("timeTaken", 0),
                            level.get("xpEarned", 0),
                            len(tasks),
                            sum(1 for task in tasks if task.get("successful")),
                        ]
                    )
        return path

    def write_run_log(self, run_dir: Path, payloads: Iterable[Dict[str, Any]]) -> Path:
        path = run_dir / "sessions.log"
        lines: List[str] = []
        for payload in payloads:
            lines.extend(self.summary_lines(payload))
            for level in payload.get("diagnostics", {}).get("levels", []):
                lines.append(
                    "  Level {levelId}: success={successful} time={seconds:0.2f}s xp={xpEarned}".format(
                        levelId=level.get("levelId", ""),
                        successful=level.get("successful", False),
                        seconds=float(level.get("timeTaken", 0)) / 1000,
                        xpEarned=level.get("xpEarned", 0),
                    )
                )
                for task in level.get("tasks", []):
                    mark = "ok" if task.get("successful") else "miss"
                    lines.append(
                        f"    [{mark}] {task.get('taskId', '')} {task.get('question', '')} "
                        f"(xp={task.get('xpEarned', 0)})"
                    )
            lines.append("")
        path.write_text("\n".join(lines).strip() + "\n")
        return path


def _xp_total(payload: Dict[str, Any]) -> float:
    value = payload.get("xpEarnedTotal", 0)
    return value if isinstance(value, (int, float)) else 0
