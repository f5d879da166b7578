"""Command line entry point for inspecting the pending-session backlog."""
from __future__ import annotations

from argparse import ArgumentParser
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List
import logging
import sys

from .core.config_service import AnalyticsSettings, ConfigService, default_config_service
from .core.runtime import default_backlog
from .reports.reporter import ReportBuilder
from .storage.backlog import JsonFileStore, PendingBacklog


logger = logging.getLogger(__name__)


def _open_backlog(settings: AnalyticsSettings, backlog_path: Path | None) -> PendingBacklog:
    store = JsonFileStore(backlog_path or settings.backlog_path)
    return default_backlog(settings, store)


def _read_entries(backlog: PendingBacklog) -> List[Dict[str, Any]] | None:
    try:
        return backlog.entries()
    except ValueError as exc:
        print(f"backlog unreadable: {exc} (run 'clear' to reset it)", file=sys.stderr)
        return None


def _show(backlog: PendingBacklog) -> int:
    entries = _read_entries(backlog)
    if entries is None:
        return 1
    print(f"{len(entries)} pending session(s) under {backlog.key}")
    for entry in entries:
        levels = entry.get("diagnostics", {}).get("levels", [])
        print(
            f"  {entry.get('sessionId', '?')} game={entry.get('gameId', '')} "
            f"name={entry.get('name', '')} xp={entry.get('xpEarnedTotal', 0)} "
            f"levels={len(levels)} at={entry.get('timestamp', '')}"
        )
    return 0


def _export(backlog: PendingBacklog, output: Path, run_id: str | None) -> int:
    entries = _read_entries(backlog)
    if entries is None:
        return 1
    builder = ReportBuilder(output)
    run_dir = builder.ensure_run_directory(
        run_id or f"backlog-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
    )
    builder.write_json(run_dir, entries)
    builder.write_csv(run_dir, entries)
    builder.write_run_log(run_dir, entries)
    print(f"Exported {len(entries)} pending session(s) to {run_dir}")
    return 0


def _clear(backlog: PendingBacklog) -> int:
    try:
        removed = backlog.clear()
    except ValueError as exc:
        print(f"backlog store unreadable: {exc}", file=sys.stderr)
        return 1
    print(f"Removed {removed} pending session(s) from {backlog.key}")
    return 0


def run(argv: List[str] | None = None, config_service: ConfigService | None = None) -> int:
    parser = ArgumentParser(description="Game analytics pending-session backlog")
    parser.add_argument(
        "--backlog",
        type=Path,
        default=None,
        help="Backlog store file (defaults to backlogPath from config/analytics.json)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("show", help="List pending sessions")
    export_parser = subparsers.add_parser("export", help="Write JSON/CSV/log exports of pending sessions")
    export_parser.add_argument("--output", type=Path, default=Path("artifacts"), help="Base output directory")
    export_parser.add_argument("--run-id", default=None, help="Directory name for this export")
    subparsers.add_parser("clear", help="Drop every pending session")
    args = parser.parse_args(argv)

    settings = (config_service or default_config_service()).settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    backlog = _open_backlog(settings, args.backlog)
    logger.debug("Using backlog %s (max=%s)", backlog.key, backlog.max_entries)

    if args.command == "show":
        return _show(backlog)
    if args.command == "export":
        return _export(backlog, args.output, args.run_id)
    return _clear(backlog)


if __name__ == "__main__":
    raise SystemExit(run())
