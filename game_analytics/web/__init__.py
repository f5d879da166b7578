"""FastAPI application that exposes the live report and the pending backlog."""
from __future__ import annotations

from typing import Any, Dict, List

from ..core.config_service import ConfigService, default_config_service
from ..core.runtime import default_backlog
from ..core.session_reporter import SessionReporter
from ..storage.backlog import PendingBacklog


def create_app(
    reporter: SessionReporter | None = None,
    backlog: PendingBacklog | None = None,
    config_service: ConfigService | None = None,
):
    """Build the FastAPI application for backlog inspection."""

    try:
        from fastapi import FastAPI, HTTPException
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("FastAPI is required to use the web interface.") from exc

    if backlog is None:
        settings = (config_service or default_config_service()).settings()
        backlog = default_backlog(settings)
    pending = backlog

    def read_pending(read):
        try:
            return read()
        except ValueError as exc:
            raise HTTPException(status_code=503, detail=f"Backlog unreadable: {exc}") from exc

    app = FastAPI(title="Game Analytics", description="Inspect the live session report and pending backlog")

    @app.get("/health")
    def health() -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "status": "ok",
            "reporter": reporter is not None,
            "initialized": bool(reporter and reporter.initialized),
            "backlog": "ok",
        }
        try:
            body["pending"] = len(pending)
        except ValueError:
            body["pending"] = None
            body["backlog"] = "unreadable"
        if reporter is not None:
            body["telemetryDropped"] = reporter.telemetry.dropped
        return body

    @app.get("/report")
    def report() -> Dict[str, Any]:
        if reporter is None:
            raise HTTPException(status_code=404, detail="No reporter attached")
        return reporter.get_report()

    @app.get("/telemetry")
    def telemetry() -> List[Dict[str, Any]]:
        if reporter is None:
            raise HTTPException(status_code=404, detail="No reporter attached")
        return [event.to_json() for event in reporter.telemetry.as_list()]

    @app.get("/telemetry/counts")
    def telemetry_counts() -> Dict[str, int]:
        if reporter is None:
            raise HTTPException(status_code=404, detail="No reporter attached")
        return reporter.telemetry.counts()

    @app.get("/pending")
    def list_pending() -> List[Dict[str, Any]]:
        return read_pending(pending.entries)

    @app.get("/pending/{session_id}")
    def get_pending(session_id: str) -> Dict[str, Any]:
        entry = read_pending(lambda: pending.find(session_id))
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
        return entry

    @app.delete("/pending")
    def clear_pending() -> Dict[str, int]:
        return {"removed": read_pending(pending.clear)}

    return app


__all__ = ["create_app"]
