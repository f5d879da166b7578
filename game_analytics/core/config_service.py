"""Configuration loading utilities for the game analytics reporter."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import json
import hashlib


DEFAULT_PARENT_ORIGIN = "*"
DEFAULT_BACKLOG_KEY = "ignite_pending_sessions_jsplugin"
DEFAULT_BACKLOG_PATH = "artifacts/pending_sessions.json"
DEFAULT_BACKLOG_MAX_ENTRIES = 200
DEFAULT_TELEMETRY_MAX_EVENTS = 1000
SETTINGS_DOCUMENT = "analytics.json"


@dataclass(frozen=True)
class LoadedConfig:
    """Container for loaded configuration payloads and derived metadata."""

    path: Path
    payload: Dict[str, Any]
    sha256: str


@dataclass(frozen=True)
class AnalyticsSettings:
    """Process-wide settings shared by the reporter, sinks and backlog."""

    parent_origin: str = DEFAULT_PARENT_ORIGIN
    backlog_key: str = DEFAULT_BACKLOG_KEY
    backlog_path: Path = Path(DEFAULT_BACKLOG_PATH)
    backlog_max_entries: Optional[int] = DEFAULT_BACKLOG_MAX_ENTRIES
    telemetry_max_events: Optional[int] = DEFAULT_TELEMETRY_MAX_EVENTS
    log_level: str = "INFO"
    config_sha256: str = ""

    @classmethod
    def from_config(cls, payload: Dict[str, Any], sha256: str = "") -> "AnalyticsSettings":
        max_entries = payload.get("backlogMaxEntries", DEFAULT_BACKLOG_MAX_ENTRIES)
        max_events = payload.get("telemetryMaxEvents", DEFAULT_TELEMETRY_MAX_EVENTS)
        return cls(
            parent_origin=str(payload.get("parentOrigin") or DEFAULT_PARENT_ORIGIN),
            backlog_key=str(payload.get("backlogKey", DEFAULT_BACKLOG_KEY)),
            backlog_path=Path(str(payload.get("backlogPath", DEFAULT_BACKLOG_PATH))),
            backlog_max_entries=None if max_entries is None else int(max_entries),
            telemetry_max_events=None if max_events is None else int(max_events),
            log_level=str(payload.get("logLevel", "INFO")).upper(),
            config_sha256=sha256,
        )


class ConfigService:
    """Loads JSON configuration documents with caching and hashing support."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path
        self._cache: Dict[Path, LoadedConfig] = {}

    def _read_json(self, path: Path) -> LoadedConfig:
        raw = path.read_bytes()
        payload = json.loads(raw)
        digest = hashlib.sha256(raw).hexdigest()
        return LoadedConfig(path=path, payload=payload, sha256=digest)

    def load(self, relative_path: str) -> LoadedConfig:
        """Load a configuration document relative to the base path."""
        resolved = (self._base_path / relative_path).resolve()
        if not resolved.is_file():
            raise FileNotFoundError(f"Configuration file not found: {resolved}")
        cached = self._cache.get(resolved)
        if cached:
            return cached
        loaded = self._read_json(resolved)
        self._cache[resolved] = loaded
        return loaded

    def load_optional(self, relative_path: str) -> Optional[LoadedConfig]:
        resolved = (self._base_path / relative_path).resolve()
        if not resolved.is_file():
            return None
        return self.load(relative_path)

    def settings(self) -> AnalyticsSettings:
        """Typed settings from ``analytics.json``, or defaults when it is absent."""

        loaded = self.load_optional(SETTINGS_DOCUMENT)
        if loaded is None:
            return AnalyticsSettings()
        return AnalyticsSettings.from_config(loaded.payload, loaded.sha256)


def default_config_service() -> ConfigService:
    """Helper that uses the repository's ``config`` directory as the base path."""

    repo_root = Path(__file__).resolve().parents[2]
    return ConfigService(repo_root / "config")
