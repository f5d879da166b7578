"""Wiring helpers that assemble a reporter from configuration."""
from __future__ import annotations

from typing import List, Optional

from ..sinks.base import DeliverySink
from ..sinks.native import NativeAnalyticsSink
from ..sinks.parent_frame import ParentFrameSink
from ..sinks.webview import WebViewSink
from ..storage.backlog import JsonFileStore, KeyValueStore, PendingBacklog
from .config_service import AnalyticsSettings, ConfigService, default_config_service
from .host import HostEnvironment
from .session_reporter import SessionReporter
from .telemetry import TelemetrySink


def default_sinks(host: HostEnvironment, settings: AnalyticsSettings) -> List[DeliverySink]:
    """Delivery channels in the order they are attempted."""

    return [
        NativeAnalyticsSink(host),
        WebViewSink(host),
        ParentFrameSink(host, default_origin=settings.parent_origin),
    ]


def default_backlog(settings: AnalyticsSettings, store: Optional[KeyValueStore] = None) -> PendingBacklog:
    return PendingBacklog(
        store if store is not None else JsonFileStore(settings.backlog_path),
        key=settings.backlog_key,
        max_entries=settings.backlog_max_entries,
    )


def create_reporter(
    config_service: ConfigService | None = None,
    host: HostEnvironment | None = None,
    store: KeyValueStore | None = None,
    telemetry: TelemetrySink | None = None,
) -> SessionReporter:
    """Build the reporter that the game passes to every call site."""

    settings = (config_service or default_config_service()).settings()
    host = host or HostEnvironment()
    return SessionReporter(
        sinks=default_sinks(host, settings),
        backlog=default_backlog(settings, store),
        telemetry=telemetry or TelemetrySink(max_events=settings.telemetry_max_events),
    )
