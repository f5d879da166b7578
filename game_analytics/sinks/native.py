"""Delivery through a registered native analytics bridge."""
from __future__ import annotations

from typing import Any, Dict, Optional
import copy

from ..core.host import HostEnvironment
from .base import DeliverySink, SinkAttempt, resolve_callable


class NativeAnalyticsSink(DeliverySink):
    """Hands the payload object to ``host.native_analytics.track_game_session``."""

    channel = "native_analytics"

    def __init__(self, host: HostEnvironment) -> None:
        self.host = host

    def _deliver(self, payload: Dict[str, Any]) -> Optional[SinkAttempt]:
        track = resolve_callable(self.host.native_analytics, "track_game_session")
        if track is None:
            return self.unavailable("no native analytics bridge with track_game_session")
        track(copy.deepcopy(payload))
        return None
