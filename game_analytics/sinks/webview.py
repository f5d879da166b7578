"""Delivery through the message channel of an embedding native app."""
from __future__ import annotations

from typing import Any, Dict, Optional
import json

from ..core.host import HostEnvironment
from .base import DeliverySink, SinkAttempt, resolve_callable


class WebViewSink(DeliverySink):
    """Posts the JSON-serialised payload to ``host.webview.post_message``."""

    channel = "webview"

    def __init__(self, host: HostEnvironment) -> None:
        self.host = host

    def _deliver(self, payload: Dict[str, Any]) -> Optional[SinkAttempt]:
        post = resolve_callable(self.host.webview, "post_message")
        if post is None:
            return self.unavailable("no webview bridge with post_message")
        post(json.dumps(payload))
        return None
