"""Delivery to the parent frame that hosts the game."""
from __future__ import annotations

from typing import Any, Dict, Optional
import copy

from ..core.config_service import DEFAULT_PARENT_ORIGIN
from ..core.host import HostEnvironment
from .base import DeliverySink, SinkAttempt, SinkStatus, resolve_callable


class ParentFrameSink(DeliverySink):
    """Posts the payload to ``host.parent.post_message`` with a target origin.

    The origin comes from ``host.parent_origin`` when the host sets one, then
    from the configured default, then the ``*`` wildcard.
    """

    channel = "parent_frame"

    def __init__(self, host: HostEnvironment, default_origin: str = DEFAULT_PARENT_ORIGIN) -> None:
        self.host = host
        self.default_origin = default_origin

    def target_origin(self) -> str:
        return self.host.parent_origin or self.default_origin or DEFAULT_PARENT_ORIGIN

    def _deliver(self, payload: Dict[str, Any]) -> Optional[SinkAttempt]:
        post = resolve_callable(self.host.parent, "post_message")
        if post is None:
            return self.unavailable("parent frame not reachable")
        origin = self.target_origin()
        post(copy.deepcopy(payload), origin)
        return SinkAttempt(channel=self.channel, status=SinkStatus.DELIVERED, detail=f"targetOrigin={origin}")
