"""Shared delivery dataclasses for report sink implementations."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SinkStatus(str, Enum):
    DELIVERED = "delivered"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass
class SinkAttempt:
    """Outcome of handing one payload to one delivery channel."""

    channel: str
    status: SinkStatus
    detail: str
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status is SinkStatus.DELIVERED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "status": self.status.value,
            "detail": self.detail,
            "error": self.error,
        }


@dataclass
class DeliveryOutcome:
    """Aggregate of every sink attempt made for a single submission."""

    session_id: str
    attempts: List[SinkAttempt] = field(default_factory=list)
    backlog_saved: bool = False

    @property
    def sent(self) -> bool:
        return any(attempt.delivered for attempt in self.attempts)

    @property
    def delivered_channels(self) -> List[str]:
        return [attempt.channel for attempt in self.attempts if attempt.delivered]

    @property
    def errors(self) -> List[str]:
        return [
            f"{attempt.channel}: {attempt.error}"
            for attempt in self.attempts
            if attempt.error
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "sent": self.sent,
            "deliveredChannels": self.delivered_channels,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
            "backlogSaved": self.backlog_saved,
        }


class DeliverySink:
    """Base class for channels that accept a finished report payload.

    Subclasses implement :meth:`_deliver` and return a :class:`SinkAttempt`
    when the channel is missing; :meth:`attempt` converts any exception raised
    by the bridge into a ``FAILED`` attempt so one channel never blocks the next.
    """

    channel = "sink"

    def attempt(self, payload: Dict[str, Any]) -> SinkAttempt:
        try:
            result = self._deliver(payload)
        except Exception as exc:  # pylint: disable=broad-except
            return SinkAttempt(
                channel=self.channel,
                status=SinkStatus.FAILED,
                detail="bridge raised during delivery",
                error=f"{type(exc).__name__}: {exc}",
            )
        if result is not None:
            return result
        return SinkAttempt(channel=self.channel, status=SinkStatus.DELIVERED, detail="sent")

    def _deliver(self, payload: Dict[str, Any]) -> Optional[SinkAttempt]:
        raise NotImplementedError

    def unavailable(self, detail: str) -> SinkAttempt:
        return SinkAttempt(channel=self.channel, status=SinkStatus.UNAVAILABLE, detail=detail)


def resolve_callable(bridge: Any, name: str):
    """Return ``bridge.<name>`` when it is callable, otherwise ``None``."""

    if bridge is None:
        return None
    method = getattr(bridge, name, None)
    return method if callable(method) else None
