"""Bounded record of reporter events: operations, lookups and delivery attempts."""
from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional
import json


DEFAULT_MAX_EVENTS = 1000


@dataclass
class TelemetryEvent:
    name: str
    timestamp: datetime
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "timestamp": self.timestamp.isoformat(timespec="milliseconds"),
            "payload": self.payload,
        }


class TelemetrySink:
    """Keeps the most recent reporter events in memory.

    A long-lived reporter emits an event for every metric, level and delivery
    attempt, so only the newest ``max_events`` are retained and ``dropped``
    counts what was discarded. ``None`` keeps everything.
    """

    def __init__(self, max_events: Optional[int] = DEFAULT_MAX_EVENTS) -> None:
        self.max_events = max_events
        self.dropped = 0
        self._events: Deque[TelemetryEvent] = deque(maxlen=max_events)

    def emit(self, name: str, **payload: Any) -> None:
        if self.max_events is not None and len(self._events) >= self.max_events:
            self.dropped += 1
        self._events.append(TelemetryEvent(name=name, timestamp=datetime.now(timezone.utc), payload=payload))

    def as_list(self) -> List[TelemetryEvent]:
        return list(self._events)

    def names(self) -> List[str]:
        return [event.name for event in self._events]

    def counts(self) -> Dict[str, int]:
        return dict(Counter(event.name for event in self._events))

    def flush_to_file(self, path: Path) -> None:
        data = {
            "dropped": self.dropped,
            "events": [event.to_json() for event in self._events],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
