"""Registry of the bridge objects a host environment exposes to the game."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass
class HostEnvironment:
    """Optional delivery bridges registered by whatever embeds the game.

    ``native_analytics`` is expected to expose ``track_game_session(payload)``,
    ``webview`` a ``post_message(text)`` and ``parent`` a
    ``post_message(payload, target_origin)``. Any of them may be missing or
    replaced at runtime; sinks look them up at delivery time.
    ``parent_origin`` overrides the configured target origin when set.
    """

    native_analytics: Optional[Any] = None
    webview: Optional[Any] = None
    parent: Optional[Any] = None
    parent_origin: Optional[str] = None

    def available_bridges(self) -> List[str]:
        return [
            name
            for name in ("native_analytics", "webview", "parent")
            if getattr(self, name) is not None
        ]
