"""
Game Events
===========

One-shot notifications from the core to presentation collaborators
(renderers, sound cues, overlays). The core never draws or plays media
itself; it emits these and lets subscribers react.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List


class EventType(str, Enum):
    COUNTDOWN_TICK = "countdown-tick"
    PLAY_STARTED = "play-started"
    FLAP = "flap"
    GAME_OVER = "game-over"
    RESTART_ENABLED = "restart-enabled"


@dataclass
class GameEvent:
    type: EventType
    tick: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "tick": self.tick,
            "data": self.data,
        }


Listener = Callable[[GameEvent], None]


class EventDispatcher:
    """Synchronous observer list. Listeners run in subscription order."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
