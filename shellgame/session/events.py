"""
Notification channel between the game session and its collaborators.

Every externally visible mutation of a session is announced by exactly
one event, in the order the mutations happened. Collaborators can
either subscribe (push) or drain the queue (pull); both see the same
sequence numbers.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)

# Events kept for pull consumers that never drain
DEFAULT_QUEUE_SIZE = 1000


class EventType(Enum):
    """Kinds of notification a session emits."""
    BALANCE_CHANGED = "balance_changed"
    LEVEL_CHANGED = "level_changed"
    BET_CHANGED = "bet_changed"
    PHASE_CHANGED = "phase_changed"
    ROUND_RESULT = "round_result"
    SHUFFLE_STEP = "shuffle_step"
    GAME_OVER = "game_over"
    CUPS_CHANGED = "cups_changed"
    ROUND_STARTED = "round_started"
    PROMPT_CHANGED = "prompt_changed"


@dataclass(frozen=True)
class GameEvent:
    """A single notification."""
    event_type: EventType
    sequence: int
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type.value,
            "sequence": self.sequence,
            "data": dict(self.data),
        }


Listener = Callable[[GameEvent], None]


class EventChannel:
    """
    Ordered event stream with push and pull delivery.

    Usage:
        channel = EventChannel()
        unsubscribe = channel.subscribe(hud.render)

        channel.emit(EventType.BET_CHANGED, bet=2)
        events = channel.drain()
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._listeners: list[Listener] = []
        self._queue: deque[GameEvent] = deque(maxlen=queue_size)
        self._sequence = 0

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create the next event and deliver it to queue and listeners."""
        self._sequence += 1
        event = GameEvent(event_type=event_type, sequence=self._sequence, data=data)
        self._queue.append(event)
        logger.debug("event #%d %s %s", event.sequence, event_type.value, data)

        # Copy so listeners may unsubscribe while handling
        for listener in list(self._listeners):
            listener(event)
        return event

    def drain(self) -> list[GameEvent]:
        """Return and clear all queued events, oldest first."""
        events = list(self._queue)
        self._queue.clear()
        return events

    def pending(self) -> int:
        return len(self._queue)
