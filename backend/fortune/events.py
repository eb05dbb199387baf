"""In-process event bus for notifications to rendering, audio and UI layers."""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Notifications emitted by the core."""

    GAME_STATE_CHANGED = "game_state_changed"

    SPIN_STARTED = "spin_started"
    SPIN_ENDED = "spin_ended"
    REEL_STOPPED = "reel_stopped"
    ALL_REELS_STOPPED = "all_reels_stopped"

    WIN_DETECTED = "win_detected"
    WINS_EVALUATED = "wins_evaluated"
    PAYOUT_CALCULATED = "payout_calculated"

    COINS_ADDED = "coins_added"
    COINS_DEDUCTED = "coins_deducted"
    MULTIPLIER_CHANGED = "multiplier_changed"

    CELEBRATION_STARTED = "celebration_started"
    CELEBRATION_ENDED = "celebration_ended"
    GAME_OVER = "game_over"
    MODIFIER_APPLIED = "modifier_applied"


@dataclass
class GameEvent:
    """One published notification."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {"type": self.type.value, "timestamp": self.timestamp, **self.data}


Listener = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous publish/subscribe.

    Listener failures MUST NOT break the publisher: they are logged and
    counted, and delivery continues with the next listener.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[Listener]] = {}
        self._any_listeners: list[Listener] = []
        self._listener_errors = 0

    @property
    def listener_errors(self) -> int:
        return self._listener_errors

    def subscribe(self, event_type: EventType, callback: Listener) -> Callable[[], None]:
        """Register a listener for one event type. Returns an unsubscribe function."""
        callbacks = self._listeners.setdefault(event_type, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscribe_all(self, callback: Listener) -> Callable[[], None]:
        """Register a listener for every event type."""
        self._any_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._any_listeners:
                self._any_listeners.remove(callback)

        return unsubscribe

    def unsubscribe_all(self, event_type: EventType) -> None:
        self._listeners.pop(event_type, None)

    def clear(self) -> None:
        self._listeners.clear()
        self._any_listeners.clear()

    def publish(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event and deliver it to matching listeners."""
        event = GameEvent(type=event_type, data=data)
        for callback in [*self._listeners.get(event_type, []), *self._any_listeners]:
            self._safe_deliver(callback, event)
        return event

    def _safe_deliver(self, callback: Listener, event: GameEvent) -> None:
        try:
            callback(event)
        except Exception as e:
            self._listener_errors += 1
            logger.warning(
                "Event listener error (count=%d): %s - %s",
                self._listener_errors,
                event.type.value,
                str(e),
            )


class LoggingEventListener:
    """Default listener that logs every event."""

    def __call__(self, event: GameEvent) -> None:
        logger.debug("EVENT %s: %s", event.type.value, event.data)
