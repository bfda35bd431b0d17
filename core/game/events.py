"""Game events for the event system."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    # Round flow events
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()

    # Betting events
    BET_PLACED = auto()
    HAND_SETTLED = auto()

    # Card events
    CARD_DEALT = auto()
    SHOE_SHUFFLED = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    PLAYER_BUSTS = auto()
    PLAYER_BLACKJACK = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # Training events
    TRAINING_STARTED = auto()
    TRAINING_STOPPED = auto()
    SCENARIO_GENERATED = auto()
    TRAINING_ANSWERED = auto()
    STATS_RESET = auto()

    # Error events
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable game event.

    Events tell the presentation layer that a fresh snapshot is worth
    reading; the snapshot itself stays the source of truth.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Simple event emitter for game events.

    Allows subscribing to specific event types or all events.
    """

    def __init__(self, history_limit: int = 500) -> None:
        """
        Initialize the event emitter.

        Args:
            history_limit: Number of past events to keep
        """
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: list[GameEvent] = []
        self._history_limit = history_limit

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Unsubscribe from events.

        Args:
            handler: Handler to remove
            event_type: Event type to unsubscribe from
        """
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """
        Emit an event to all subscribers.

        Args:
            event: The event to emit
        """
        logger.debug("%s", event)
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            del self._event_history[: -self._history_limit]

        # Type-specific handlers first, then catch-all handlers
        for handler in list(self._handlers.get(event.event_type, [])):
            handler(event)
        for handler in list(self._handlers.get(None, [])):
            handler(event)

    def emit_new(
        self,
        event_type: EventType,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Args:
            event_type: Type of event
            **data: Event data

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return self._event_history.copy()

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()
