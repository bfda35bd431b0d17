"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameMode, GamePhase, TrainingPhase
from core.game.rules import TableRules
from core.game.play import BlackjackService, GameResult, Outcome
from core.game.models import GameState, TrainingState, TrainingStats
from core.game.engine import GameStateService

__all__ = [
    "GameEvent",
    "EventType",
    "GameMode",
    "GamePhase",
    "TrainingPhase",
    "TableRules",
    "BlackjackService",
    "GameResult",
    "Outcome",
    "GameState",
    "TrainingState",
    "TrainingStats",
    "GameStateService",
]
