"""Round and training state snapshots."""

from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping

from core.cards import Card
from core.errors import StatsFormatError
from core.game.play import GameResult
from core.game.state import GameMode, GamePhase, TrainingPhase
from core.hand import Hand, HandType, create_empty_hand
from core.strategy.basic import PlayerAction
from core.strategy.training import TrainingFilter, TrainingScenario


@dataclass(frozen=True)
class GameState:
    """Read-only snapshot of a play-mode table."""

    mode: GameMode = GameMode.PLAY
    phase: GamePhase = GamePhase.BETTING
    deck: tuple[Card, ...] = ()
    dealer_hand: Hand = field(default_factory=create_empty_hand)
    player_hands: tuple[Hand, ...] = field(default_factory=lambda: (create_empty_hand(),))
    active_hand_index: int = 0
    bankroll: Decimal = Decimal("1000")
    current_bet: int = 10
    results: tuple[GameResult, ...] = ()
    round_number: int = 0
    message: str = ""
    show_message: bool = False

    @property
    def active_hand(self) -> Hand:
        """The hand the player is acting on."""
        return self.player_hands[self.active_hand_index]


@dataclass(frozen=True)
class CategoryStats:
    """Attempts for one hand classification."""

    total: int = 0
    correct: int = 0


@dataclass(frozen=True)
class TrainingStats:
    """Cumulative training results, persisted across sessions."""

    total_attempts: int = 0
    correct_attempts: int = 0
    streak: int = 0
    best_streak: int = 0
    by_category: Mapping[HandType, CategoryStats] = field(
        default_factory=lambda: {t: CategoryStats() for t in HandType}
    )

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(self, "by_category", MappingProxyType(dict(self.by_category)))

    @property
    def success_rate(self) -> int:
        """Share of correct answers as a rounded percentage."""
        if self.total_attempts == 0:
            return 0
        return round(self.correct_attempts / self.total_attempts * 100)

    def record_answer(self, hand_type: HandType, was_correct: bool) -> "TrainingStats":
        """Return stats updated with one answer."""
        if was_correct:
            streak = self.streak + 1
            best_streak = max(self.best_streak, streak)
        else:
            streak = 0
            best_streak = self.best_streak

        category = self.by_category.get(hand_type, CategoryStats())
        by_category = dict(self.by_category)
        by_category[hand_type] = CategoryStats(
            total=category.total + 1,
            correct=category.correct + (1 if was_correct else 0),
        )

        return replace(
            self,
            total_attempts=self.total_attempts + 1,
            correct_attempts=self.correct_attempts + (1 if was_correct else 0),
            streak=streak,
            best_streak=best_streak,
            by_category=by_category,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible data."""
        return {
            "total_attempts": self.total_attempts,
            "correct_attempts": self.correct_attempts,
            "streak": self.streak,
            "best_streak": self.best_streak,
            "by_category": {
                hand_type.value: asdict(stats)
                for hand_type, stats in self.by_category.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrainingStats":
        """
        Deserialize stats written by ``to_dict``.

        Raises:
            StatsFormatError: If the data is not a valid stats record
        """
        try:
            categories = data.get("by_category", {})
            by_category = {
                hand_type: CategoryStats(**categories.get(hand_type.value, {}))
                for hand_type in HandType
            }
            stats = cls(
                total_attempts=data["total_attempts"],
                correct_attempts=data["correct_attempts"],
                streak=data["streak"],
                best_streak=data["best_streak"],
                by_category=by_category,
            )
        except (AttributeError, KeyError, TypeError) as exc:
            raise StatsFormatError(f"Malformed training stats: {exc}") from exc

        counters = [stats.total_attempts, stats.correct_attempts, stats.streak, stats.best_streak]
        for category in by_category.values():
            counters.extend([category.total, category.correct])
        if not all(isinstance(c, int) and not isinstance(c, bool) and c >= 0 for c in counters):
            raise StatsFormatError("Training stats counters must be non-negative integers")

        return stats


@dataclass(frozen=True)
class TrainingAnswer:
    """Feedback on the last submitted training answer."""

    was_correct: bool
    player_action: PlayerAction
    correct_action: PlayerAction
    explanation: str


@dataclass(frozen=True)
class TrainingState:
    """Read-only snapshot of the trainer."""

    is_active: bool = False
    current_scenario: TrainingScenario | None = None
    filter: TrainingFilter = field(default_factory=TrainingFilter)
    stats: TrainingStats = field(default_factory=TrainingStats)
    last_answer: TrainingAnswer | None = None

    @property
    def phase(self) -> TrainingPhase:
        """Where the trainer is in its scenario cycle."""
        if not self.is_active or self.current_scenario is None:
            return TrainingPhase.IDLE
        if self.last_answer is not None:
            return TrainingPhase.ANSWERED
        return TrainingPhase.SCENARIO_SHOWN
