"""Training scenario types."""

from dataclasses import dataclass

from core.cards import Card
from core.hand import HandType
from core.strategy.basic import PlayerAction, StrategyCode


@dataclass(frozen=True)
class TrainingFilter:
    """Which hand classifications the trainer may ask about."""

    hard_hands: bool = True
    soft_hands: bool = True
    pairs: bool = True

    @property
    def enabled_types(self) -> list[HandType]:
        """Enabled classifications in hard, soft, pair order."""
        types = []
        if self.hard_hands:
            types.append(HandType.HARD)
        if self.soft_hands:
            types.append(HandType.SOFT)
        if self.pairs:
            types.append(HandType.PAIR)
        return types


@dataclass(frozen=True)
class TrainingScenario:
    """A two-card hand against a dealer up-card, with the correct play."""

    player_cards: tuple[Card, ...]
    dealer_up_card: Card
    correct_action: PlayerAction
    hand_type: HandType
    explanation: str
    strategy_code: StrategyCode


@dataclass(frozen=True)
class ActionValidation:
    """Result of checking a player's action against the table."""

    is_correct: bool
    correct_action: PlayerAction
    explanation: str
