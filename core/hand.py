"""Hand model and evaluation for blackjack."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, Sequence

from core.cards import Card
from core.errors import HandClosedError


@dataclass(frozen=True)
class Hand:
    """
    An immutable blackjack hand.

    Updates go through the module-level functions, each returning a new hand.
    """

    cards: tuple[Card, ...] = ()
    bet: int = 0
    is_doubled_down: bool = False
    is_split: bool = False
    is_standing: bool = False
    is_busted: bool = False

    def __post_init__(self) -> None:
        if self.bet < 0:
            raise ValueError("Bet cannot be negative")

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        return f"{cards_str} ({calculate_hand_value(self.cards).display})"

    @property
    def is_closed(self) -> bool:
        """Check if the hand accepts no further cards."""
        return self.is_standing or self.is_busted


def create_empty_hand(bet: int = 0) -> Hand:
    """Create an empty hand carrying ``bet``."""
    return Hand(bet=bet)


def add_card_to_hand(hand: Hand, card: Card) -> Hand:
    """Return ``hand`` with ``card`` appended."""
    if hand.is_closed:
        raise HandClosedError("Cannot add a card to a standing or busted hand")
    return replace(hand, cards=hand.cards + (card,))


def double_down_hand(hand: Hand) -> Hand:
    """Return ``hand`` with its bet doubled and the doubled flag set."""
    return replace(hand, bet=hand.bet * 2, is_doubled_down=True)


def stand_hand(hand: Hand) -> Hand:
    """Return ``hand`` marked as standing."""
    return replace(hand, is_standing=True)


def mark_busted(hand: Hand) -> Hand:
    """Return ``hand`` marked as busted (and therefore standing)."""
    return replace(hand, is_busted=True, is_standing=True)


def reveal_hand(hand: Hand) -> Hand:
    """Return ``hand`` with every card turned face up."""
    return replace(hand, cards=tuple(card.with_face_up(True) for card in hand.cards))


@dataclass(frozen=True)
class HandValue:
    """Totals derived from the face-up cards of a hand."""

    hard: int
    soft: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool

    @property
    def best(self) -> int:
        """Return the total that counts for comparison."""
        return self.soft

    @property
    def display(self) -> str:
        """Human-readable total."""
        if self.is_busted:
            return f"{self.hard} (Bust)"
        if self.is_blackjack:
            return "Blackjack!"
        return str(self.soft)


class HandType(Enum):
    """Strategy table classification of a hand."""

    HARD = "hard"
    SOFT = "soft"
    PAIR = "pair"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandAnalysis:
    """Classification of a two-card hand for strategy lookup."""

    type: HandType
    value: int
    pair_rank: str | None = None
    soft_card: str | None = None


def calculate_hand_value(cards: Iterable[Card]) -> HandValue:
    """
    Calculate the totals of the face-up cards.

    Face-down cards are ignored, so a dealer hand with its hole card hidden
    reports only the up card.
    """
    visible = [card for card in cards if card.face_up]

    hard = sum(card.value for card in visible)
    has_ace = any(card.is_ace for card in visible)

    # At most one ace can count as 11
    soft = hard + 10 if has_ace and hard + 10 <= 21 else hard

    return HandValue(
        hard=hard,
        soft=soft,
        is_soft=soft != hard,
        is_blackjack=len(visible) == 2 and soft == 21,
        is_busted=hard > 21,
    )


def analyze_hand(cards: Sequence[Card]) -> HandAnalysis:
    """
    Classify a hand as hard, soft, or pair.

    Only meaningful for an exactly-two-card hand; fewer than two visible
    cards yields a hard 0 placeholder.
    """
    visible = [card for card in cards if card.face_up]
    if len(visible) < 2:
        return HandAnalysis(HandType.HARD, 0)

    value = calculate_hand_value(visible)

    if len(visible) == 2:
        first, second = visible
        if first.strategy_code == second.strategy_code:
            return HandAnalysis(HandType.PAIR, value.soft, pair_rank=first.strategy_code)

    has_ace = any(card.is_ace for card in visible)
    if has_ace and value.is_soft and len(visible) == 2:
        other = next((card for card in visible if not card.is_ace), None)
        return HandAnalysis(
            HandType.SOFT,
            value.soft,
            soft_card=other.strategy_code if other else None,
        )

    return HandAnalysis(HandType.HARD, value.soft if value.is_soft else value.hard)
