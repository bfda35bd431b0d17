"""Card, Suit, and Rank - immutable card representations."""

from dataclasses import dataclass, replace
from enum import Enum
from random import Random


class Suit(Enum):
    """Card suits."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, valued by their face label."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def min_value(self) -> int:
        """Return the lowest blackjack value (Ace = 1, face cards = 10)."""
        if self == Rank.ACE:
            return 1
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def max_value(self) -> int:
        """Return the highest blackjack value (Ace = 11)."""
        if self == Rank.ACE:
            return 11
        return self.min_value

    @property
    def strategy_code(self) -> str:
        """Return the strategy table code: 2-9, T for ten-valued, A for ace."""
        if self == Rank.ACE:
            return "A"
        if self.min_value == 10:
            return "T"
        return self.value

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.min_value == 10


TEN_VALUE_RANKS: tuple[Rank, ...] = (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING)

# Dealer up-card codes in strategy table column order
DEALER_CODES: tuple[str, ...] = ("2", "3", "4", "5", "6", "7", "8", "9", "T", "A")


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit
    face_up: bool = True

    def __str__(self) -> str:
        if not self.face_up:
            return "??"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        state = "" if self.face_up else ", face_down"
        return f"Card({self.rank.name}, {self.suit.name}{state})"

    @property
    def value(self) -> int:
        """Return the minimum blackjack point value."""
        return self.rank.min_value

    @property
    def strategy_code(self) -> str:
        """Return the strategy table code for this card."""
        return self.rank.strategy_code

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    def with_face_up(self, face_up: bool = True) -> "Card":
        """Return a copy of this card with the given orientation."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', '10h'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str == "T":
            rank_str = "10"

        suit_map = {
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        try:
            rank = Rank(rank_str)
        except ValueError:
            raise ValueError(f"Invalid rank: {rank_str}") from None
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank, suit_map[suit_str])


def rank_for_code(code: str, rng: Random | None = None) -> Rank:
    """
    Convert a strategy code back to a concrete rank.

    Args:
        code: Strategy code (2-9, T, A)
        rng: Random source used to pick one of the ten-valued ranks for 'T'

    Returns:
        A rank whose strategy code is ``code``
    """
    if code == "T":
        return (rng or Random()).choice(TEN_VALUE_RANKS)
    if code == "A":
        return Rank.ACE
    try:
        rank = Rank(code)
    except ValueError:
        raise ValueError(f"Invalid strategy code: {code}") from None
    if rank.is_ten_value:
        raise ValueError(f"Invalid strategy code: {code}")
    return rank


def rank_for_value(value: int, rng: Random | None = None) -> Rank:
    """Convert a point value (1-10) to a rank; 1 maps to the Ace."""
    if value == 1:
        return Rank.ACE
    if 2 <= value <= 9:
        return Rank(str(value))
    if value == 10:
        return (rng or Random()).choice(TEN_VALUE_RANKS)
    raise ValueError(f"Invalid card value: {value}")
