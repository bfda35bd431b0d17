"""Table rules and limits."""

from dataclasses import dataclass
from decimal import Decimal

# Total returned on a winning natural: stake plus 3:2 profit
BLACKJACK_RETURN = Decimal("2.5")
# Total returned on an ordinary win: stake plus even money
WIN_RETURN = Decimal("2")

CHIP_VALUES: tuple[int, ...] = (10, 25, 50, 100, 500)


@dataclass(frozen=True)
class TableRules:
    """
    Blackjack table configuration.

    The dealer always stands on soft 17; naturals pay 3:2.
    """

    # Shoe configuration
    num_decks: int = 6
    reshuffle_threshold: int = 52  # New shoe at round reset below this
    min_cards_to_deal: int = 20  # New shoe before dealing below this

    # Betting limits
    min_bet: int = 10
    max_bet: int = 500
    default_bankroll: int = 1000

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.min_bet < 1:
            raise ValueError("min_bet must be at least 1")
        if self.max_bet < self.min_bet:
            raise ValueError("max_bet must not be below min_bet")
        if self.min_cards_to_deal < 1:
            raise ValueError("min_cards_to_deal must be at least 1")
        if self.reshuffle_threshold > self.num_decks * 52:
            raise ValueError("reshuffle_threshold exceeds the shoe size")

    @classmethod
    def single_deck(cls) -> "TableRules":
        """Single deck table."""
        return cls(num_decks=1, reshuffle_threshold=26, min_cards_to_deal=15)

    @classmethod
    def high_limit(cls) -> "TableRules":
        """High limit table with a deeper bankroll."""
        return cls(min_bet=100, max_bet=5000, default_bankroll=10000)
