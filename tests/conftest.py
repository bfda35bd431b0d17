"""Pytest fixtures for blackjack trainer tests."""

import asyncio
import json
from itertools import cycle
from random import Random

import pytest
from hypothesis import strategies as st

from core.cards import Card, Rank, Suit
from core.game.engine import GameStateService
from core.game.persistence import InMemoryStatsStore
from core.game.play import BlackjackService
from core.game.rules import TableRules
from core.hand import Hand
from core.strategy.loader import DEFAULT_STRATEGY_PATH
from core.strategy.service import StrategyService


def make_card(code: str, suit: Suit = Suit.SPADES, face_up: bool = True) -> Card:
    """Build a card from a rank label; 'T' means a ten."""
    return Card(Rank("10" if code == "T" else code), suit, face_up)


def make_cards(*codes: str) -> tuple[Card, ...]:
    """Build face-up cards from rank labels, rotating suits."""
    suits = cycle(Suit)
    return tuple(make_card(code, next(suits)) for code in codes)


def make_hand(*codes: str, bet: int = 0, **flags) -> Hand:
    """Build a hand from rank labels."""
    return Hand(cards=make_cards(*codes), bet=bet, **flags)


class StackedBlackjackService(BlackjackService):
    """Deals the given cards first, then a fresh single deck."""

    def __init__(self, codes: tuple[str, ...]) -> None:
        super().__init__(num_decks=1, rng=Random(0))
        self._stack = make_cards(*codes)

    def create_deck(self, deck_count: int | None = None):
        return self._stack + super().create_deck(1)


class StaticStrategySource:
    """In-memory strategy source counting its calls."""

    def __init__(self, document) -> None:
        self.document = document
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        return self.document

    def __repr__(self) -> str:
        return "StaticStrategySource()"


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def strategy_document():
    """The packaged basic strategy table."""
    return json.loads(DEFAULT_STRATEGY_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def strategy_source(strategy_document):
    return StaticStrategySource(strategy_document)


@pytest.fixture
def strategy_service(strategy_source, rng):
    """A strategy service with the table already loaded."""
    service = StrategyService(strategy_source, rng=rng)
    asyncio.run(service.load_strategy())
    return service


@pytest.fixture
def stats_store():
    return InMemoryStatsStore()


@pytest.fixture
def game(strategy_service, stats_store, rng):
    """A new table in play mode."""
    return GameStateService(
        strategy_service=strategy_service,
        stats_store=stats_store,
        rng=rng,
    )


@pytest.fixture
def stacked_game(strategy_service, stats_store):
    """Factory for a table whose shoe starts with the given ranks.

    Deal order is player, dealer up, player, dealer hole, then hits.
    """

    def _make(*codes: str, rules: TableRules | None = None) -> GameStateService:
        return GameStateService(
            rules=rules or TableRules(num_decks=1, reshuffle_threshold=26),
            strategy_service=strategy_service,
            stats_store=stats_store,
            blackjack_service=StackedBlackjackService(codes),
        )

    return _make


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("A", "K", bet=100)


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("A", "6")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10", "6", bet=100)


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return make_hand("8", "8", bet=100)


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random face-up card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


def card_lists(min_cards: int = 0, max_cards: int = 8):
    """Generate lists of random cards."""
    return st.lists(card_strategy(), min_size=min_cards, max_size=max_cards)
