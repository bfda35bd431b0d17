"""Deck construction, shuffling, and drawing.

Decks are plain tuples of cards. Every operation returns a new tuple and
leaves the caller's deck untouched.
"""

from random import Random
from typing import NamedTuple, Sequence

from core.cards import Card, Rank, Suit
from core.errors import EmptyDeckError

CARDS_PER_DECK = 52

Deck = tuple[Card, ...]


class DrawResult(NamedTuple):
    """A drawn card and the deck left behind."""

    card: Card
    remaining_deck: Deck


def create_deck(deck_count: int = 6, rng: Random | None = None) -> Deck:
    """
    Build a shuffled shoe of ``deck_count`` standard decks.

    Args:
        deck_count: Number of 52-card decks to merge
        rng: Random number generator for shuffling

    Returns:
        The shuffled cards, all face up
    """
    if deck_count < 1:
        raise ValueError("Deck count must be at least 1")

    cards = [
        Card(rank, suit)
        for _ in range(deck_count)
        for suit in Suit
        for rank in Rank
    ]
    return shuffle_deck(cards, rng)


def shuffle_deck(deck: Sequence[Card], rng: Random | None = None) -> Deck:
    """Return a Fisher-Yates shuffled copy of ``deck``."""
    rng = rng or Random()
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


def draw_card(deck: Sequence[Card], face_up: bool = True) -> DrawResult:
    """
    Draw the front card of the deck.

    Args:
        deck: Cards to draw from
        face_up: Orientation of the drawn card

    Returns:
        The drawn card and the remaining deck

    Raises:
        EmptyDeckError: If the deck has no cards
    """
    if not deck:
        raise EmptyDeckError("Cannot draw from empty deck")

    card = deck[0].with_face_up(face_up)
    return DrawResult(card, tuple(deck[1:]))
