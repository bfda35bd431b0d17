"""Blackjack rules engine and strategy trainer - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit
from core.deck import Deck, create_deck, draw_card, shuffle_deck
from core.hand import Hand, HandType, analyze_hand, calculate_hand_value

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "Deck",
    "create_deck",
    "draw_card",
    "shuffle_deck",
    "Hand",
    "HandType",
    "analyze_hand",
    "calculate_hand_value",
]
