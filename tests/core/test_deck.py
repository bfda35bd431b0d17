"""Tests for deck construction, shuffling, and drawing."""

from collections import Counter
from random import Random

import pytest

from core.cards import Rank, Suit
from core.deck import CARDS_PER_DECK, create_deck, draw_card, shuffle_deck
from core.errors import EmptyDeckError


class TestCreateDeck:
    """Tests for create_deck."""

    def test_single_deck_has_52_unique_cards(self):
        deck = create_deck(1, Random(1))
        assert len(deck) == CARDS_PER_DECK
        assert len({(c.rank, c.suit) for c in deck}) == 52

    def test_six_deck_shoe_composition(self):
        deck = create_deck(6, Random(1))
        assert len(deck) == 312
        counts = Counter((c.rank, c.suit) for c in deck)
        assert set(counts.values()) == {6}
        assert len(counts) == len(Rank) * len(Suit)

    def test_cards_are_face_up(self):
        assert all(c.face_up for c in create_deck(1, Random(2)))

    def test_invalid_deck_count(self):
        with pytest.raises(ValueError):
            create_deck(0)

    def test_seeded_decks_are_reproducible(self):
        assert create_deck(2, Random(7)) == create_deck(2, Random(7))


class TestShuffle:
    """Tests for shuffle_deck."""

    def test_shuffle_is_permutation(self):
        deck = create_deck(1, Random(1))
        shuffled = shuffle_deck(deck, Random(99))
        assert Counter(shuffled) == Counter(deck)

    def test_shuffle_leaves_input_untouched(self):
        deck = create_deck(1, Random(1))
        original = tuple(deck)
        shuffle_deck(deck, Random(5))
        assert deck == original

    def test_shuffle_changes_order(self):
        deck = create_deck(1, Random(1))
        assert shuffle_deck(deck, Random(5)) != deck


class TestDraw:
    """Tests for draw_card."""

    def test_draw_removes_one_card(self):
        deck = create_deck(1, Random(1))
        card, remaining = draw_card(deck)
        assert card == deck[0]
        assert remaining == deck[1:]
        assert len(deck) == 52

    def test_draw_face_down(self):
        deck = create_deck(1, Random(1))
        card, _ = draw_card(deck, face_up=False)
        assert not card.face_up
        assert card.rank == deck[0].rank

    def test_draw_from_empty_deck(self):
        with pytest.raises(EmptyDeckError):
            draw_card(())
