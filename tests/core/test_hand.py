"""Tests for the hand model and hand evaluation."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import card_lists, make_card, make_cards, make_hand
from core.cards import Suit
from core.errors import HandClosedError
from core.hand import (
    HandType,
    add_card_to_hand,
    analyze_hand,
    calculate_hand_value,
    create_empty_hand,
    double_down_hand,
    mark_busted,
    reveal_hand,
    stand_hand,
)


class TestHand:
    """Tests for the immutable Hand and its transforms."""

    def test_empty_hand(self):
        hand = create_empty_hand(25)
        assert len(hand) == 0
        assert hand.bet == 25
        assert not hand.is_closed

    def test_negative_bet_rejected(self):
        with pytest.raises(ValueError):
            create_empty_hand(-1)

    def test_add_card_returns_new_hand(self):
        hand = create_empty_hand()
        card = make_card("7")
        new_hand = add_card_to_hand(hand, card)
        assert new_hand.cards == (card,)
        assert hand.cards == ()

    def test_closed_hand_rejects_cards(self, hard_16_hand):
        with pytest.raises(HandClosedError):
            add_card_to_hand(stand_hand(hard_16_hand), make_card("2"))
        with pytest.raises(HandClosedError):
            add_card_to_hand(mark_busted(hard_16_hand), make_card("2"))

    def test_double_down_doubles_bet(self, hard_16_hand):
        doubled = double_down_hand(hard_16_hand)
        assert doubled.bet == 200
        assert doubled.is_doubled_down

    def test_mark_busted_closes_hand(self, hard_16_hand):
        busted = mark_busted(hard_16_hand)
        assert busted.is_busted
        assert busted.is_closed

    def test_reveal_turns_cards_face_up(self):
        hand = make_hand("K")
        hand = add_card_to_hand(hand, make_card("7", Suit.CLUBS, face_up=False))
        assert calculate_hand_value(hand.cards).soft == 10
        revealed = reveal_hand(hand)
        assert all(c.face_up for c in revealed.cards)
        assert calculate_hand_value(revealed.cards).soft == 17


class TestCalculateHandValue:
    """Tests for hard and soft totals."""

    def test_hard_hand_value(self, hard_16_hand):
        value = calculate_hand_value(hard_16_hand.cards)
        assert value.hard == 16
        assert value.soft == 16
        assert not value.is_soft

    def test_soft_hand_value(self, soft_17_hand):
        value = calculate_hand_value(soft_17_hand.cards)
        assert value.hard == 7
        assert value.soft == 17
        assert value.is_soft
        assert value.best == 17

    def test_blackjack(self, blackjack_hand):
        value = calculate_hand_value(blackjack_hand.cards)
        assert value.is_blackjack
        assert value.display == "Blackjack!"

    def test_three_card_21_is_not_blackjack(self):
        value = calculate_hand_value(make_cards("7", "7", "7"))
        assert value.soft == 21
        assert not value.is_blackjack

    def test_bust(self):
        value = calculate_hand_value(make_cards("10", "6", "K"))
        assert value.is_busted
        assert value.hard == 26
        assert value.display == "26 (Bust)"

    def test_soft_to_hard_transition(self):
        value = calculate_hand_value(make_cards("A", "6", "9"))
        assert value.hard == 16
        assert value.soft == 16
        assert not value.is_soft

    def test_multiple_aces(self):
        value = calculate_hand_value(make_cards("A", "A", "9"))
        assert value.hard == 11
        assert value.soft == 21

    def test_face_down_cards_ignored(self):
        cards = (make_card("A"), make_card("K", face_up=False))
        value = calculate_hand_value(cards)
        assert value.soft == 11
        assert not value.is_blackjack

    @given(card_lists(max_cards=8), st.randoms())
    def test_order_invariance(self, cards, random):
        shuffled = list(cards)
        random.shuffle(shuffled)
        assert calculate_hand_value(shuffled) == calculate_hand_value(cards)

    @settings(max_examples=200)
    @given(card_lists(max_cards=8))
    def test_totals_relationship(self, cards):
        value = calculate_hand_value(cards)
        if not any(c.is_ace for c in cards):
            assert value.hard == value.soft
        else:
            assert value.soft in (value.hard, value.hard + 10)
        assert value.soft <= 21 or value.soft == value.hard
        assert value.is_busted == (value.hard > 21)


class TestAnalyzeHand:
    """Tests for strategy classification."""

    def test_pair_detection(self, pair_8s_hand):
        analysis = analyze_hand(pair_8s_hand.cards)
        assert analysis.type == HandType.PAIR
        assert analysis.pair_rank == "8"
        assert analysis.value == 16

    def test_mixed_ten_values_are_a_pair(self):
        analysis = analyze_hand(make_cards("K", "10"))
        assert analysis.type == HandType.PAIR
        assert analysis.pair_rank == "T"

    def test_aces_are_a_pair(self):
        analysis = analyze_hand(make_cards("A", "A"))
        assert analysis.type == HandType.PAIR
        assert analysis.pair_rank == "A"

    def test_soft_hand(self, soft_17_hand):
        analysis = analyze_hand(soft_17_hand.cards)
        assert analysis.type == HandType.SOFT
        assert analysis.soft_card == "6"
        assert analysis.value == 17

    def test_soft_hand_with_ten(self):
        analysis = analyze_hand(make_cards("Q", "A"))
        assert analysis.type == HandType.SOFT
        assert analysis.soft_card == "T"

    def test_hard_hand(self, hard_16_hand):
        analysis = analyze_hand(hard_16_hand.cards)
        assert analysis.type == HandType.HARD
        assert analysis.value == 16

    def test_three_card_soft_total_is_hard(self):
        analysis = analyze_hand(make_cards("A", "2", "3"))
        assert analysis.type == HandType.HARD
        assert analysis.value == 16

    @pytest.mark.parametrize("codes", [(), ("A",)])
    def test_short_hands(self, codes):
        analysis = analyze_hand(make_cards(*codes))
        assert analysis.type == HandType.HARD
        assert analysis.value == 0

    def test_hole_card_does_not_count(self):
        dealer = (make_card("K"), make_card("7", Suit.HEARTS, face_up=False))
        analysis = analyze_hand(dealer)
        assert analysis.type == HandType.HARD
        assert analysis.value == 0
