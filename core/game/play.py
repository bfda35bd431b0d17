"""Dealing, player actions, dealer play, and settlement."""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from random import Random
from typing import NamedTuple

from core.cards import Card, Rank, Suit
from core.deck import Deck, create_deck, draw_card
from core.errors import InvalidDoubleError, InvalidSplitError
from core.game.rules import BLACKJACK_RETURN, WIN_RETURN
from core.hand import (
    Hand,
    add_card_to_hand,
    calculate_hand_value,
    create_empty_hand,
    double_down_hand,
    mark_busted,
    reveal_hand,
    stand_hand,
)

DEALER_STANDS_ON = 17


class Outcome(Enum):
    """How a player hand ended against the dealer."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"

    @property
    def is_win(self) -> bool:
        return self in (Outcome.WIN, Outcome.BLACKJACK)


@dataclass(frozen=True)
class GameResult:
    """Settlement of one player hand; ``payout`` is the total returned."""

    outcome: Outcome
    payout: Decimal
    message: str


class DealResult(NamedTuple):
    player_hand: Hand
    dealer_hand: Hand
    remaining_deck: Deck


class HandResult(NamedTuple):
    hand: Hand
    remaining_deck: Deck


class SplitResult(NamedTuple):
    hands: tuple[Hand, Hand]
    remaining_deck: Deck


class BlackjackService:
    """
    Stateless blackjack rules.

    Every operation takes the deck and hands it works on and returns new
    values; nothing is kept between calls except the shoe size and the
    random source used for fresh decks.
    """

    def __init__(self, num_decks: int = 6, rng: Random | None = None) -> None:
        """
        Initialize the service.

        Args:
            num_decks: Decks per freshly created shoe
            rng: Random number generator for shuffling
        """
        self.num_decks = num_decks
        self._rng = rng or Random()

    def create_deck(self, deck_count: int | None = None) -> Deck:
        """Create a freshly shuffled shoe."""
        return create_deck(deck_count or self.num_decks, self._rng)

    def deal_initial_cards(self, deck: Deck) -> DealResult:
        """Deal player, dealer, player, dealer (hole card face down)."""
        player_hand = create_empty_hand()
        dealer_hand = create_empty_hand()

        card, deck = draw_card(deck, face_up=True)
        player_hand = add_card_to_hand(player_hand, card)

        card, deck = draw_card(deck, face_up=True)
        dealer_hand = add_card_to_hand(dealer_hand, card)

        card, deck = draw_card(deck, face_up=True)
        player_hand = add_card_to_hand(player_hand, card)

        card, deck = draw_card(deck, face_up=False)
        dealer_hand = add_card_to_hand(dealer_hand, card)

        return DealResult(player_hand, dealer_hand, deck)

    def hit(self, hand: Hand, deck: Deck) -> HandResult:
        """Draw one card onto the hand; a hard total over 21 busts it."""
        card, deck = draw_card(deck, face_up=True)
        hand = add_card_to_hand(hand, card)

        if calculate_hand_value(hand.cards).is_busted:
            hand = mark_busted(hand)

        return HandResult(hand, deck)

    def stand(self, hand: Hand) -> Hand:
        """Stand on the hand."""
        return stand_hand(hand)

    def double_down(self, hand: Hand, deck: Deck) -> HandResult:
        """
        Double the bet, take exactly one card, and stand.

        Raises:
            InvalidDoubleError: If the hand is not an undoubled two-card hand
        """
        if len(hand.cards) != 2 or hand.is_doubled_down:
            raise InvalidDoubleError("Can only double down on an undoubled two-card hand")

        hand, deck = self.hit(double_down_hand(hand), deck)
        return HandResult(stand_hand(hand), deck)

    def split(self, hand: Hand, deck: Deck) -> SplitResult:
        """
        Split a pair into two hands at the original bet.

        Raises:
            InvalidSplitError: If the hand is not an unsplit pair
        """
        if len(hand.cards) != 2:
            raise InvalidSplitError("Can only split a two-card hand")
        if hand.is_split:
            raise InvalidSplitError("Hand has already been split")

        first, second = hand.cards
        if first.strategy_code != second.strategy_code:
            raise InvalidSplitError("Can only split two cards of the same value")

        new_hands = []
        for card in (first, second):
            new_hand = add_card_to_hand(create_empty_hand(hand.bet), card)
            drawn, deck = draw_card(deck, face_up=True)
            new_hand = add_card_to_hand(new_hand, drawn)
            new_hands.append(replace(new_hand, is_split=True))

        return SplitResult((new_hands[0], new_hands[1]), deck)

    def can_split(self, hand: Hand, bankroll: Decimal | int) -> bool:
        """Check if the hand is an unsplit pair the bankroll can match."""
        if len(hand.cards) != 2:
            return False
        if hand.is_split:
            return False
        if bankroll < hand.bet:
            return False

        first, second = hand.cards
        return first.strategy_code == second.strategy_code

    def can_double(self, hand: Hand, bankroll: Decimal | int) -> bool:
        """Check if the hand is an undoubled two-card hand the bankroll can match."""
        if len(hand.cards) != 2:
            return False
        if hand.is_doubled_down:
            return False
        return bankroll >= hand.bet

    def play_dealer_turn(self, dealer_hand: Hand, deck: Deck) -> HandResult:
        """Reveal the hole card, then hit until soft 17 or more, or bust."""
        hand = reveal_hand(dealer_hand)

        while True:
            value = calculate_hand_value(hand.cards)

            if value.is_busted:
                return HandResult(mark_busted(hand), deck)

            if value.soft >= DEALER_STANDS_ON:
                return HandResult(stand_hand(hand), deck)

            hand, deck = self.hit(hand, deck)

    def determine_winner(self, player_hand: Hand, dealer_hand: Hand) -> GameResult:
        """
        Settle a player hand against the dealer.

        Payouts are the total returned to the bankroll; the stake was taken
        when the bet was placed.
        """
        player_value = calculate_hand_value(player_hand.cards)
        dealer_value = calculate_hand_value(dealer_hand.cards)
        bet = Decimal(player_hand.bet)

        if player_value.is_busted:
            return GameResult(Outcome.LOSE, Decimal(0), "Bust! You lose.")

        if player_value.is_blackjack and not player_hand.is_split:
            if dealer_value.is_blackjack:
                return GameResult(Outcome.PUSH, bet, "Both have blackjack - push!")
            return GameResult(
                Outcome.BLACKJACK,
                bet * BLACKJACK_RETURN,
                "Blackjack! Pays 3:2!",
            )

        if dealer_value.is_blackjack:
            return GameResult(Outcome.LOSE, Decimal(0), "Dealer has blackjack! You lose.")

        if dealer_value.is_busted:
            return GameResult(Outcome.WIN, bet * WIN_RETURN, "Dealer busts! You win!")

        player_final = player_value.soft
        dealer_final = dealer_value.soft

        if player_final > dealer_final:
            return GameResult(
                Outcome.WIN,
                bet * WIN_RETURN,
                f"{player_final} beats {dealer_final}. You win!",
            )
        if dealer_final > player_final:
            return GameResult(
                Outcome.LOSE,
                Decimal(0),
                f"{dealer_final} beats {player_final}. Dealer wins.",
            )
        return GameResult(
            Outcome.PUSH,
            bet,
            f"Push at {player_final}. Bet returned.",
        )

    def create_card(self, rank: Rank, suit: Suit, face_up: bool = True) -> Card:
        """Create a specific card."""
        return Card(rank, suit, face_up)

    def get_strategy_code(self, rank: Rank) -> str:
        """Get the strategy table code for a rank."""
        return rank.strategy_code
