"""Blackjack round and training state machine."""

import logging
from dataclasses import replace
from decimal import Decimal
from random import Random
from typing import Callable

from transitions import Machine

from core.cards import Card
from core.deck import Deck
from core.errors import StatsFormatError, StrategyNotLoadedError
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.models import GameState, TrainingAnswer, TrainingState, TrainingStats
from core.game.persistence import InMemoryStatsStore, StatsStore
from core.game.play import BlackjackService
from core.game.rules import TableRules
from core.game.state import GameMode, GamePhase, TrainingPhase
from core.hand import (
    Hand,
    HandValue,
    calculate_hand_value,
    create_empty_hand,
    reveal_hand,
    stand_hand,
)
from core.strategy.basic import ACTION_LABELS, PlayerAction
from core.strategy.service import StrategyService
from core.strategy.training import TrainingScenario

logger = logging.getLogger(__name__)


class GameStateService:
    """
    Single owner of a table's round state and the strategy trainer.

    Callers read immutable snapshots (``game_state``, ``training_state``)
    and change them only through the command methods below. Commands
    that are not allowed in the current phase or mode return False and
    emit an INVALID_ACTION event instead of raising.
    """

    # State machine states
    STATES = [p.name.lower() for p in GamePhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "begin_player_turn", "source": "dealing", "dest": "player_turn"},
        {"trigger": "settle_natural", "source": "dealing", "dest": "settlement"},
        {"trigger": "begin_dealer_turn", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "begin_settlement", "source": "dealer_turn", "dest": "settlement"},
        {"trigger": "complete_round", "source": "settlement", "dest": "game_over"},
        {"trigger": "reset_table", "source": "*", "dest": "betting"},
    ]

    def __init__(
        self,
        rules: TableRules | None = None,
        strategy_service: StrategyService | None = None,
        stats_store: StatsStore | None = None,
        blackjack_service: BlackjackService | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a table in play mode, waiting for a bet.

        Args:
            rules: Table limits and shoe configuration
            strategy_service: Strategy table used by the trainer
            stats_store: Where training stats are kept between sessions
            blackjack_service: Dealing and settlement rules
            rng: Random number generator shared by the default services
        """
        self.rules = rules or TableRules()
        self.blackjack = blackjack_service or BlackjackService(self.rules.num_decks, rng)
        self.strategy = strategy_service or StrategyService(rng=rng)
        self.stats_store = stats_store or InMemoryStatsStore()
        self.events = EventEmitter()

        self._state = GameState(
            deck=self.blackjack.create_deck(),
            bankroll=Decimal(self.rules.default_bankroll),
            current_bet=self.rules.min_bet,
        )
        self._training = TrainingState(stats=self._load_training_stats())

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="betting",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_sync_phase",
        )

    # ------------------------------------------------------------------
    # Snapshots and views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        """Get the current round phase."""
        return GamePhase[self._machine_state.upper()]  # type: ignore

    @property
    def mode(self) -> GameMode:
        return self._state.mode

    @property
    def game_state(self) -> GameState:
        """Current table snapshot."""
        return self._state

    @property
    def training_state(self) -> TrainingState:
        """Current trainer snapshot."""
        return self._training

    @property
    def active_hand(self) -> Hand:
        return self._state.active_hand

    @property
    def dealer_up_card(self) -> Card | None:
        """The dealer's first face-up card, if any."""
        for card in self._state.dealer_hand.cards:
            if card.face_up:
                return card
        return None

    @property
    def dealer_value(self) -> HandValue:
        """Value of the dealer's visible cards."""
        return calculate_hand_value(self._state.dealer_hand.cards)

    @property
    def player_value(self) -> HandValue:
        """Value of the active hand."""
        return calculate_hand_value(self.active_hand.cards)

    @property
    def can_hit(self) -> bool:
        return self._can_act()

    @property
    def can_stand(self) -> bool:
        return self._can_act()

    @property
    def can_double(self) -> bool:
        return self._can_act() and self.blackjack.can_double(
            self.active_hand,
            self._state.bankroll,
        )

    @property
    def can_split(self) -> bool:
        return self._can_act() and self.blackjack.can_split(
            self.active_hand,
            self._state.bankroll,
        )

    @property
    def is_training_active(self) -> bool:
        return self._training.is_active

    @property
    def training_phase(self) -> TrainingPhase:
        return self._training.phase

    @property
    def can_start_training(self) -> bool:
        """Training may start between rounds, never with a stake on the table."""
        return self.mode == GameMode.TRAINING or self.phase in (
            GamePhase.BETTING,
            GamePhase.GAME_OVER,
        )

    @property
    def success_rate(self) -> int:
        """Training success rate as a rounded percentage."""
        return self._training.stats.success_rate

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Table commands
    # ------------------------------------------------------------------

    def set_mode(self, mode: GameMode) -> None:
        """
        Switch between play and training.

        Entering training starts the trainer; leaving it abandons the
        drill and opens a fresh betting round.

        Raises:
            StrategyNotLoadedError: If training is requested before the
                strategy table has been loaded
        """
        if mode == GameMode.TRAINING:
            self.start_training()
        elif self.mode == GameMode.TRAINING:
            self.stop_training()
        else:
            self.new_round()

    def new_round(self) -> bool:
        """
        Clear the table for the next bet.

        Returns:
            True if the table was reset
        """
        if self.mode != GameMode.PLAY:
            return self._reject("Switch to play mode to start a round")
        if self.phase not in (GamePhase.BETTING, GamePhase.GAME_OVER):
            return self._reject("Finish the current round first")

        self._reset_round()
        return True

    def place_bet(self, amount: int) -> bool:
        """
        Take a bet from the bankroll and deal the round.

        Args:
            amount: Bet amount, within the table limits

        Returns:
            True if the bet was accepted
        """
        if self.mode != GameMode.PLAY or self.phase != GamePhase.BETTING:
            return self._reject("Cannot bet in current state")

        if amount < self.rules.min_bet or amount > self.rules.max_bet:
            return self._reject(
                f"Bet must be between {self.rules.min_bet} and {self.rules.max_bet}"
            )

        if amount > self._state.bankroll:
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=amount,
                available=float(self._state.bankroll),
            )
            return False

        self._update(
            current_bet=amount,
            bankroll=self._state.bankroll - amount,
            round_number=self._state.round_number + 1,
        )
        self.events.emit_new(
            EventType.BET_PLACED,
            amount=amount,
            bankroll=float(self._state.bankroll),
        )

        self._deal()
        return True

    def hit(self) -> bool:
        """Draw a card onto the active hand."""
        if not self.can_hit:
            return self._reject("Cannot hit now")

        index = self._state.active_hand_index
        hand, deck = self.blackjack.hit(self.active_hand, self._state.deck)
        self._replace_active_hand(hand, deck=deck)

        value = calculate_hand_value(hand.cards)
        self.events.emit_new(
            EventType.PLAYER_HIT,
            hand_index=index,
            card=str(hand.cards[-1]),
            hand_value=value.best,
        )

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index, hand_value=value.hard)
            self._advance_hand()

        return True

    def stand(self) -> bool:
        """Stand on the active hand."""
        if not self.can_stand:
            return self._reject("Cannot stand now")

        index = self._state.active_hand_index
        hand = self.blackjack.stand(self.active_hand)
        self._replace_active_hand(hand)

        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_index=index,
            hand_value=calculate_hand_value(hand.cards).best,
        )
        self._advance_hand()
        return True

    def double(self) -> bool:
        """Double the active hand's bet, take one card, and stand."""
        if not self.can_double:
            return self._reject("Cannot double down now")

        index = self._state.active_hand_index
        extra = self.active_hand.bet
        hand, deck = self.blackjack.double_down(self.active_hand, self._state.deck)
        self._update(bankroll=self._state.bankroll - extra)
        self._replace_active_hand(hand, deck=deck)

        value = calculate_hand_value(hand.cards)
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=index,
            card=str(hand.cards[-1]),
            bet=hand.bet,
            hand_value=value.best,
        )
        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index, hand_value=value.hard)

        self._advance_hand()
        return True

    def split(self) -> bool:
        """Split the active pair into two hands; play continues on the first."""
        if not self.can_split:
            return self._reject("Cannot split now")

        index = self._state.active_hand_index
        extra = self.active_hand.bet
        new_hands, deck = self.blackjack.split(self.active_hand, self._state.deck)

        hands = list(self._state.player_hands)
        hands[index:index + 1] = new_hands
        self._update(
            player_hands=tuple(hands),
            deck=deck,
            bankroll=self._state.bankroll - extra,
        )

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand_index=index,
            num_hands=len(hands),
        )
        return True

    def reset_bankroll(self) -> None:
        """Restore the starting bankroll."""
        self._update(bankroll=Decimal(self.rules.default_bankroll))
        logger.info("Bankroll reset to %s", self.rules.default_bankroll)

    def hide_message(self) -> None:
        self._update(show_message=False)

    # ------------------------------------------------------------------
    # Training commands
    # ------------------------------------------------------------------

    def start_training(self) -> TrainingScenario | None:
        """
        Enter training mode and show the first scenario.

        Rejected while a round is in progress.

        Returns:
            The first scenario, or None if training could not start or
            no scenario matched the filter

        Raises:
            StrategyNotLoadedError: If the strategy table is not loaded
        """
        if not self.strategy.is_loaded:
            raise StrategyNotLoadedError("Load the strategy table before training")
        if not self.can_start_training:
            self._reject("Finish the current round before training")
            return None

        if self.mode == GameMode.PLAY:
            self._reset_round()
        self._update(mode=GameMode.TRAINING)
        self._training = replace(self._training, is_active=True, last_answer=None)
        self.events.emit_new(EventType.TRAINING_STARTED)
        logger.info("Training started")

        return self.generate_next_scenario()

    def stop_training(self) -> None:
        """Leave training mode and open a fresh betting round."""
        self._training = replace(
            self._training,
            is_active=False,
            current_scenario=None,
            last_answer=None,
        )
        if self.mode == GameMode.TRAINING:
            self._update(mode=GameMode.PLAY)
            self._reset_round()
            self.events.emit_new(EventType.TRAINING_STOPPED)
            logger.info("Training stopped")

    def generate_next_scenario(self) -> TrainingScenario | None:
        """
        Draw a new scenario and show it on the table.

        Returns:
            The scenario, or None if none could be drawn (state unchanged)
        """
        scenario = self.strategy.generate_training_scenario(self._training.filter)
        if scenario is None:
            logger.warning("No training scenario for filter %s", self._training.filter)
            return None

        self._training = replace(self._training, current_scenario=scenario, last_answer=None)
        self._update(
            player_hands=(Hand(cards=scenario.player_cards),),
            dealer_hand=Hand(cards=(scenario.dealer_up_card,)),
            active_hand_index=0,
            results=(),
            message="",
            show_message=False,
        )

        self.events.emit_new(
            EventType.SCENARIO_GENERATED,
            hand_type=scenario.hand_type.value,
            player_cards=[str(c) for c in scenario.player_cards],
            dealer_up_card=str(scenario.dealer_up_card),
        )
        return scenario

    def submit_training_answer(self, action: PlayerAction) -> TrainingAnswer | None:
        """
        Grade an answer to the current scenario and record it.

        Each scenario takes one answer; later submissions are ignored
        until the next scenario is drawn.

        Returns:
            The graded answer, or None if there was nothing to answer
        """
        scenario = self._training.current_scenario
        if scenario is None or self._training.last_answer is not None:
            self._reject("No unanswered training scenario")
            return None

        was_correct = action == scenario.correct_action
        answer = TrainingAnswer(
            was_correct=was_correct,
            player_action=action,
            correct_action=scenario.correct_action,
            explanation=scenario.explanation,
        )

        stats = self._training.stats.record_answer(scenario.hand_type, was_correct)
        self._training = replace(self._training, stats=stats, last_answer=answer)
        self._save_training_stats()

        if was_correct:
            message = f"Correct! {scenario.explanation}"
        else:
            message = (
                f"Incorrect. The optimal play is {ACTION_LABELS[scenario.correct_action]}. "
                f"{scenario.explanation}"
            )
        self._update(message=message, show_message=True)

        self.events.emit_new(
            EventType.TRAINING_ANSWERED,
            action=action.value,
            correct_action=scenario.correct_action.value,
            was_correct=was_correct,
            streak=stats.streak,
        )
        return answer

    def next_training_scenario(self) -> TrainingScenario | None:
        """Dismiss feedback and move to a new scenario."""
        self.hide_message()
        return self.generate_next_scenario()

    def update_training_filter(
        self,
        hard_hands: bool | None = None,
        soft_hands: bool | None = None,
        pairs: bool | None = None,
    ) -> None:
        """Enable or disable hand classifications; None leaves a flag unchanged."""
        changes = {
            name: value
            for name, value in (
                ("hard_hands", hard_hands),
                ("soft_hands", soft_hands),
                ("pairs", pairs),
            )
            if value is not None
        }
        self._training = replace(
            self._training,
            filter=replace(self._training.filter, **changes),
        )

    def reset_training_stats(self) -> None:
        """Zero the training stats and save them."""
        self._training = replace(self._training, stats=TrainingStats())
        self._save_training_stats()
        self.events.emit_new(EventType.STATS_RESET)

    # ------------------------------------------------------------------
    # Round internals
    # ------------------------------------------------------------------

    def _deal(self) -> None:
        self.begin_deal()

        deck = self._state.deck
        if len(deck) < self.rules.min_cards_to_deal:
            deck = self._new_shoe()

        player_hand, dealer_hand, deck = self.blackjack.deal_initial_cards(deck)
        player_hand = replace(player_hand, bet=self._state.current_bet)
        self._update(
            deck=deck,
            player_hands=(player_hand,),
            dealer_hand=dealer_hand,
            active_hand_index=0,
            results=(),
            message="",
            show_message=False,
        )

        # Dealing order: player, dealer, player, dealer hole card
        for recipient, card in (
            ("player", player_hand.cards[0]),
            ("dealer", dealer_hand.cards[0]),
            ("player", player_hand.cards[1]),
            ("dealer", dealer_hand.cards[1]),
        ):
            self.events.emit_new(
                EventType.CARD_DEALT,
                recipient=recipient,
                card=str(card) if card.face_up else None,
            )

        self.events.emit_new(
            EventType.ROUND_STARTED,
            round_number=self._state.round_number,
            player_cards=[str(c) for c in player_hand.cards],
            dealer_up_card=str(dealer_hand.cards[0]),
        )

        if calculate_hand_value(player_hand.cards).is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=0)
            self.settle_natural()
            self._update(dealer_hand=stand_hand(reveal_hand(dealer_hand)))
            self._emit_dealer_reveal()
            self._settle()
        else:
            self.begin_player_turn()

    def _advance_hand(self) -> None:
        """Move to the next unfinished hand, or to the dealer."""
        next_index = self._state.active_hand_index + 1
        if next_index < len(self._state.player_hands):
            self._update(active_hand_index=next_index)
            return

        self._play_dealer()

    def _play_dealer(self) -> None:
        self.begin_dealer_turn()

        dealer_hand = self._state.dealer_hand
        if all(hand.is_busted for hand in self._state.player_hands):
            self._update(dealer_hand=stand_hand(reveal_hand(dealer_hand)))
            self._emit_dealer_reveal()
        else:
            dealer_hand, deck = self.blackjack.play_dealer_turn(dealer_hand, self._state.deck)
            self._update(dealer_hand=dealer_hand, deck=deck)
            self._emit_dealer_reveal()

            value = calculate_hand_value(dealer_hand.cards)
            if value.is_busted:
                self.events.emit_new(EventType.DEALER_BUSTS, hand_value=value.hard)
            else:
                self.events.emit_new(EventType.DEALER_STANDS, hand_value=value.best)

        self.begin_settlement()
        self._settle()

    def _settle(self) -> None:
        dealer_hand = self._state.dealer_hand
        results = tuple(
            self.blackjack.determine_winner(hand, dealer_hand)
            for hand in self._state.player_hands
        )
        total = sum((r.payout for r in results), Decimal(0))

        for index, result in enumerate(results):
            self.events.emit_new(
                EventType.HAND_SETTLED,
                hand_index=index,
                outcome=result.outcome.value,
                payout=float(result.payout),
            )

        if len(results) == 1:
            message = results[0].message
        else:
            wins = sum(1 for r in results if r.outcome.is_win)
            message = f"{wins} of {len(results)} hands won"

        self._update(
            results=results,
            bankroll=self._state.bankroll + total,
            message=message,
            show_message=True,
        )
        self.complete_round()

        self.events.emit_new(
            EventType.ROUND_ENDED,
            round_number=self._state.round_number,
            payout=float(total),
            bankroll=float(self._state.bankroll),
        )
        logger.info(
            "Round %d settled: %s (bankroll %s)",
            self._state.round_number,
            message,
            self._state.bankroll,
        )

    def _reset_round(self) -> None:
        deck = self._state.deck
        if len(deck) < self.rules.reshuffle_threshold:
            deck = self._new_shoe()

        self.reset_table()
        self._update(
            deck=deck,
            dealer_hand=create_empty_hand(),
            player_hands=(create_empty_hand(),),
            active_hand_index=0,
            results=(),
            message="",
            show_message=False,
        )

    def _new_shoe(self) -> Deck:
        deck = self.blackjack.create_deck()
        self.events.emit_new(EventType.SHOE_SHUFFLED, cards=len(deck))
        logger.debug("New %d-card shoe", len(deck))
        return deck

    def _emit_dealer_reveal(self) -> None:
        dealer_hand = self._state.dealer_hand
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            cards=[str(c) for c in dealer_hand.cards],
            hand_value=calculate_hand_value(dealer_hand.cards).best,
        )

    def _can_act(self) -> bool:
        return (
            self.mode == GameMode.PLAY
            and self.phase == GamePhase.PLAYER_TURN
            and not self.active_hand.is_closed
        )

    def _replace_active_hand(self, hand: Hand, **changes) -> None:
        hands = list(self._state.player_hands)
        hands[self._state.active_hand_index] = hand
        self._update(player_hands=tuple(hands), **changes)

    def _reject(self, message: str) -> bool:
        self.events.emit_new(
            EventType.INVALID_ACTION,
            message=message,
            state=self.phase.name,
            mode=self.mode.value,
        )
        return False

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)

    def _sync_phase(self) -> None:
        """Mirror the machine state into the snapshot."""
        self._update(phase=self.phase)

    # ------------------------------------------------------------------
    # Stats persistence
    # ------------------------------------------------------------------

    def _load_training_stats(self) -> TrainingStats:
        try:
            stats = self.stats_store.load()
        except StatsFormatError as exc:
            logger.warning("Ignoring saved training stats: %s", exc)
            return TrainingStats()
        return stats if stats is not None else TrainingStats()

    def _save_training_stats(self) -> None:
        self.stats_store.save(self._training.stats)
