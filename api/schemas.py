"""Pydantic schemas for API requests and responses."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.cards import Card
from core.game.models import GameState, TrainingState, TrainingStats
from core.game.play import GameResult
from core.hand import Hand, calculate_hand_value
from core.strategy.training import TrainingScenario

ActionName = Literal["hit", "stand", "double", "split"]


# Game schemas
class BetRequest(BaseModel):
    """Request to place a bet."""

    amount: int = Field(..., ge=1, description="Bet amount")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: ActionName


class ModeRequest(BaseModel):
    """Request to switch between play and training."""

    mode: Literal["play", "training"]


class CardResponse(BaseModel):
    """Card representation; face-down cards hide rank and suit."""

    model_config = ConfigDict(from_attributes=True)

    rank: str | None
    suit: str | None
    value: int | None
    face_up: bool = True

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        if not card.face_up:
            return cls(rank=None, suit=None, value=None, face_up=False)
        return cls(rank=card.rank.value, suit=card.suit.value, value=card.value)


class HandResponse(BaseModel):
    """Hand representation, valued on visible cards."""

    cards: list[CardResponse]
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    is_standing: bool
    is_doubled_down: bool
    is_split: bool
    bet: int

    @classmethod
    def from_hand(cls, hand: Hand) -> "HandResponse":
        value = calculate_hand_value(hand.cards)
        return cls(
            cards=[CardResponse.from_card(c) for c in hand.cards],
            value=value.best,
            is_soft=value.is_soft,
            is_blackjack=value.is_blackjack,
            is_busted=value.is_busted,
            is_standing=hand.is_standing,
            is_doubled_down=hand.is_doubled_down,
            is_split=hand.is_split,
            bet=hand.bet,
        )


class RoundResultResponse(BaseModel):
    """Settlement of one hand."""

    outcome: Literal["win", "lose", "push", "blackjack"]
    payout: float
    message: str

    @classmethod
    def from_result(cls, result: GameResult) -> "RoundResultResponse":
        return cls(
            outcome=result.outcome.value,
            payout=float(result.payout),
            message=result.message,
        )


class GameStateResponse(BaseModel):
    """Current game state."""

    mode: Literal["play", "training"]
    phase: str
    player_hands: list[HandResponse]
    active_hand_index: int
    dealer_hand: HandResponse
    dealer_showing: CardResponse | None
    bankroll: float
    current_bet: int
    round_number: int
    cards_remaining: int
    results: list[RoundResultResponse]
    message: str
    show_message: bool
    can_hit: bool
    can_stand: bool
    can_double: bool
    can_split: bool


def game_state_response(
    state: GameState,
    dealer_showing: Card | None,
    can_hit: bool,
    can_stand: bool,
    can_double: bool,
    can_split: bool,
) -> GameStateResponse:
    """Build the response for a table snapshot."""
    return GameStateResponse(
        mode=state.mode.value,
        phase=state.phase.value,
        player_hands=[HandResponse.from_hand(h) for h in state.player_hands],
        active_hand_index=state.active_hand_index,
        dealer_hand=HandResponse.from_hand(state.dealer_hand),
        dealer_showing=CardResponse.from_card(dealer_showing) if dealer_showing else None,
        bankroll=float(state.bankroll),
        current_bet=state.current_bet,
        round_number=state.round_number,
        cards_remaining=len(state.deck),
        results=[RoundResultResponse.from_result(r) for r in state.results],
        message=state.message,
        show_message=state.show_message,
        can_hit=can_hit,
        can_stand=can_stand,
        can_double=can_double,
        can_split=can_split,
    )


# Training schemas
class TrainingFilterRequest(BaseModel):
    """Partial update of the scenario filter."""

    hard_hands: bool | None = None
    soft_hands: bool | None = None
    pairs: bool | None = None


class TrainingFilterResponse(BaseModel):
    """Enabled scenario classifications."""

    model_config = ConfigDict(from_attributes=True)

    hard_hands: bool
    soft_hands: bool
    pairs: bool


class AnswerRequest(BaseModel):
    """Answer to the current training scenario."""

    action: ActionName


class AnswerResponse(BaseModel):
    """Graded training answer."""

    was_correct: bool
    player_action: ActionName
    correct_action: ActionName
    explanation: str


class ScenarioResponse(BaseModel):
    """A training scenario, without its answer."""

    hand_type: Literal["hard", "soft", "pair"]
    player_cards: list[CardResponse]
    dealer_up_card: CardResponse

    @classmethod
    def from_scenario(cls, scenario: TrainingScenario) -> "ScenarioResponse":
        return cls(
            hand_type=scenario.hand_type.value,
            player_cards=[CardResponse.from_card(c) for c in scenario.player_cards],
            dealer_up_card=CardResponse.from_card(scenario.dealer_up_card),
        )


class CategoryStatsResponse(BaseModel):
    """Attempts for one hand classification."""

    total: int
    correct: int


class TrainingStatsResponse(BaseModel):
    """Cumulative training results."""

    total_attempts: int
    correct_attempts: int
    success_rate: int
    streak: int
    best_streak: int
    by_category: dict[str, CategoryStatsResponse]

    @classmethod
    def from_stats(cls, stats: TrainingStats) -> "TrainingStatsResponse":
        return cls(
            total_attempts=stats.total_attempts,
            correct_attempts=stats.correct_attempts,
            success_rate=stats.success_rate,
            streak=stats.streak,
            best_streak=stats.best_streak,
            by_category={
                hand_type.value: CategoryStatsResponse(total=c.total, correct=c.correct)
                for hand_type, c in stats.by_category.items()
            },
        )


class TrainingStateResponse(BaseModel):
    """Current trainer state."""

    is_active: bool
    phase: Literal["idle", "scenario-shown", "answered"]
    scenario: ScenarioResponse | None
    filter: TrainingFilterResponse
    stats: TrainingStatsResponse
    last_answer: AnswerResponse | None
    message: str
    show_message: bool


def training_state_response(training: TrainingState, game: GameState) -> TrainingStateResponse:
    """Build the response for a trainer snapshot."""
    answer = training.last_answer
    return TrainingStateResponse(
        is_active=training.is_active,
        phase=training.phase.value,
        scenario=(
            ScenarioResponse.from_scenario(training.current_scenario)
            if training.current_scenario
            else None
        ),
        filter=TrainingFilterResponse.model_validate(training.filter),
        stats=TrainingStatsResponse.from_stats(training.stats),
        last_answer=(
            AnswerResponse(
                was_correct=answer.was_correct,
                player_action=answer.player_action.value,
                correct_action=answer.correct_action.value,
                explanation=answer.explanation,
            )
            if answer
            else None
        ),
        message=game.message,
        show_message=game.show_message,
    )


class RecommendationRequest(BaseModel):
    """Ask for the basic strategy play of an arbitrary hand."""

    player_cards: list[str] = Field(..., min_length=2, examples=[["AS", "7H"]])
    dealer_up_card: str = Field(..., examples=["6D"])
    can_double: bool = True
    can_split: bool = True


class RecommendationResponse(BaseModel):
    """Basic strategy play for a hand."""

    action: ActionName | None
    hand_type: Literal["hard", "soft", "pair"]
    hand_value: int
    label: str | None
