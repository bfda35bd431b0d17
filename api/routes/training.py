"""Strategy training API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.schemas import (
    AnswerRequest,
    AnswerResponse,
    RecommendationRequest,
    RecommendationResponse,
    TrainingFilterRequest,
    TrainingStateResponse,
    training_state_response,
)
from api.session import get_game, get_strategy_service
from core.cards import Card
from core.errors import StrategyLoadError
from core.game.engine import GameStateService
from core.hand import analyze_hand
from core.strategy.basic import ACTION_LABELS, PlayerAction
from core.strategy.service import StrategyService

logger = logging.getLogger(__name__)

router = APIRouter()

Game = Annotated[GameStateService, Depends(get_game)]


async def _ensure_strategy(strategy: StrategyService) -> None:
    """Load the strategy table or answer 503."""
    try:
        await strategy.load_strategy()
    except StrategyLoadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _training_state_response(game: GameStateService) -> TrainingStateResponse:
    return training_state_response(game.training_state, game.game_state)


@router.post("/start")
async def start_training(game: Game) -> TrainingStateResponse:
    """Enter training mode and draw the first scenario."""
    if not game.can_start_training:
        raise HTTPException(status_code=400, detail="Finish the current round before training")
    await _ensure_strategy(game.strategy)
    game.start_training()
    return _training_state_response(game)


@router.post("/stop")
async def stop_training(game: Game) -> TrainingStateResponse:
    """Leave training mode."""
    game.stop_training()
    return _training_state_response(game)


@router.get("/state")
async def get_training_state(game: Game) -> TrainingStateResponse:
    """Get current trainer state."""
    return _training_state_response(game)


@router.post("/answer")
async def submit_answer(request: AnswerRequest, game: Game) -> AnswerResponse:
    """Grade an answer to the current scenario."""
    answer = game.submit_training_answer(PlayerAction(request.action))
    if answer is None:
        raise HTTPException(status_code=400, detail="No unanswered training scenario")

    return AnswerResponse(
        was_correct=answer.was_correct,
        player_action=answer.player_action.value,
        correct_action=answer.correct_action.value,
        explanation=answer.explanation,
    )


@router.post("/next")
async def next_scenario(game: Game) -> TrainingStateResponse:
    """Move on to a new scenario."""
    if not game.is_training_active:
        raise HTTPException(status_code=400, detail="Training is not active")

    if game.next_training_scenario() is None:
        raise HTTPException(status_code=400, detail="No scenario matches the current filter")

    return _training_state_response(game)


@router.put("/filter")
async def update_filter(request: TrainingFilterRequest, game: Game) -> TrainingStateResponse:
    """Enable or disable hand classifications."""
    game.update_training_filter(
        hard_hands=request.hard_hands,
        soft_hands=request.soft_hands,
        pairs=request.pairs,
    )
    return _training_state_response(game)


@router.post("/recommendation")
async def recommend(request: RecommendationRequest) -> RecommendationResponse:
    """Look up the basic strategy play for any hand."""
    try:
        player_cards = [Card.from_string(c) for c in request.player_cards]
        dealer_up_card = Card.from_string(request.dealer_up_card)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    strategy = get_strategy_service()
    await _ensure_strategy(strategy)

    analysis = analyze_hand(player_cards)
    action = strategy.get_recommended_action(
        analysis,
        dealer_up_card,
        can_double=request.can_double,
        can_split=request.can_split,
    )

    return RecommendationResponse(
        action=action.value if action else None,
        hand_type=analysis.type.value,
        hand_value=analysis.value,
        label=ACTION_LABELS[action] if action else None,
    )
