"""Game API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.schemas import (
    ActionRequest,
    BetRequest,
    GameStateResponse,
    ModeRequest,
    game_state_response,
)
from api.session import get_game, get_registry
from core.errors import StrategyLoadError
from core.game.engine import GameStateService
from core.game.state import GameMode

logger = logging.getLogger(__name__)

router = APIRouter()

Game = Annotated[GameStateService, Depends(get_game)]


def _game_state_response(game: GameStateService) -> GameStateResponse:
    """Convert game state to response."""
    return game_state_response(
        game.game_state,
        dealer_showing=game.dealer_up_card,
        can_hit=game.can_hit,
        can_stand=game.can_stand,
        can_double=game.can_double,
        can_split=game.can_split,
    )


@router.post("/new")
async def new_game() -> dict[str, str]:
    """Create a new game session."""
    session_id, _ = get_registry().create()
    return {"session_id": session_id}


@router.get("/state")
async def get_state(game: Game) -> GameStateResponse:
    """Get current game state."""
    return _game_state_response(game)


@router.post("/bet")
async def place_bet(request: BetRequest, game: Game) -> GameStateResponse:
    """Place a bet and deal cards."""
    if not game.place_bet(request.amount):
        raise HTTPException(status_code=400, detail="Invalid bet")
    return _game_state_response(game)


@router.post("/action")
async def player_action(request: ActionRequest, game: Game) -> GameStateResponse:
    """Execute a player action."""
    actions = {
        "hit": game.hit,
        "stand": game.stand,
        "double": game.double,
        "split": game.split,
    }

    if not actions[request.action]():
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    return _game_state_response(game)


@router.post("/new-round")
async def new_round(game: Game) -> GameStateResponse:
    """Clear the table for the next bet."""
    if not game.new_round():
        raise HTTPException(status_code=400, detail="Cannot start a new round now")
    return _game_state_response(game)


@router.post("/reset-bankroll")
async def reset_bankroll(game: Game) -> GameStateResponse:
    """Restore the starting bankroll."""
    game.reset_bankroll()
    return _game_state_response(game)


@router.post("/mode")
async def set_mode(request: ModeRequest, game: Game) -> GameStateResponse:
    """Switch between play and training."""
    mode = GameMode(request.mode)
    if mode == GameMode.TRAINING:
        if not game.can_start_training:
            raise HTTPException(status_code=400, detail="Finish the current round before training")
        try:
            await game.strategy.load_strategy()
        except StrategyLoadError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    game.set_mode(mode)
    return _game_state_response(game)
