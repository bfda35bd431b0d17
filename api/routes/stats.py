"""Training statistics API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.schemas import TrainingStatsResponse
from api.session import get_game
from core.game.engine import GameStateService

router = APIRouter()

Game = Annotated[GameStateService, Depends(get_game)]


@router.get("")
async def get_stats(game: Game) -> TrainingStatsResponse:
    """Get the session's training stats."""
    return TrainingStatsResponse.from_stats(game.training_state.stats)


@router.delete("")
async def reset_stats(game: Game) -> TrainingStatsResponse:
    """Zero the session's training stats."""
    game.reset_training_stats()
    return TrainingStatsResponse.from_stats(game.training_state.stats)
