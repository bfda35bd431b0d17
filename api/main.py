"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from api.logger import setup_logging
from api.routes import game, stats, training
from api.session import get_strategy_service
from config import config
from core.errors import StrategyLoadError

setup_logging()
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Warm the strategy table; training endpoints retry if this fails."""
    try:
        await get_strategy_service().load_strategy()
    except StrategyLoadError as exc:
        logger.error("Strategy table unavailable at startup: %s", exc)
    yield


app = FastAPI(
    title="Blackjack Strategy Trainer",
    description="Blackjack table and basic strategy trainer API",
    version="0.1.0",
    debug=config.debug,
    lifespan=lifespan,
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str | bool]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "strategy_loaded": get_strategy_service().is_loaded,
    }


# Include routers
app.include_router(game.router, prefix="/api/game", tags=["game"])
app.include_router(training.router, prefix="/api/training", tags=["training"])
app.include_router(stats.router, prefix="/api/stats", tags=["stats"])
