"""Session management: signed session IDs mapped to live game tables."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Annotated
from uuid import uuid4

import redis
from fastapi import Header, HTTPException
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import config
from core.game.engine import GameStateService
from core.game.persistence import StatsStore, create_stats_store
from core.strategy.loader import default_strategy_source
from core.strategy.service import StrategyService

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        max_age = max_age or config.session_ttl
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


# Global signer instance
_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


# Shared strategy service; the table is loaded once per process
_strategy_service: StrategyService | None = None


def get_strategy_service() -> StrategyService:
    """Get or create the strategy service configured from the environment."""
    global _strategy_service
    if _strategy_service is None:
        source = default_strategy_source(
            path=config.strategy.path,
            url=config.strategy.url,
            timeout=config.strategy.timeout,
        )
        _strategy_service = StrategyService(source)
    return _strategy_service


_redis_client: redis.Redis | None = None


def _get_redis_client() -> redis.Redis | None:
    """Connect to Redis once; None when it is unreachable."""
    global _redis_client
    if _redis_client is None:
        client = redis.Redis.from_url(config.redis.url)
        try:
            client.ping()
        except redis.RedisError as exc:
            logger.warning("Redis unavailable at %s, keeping stats in memory: %s", config.redis.url, exc)
            return None
        _redis_client = client
    return _redis_client


def build_stats_store(session_id: str) -> StatsStore:
    """Build the configured stats store for one session."""
    backend = config.stats.backend
    client = None
    if backend == "redis":
        client = _get_redis_client()
        if client is None:
            backend = "memory"

    return create_stats_store(
        backend,
        key=session_id,
        stats_file=config.stats.stats_file,
        prefix=config.stats.key_prefix,
        redis_client=client,
    )


@dataclass
class Session:
    """A live table and when it expires."""

    game: GameStateService
    expires_at: datetime


class SessionRegistry:
    """In-memory registry of game tables keyed by session ID."""

    def __init__(
        self,
        ttl: int | None = None,
        signer: SessionSigner | None = None,
    ) -> None:
        self._ttl = ttl or config.session_ttl
        self._signer = signer
        self._sessions: dict[str, Session] = {}

    @property
    def signer(self) -> SessionSigner:
        return self._signer or get_session_signer()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> tuple[str, GameStateService]:
        """
        Open a new table.

        Returns:
            The signed session token and the new table
        """
        self.cleanup_expired()

        session_id = str(uuid4())
        game = GameStateService(
            rules=config.game.table_rules(),
            strategy_service=get_strategy_service(),
            stats_store=build_stats_store(session_id),
        )
        self._sessions[session_id] = Session(game, self._expiry())
        logger.info("Session %s created", session_id)
        return self.signer.sign(session_id), game

    def get(self, token: str) -> GameStateService | None:
        """Look up a table by signed token, extending its lifetime."""
        session_id = self.signer.unsign(token, max_age=self._ttl)
        if session_id is None:
            return None

        session = self._sessions.get(session_id)
        if session is None:
            return None

        if session.expires_at < datetime.now():
            self.delete(session_id)
            return None

        session.expires_at = self._expiry()
        return session.game

    def delete(self, session_id: str) -> None:
        """Delete session."""
        self._sessions.pop(session_id, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions."""
        now = datetime.now()
        expired = [
            sid for sid, session in self._sessions.items() if session.expires_at < now
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Removed %d expired sessions", len(expired))
        return len(expired)

    def _expiry(self) -> datetime:
        return datetime.now() + timedelta(seconds=self._ttl)


# Global session registry
_registry: SessionRegistry | None = None


def get_registry() -> SessionRegistry:
    """Get or create the session registry."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


async def get_game(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateService:
    """FastAPI dependency resolving the X-Session-ID header to a table."""
    game = get_registry().get(session_id)
    if game is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return game
