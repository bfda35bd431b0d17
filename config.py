"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field

from core.game.rules import TableRules


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection configuration."""

    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("REDIS_PORT", "6379")))
    db: int = field(default_factory=lambda: int(os.getenv("REDIS_DB", "0")))
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class GameConfig:
    """Table limits and shoe configuration."""

    num_decks: int = field(default_factory=lambda: int(os.getenv("NUM_DECKS", "6")))
    min_bet: int = field(default_factory=lambda: int(os.getenv("MIN_BET", "10")))
    max_bet: int = field(default_factory=lambda: int(os.getenv("MAX_BET", "500")))
    default_bankroll: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_BANKROLL", "1000"))
    )
    reshuffle_threshold: int = 52
    min_cards_to_deal: int = 20

    def table_rules(self) -> TableRules:
        """Build the engine's table rules."""
        return TableRules(
            num_decks=self.num_decks,
            reshuffle_threshold=self.reshuffle_threshold,
            min_cards_to_deal=self.min_cards_to_deal,
            min_bet=self.min_bet,
            max_bet=self.max_bet,
            default_bankroll=self.default_bankroll,
        )


@dataclass(frozen=True)
class StrategyConfig:
    """Where the basic strategy table is read from."""

    path: str | None = field(default_factory=lambda: os.getenv("STRATEGY_PATH"))
    url: str | None = field(default_factory=lambda: os.getenv("STRATEGY_URL"))
    timeout: float = field(
        default_factory=lambda: float(os.getenv("STRATEGY_TIMEOUT", "10"))
    )


@dataclass(frozen=True)
class StatsConfig:
    """Training stats persistence."""

    backend: str = field(
        default_factory=lambda: os.getenv("STATS_BACKEND", "memory").lower()
    )
    stats_file: str | None = field(default_factory=lambda: os.getenv("STATS_FILE"))
    key_prefix: str = field(
        default_factory=lambda: os.getenv("STATS_KEY_PREFIX", "blackjack:training-stats:")
    )

    def __post_init__(self) -> None:
        if self.backend not in ("memory", "file", "redis"):
            raise ValueError(f"STATS_BACKEND must be memory, file or redis, not {self.backend!r}")


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", "false"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    session_ttl: int = field(
        default_factory=lambda: int(os.getenv("SESSION_TTL", "3600"))
    )  # Session timeout in seconds

    redis: RedisConfig = field(default_factory=RedisConfig)
    game: GameConfig = field(default_factory=GameConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


# Global configuration instance
config = AppConfig()
