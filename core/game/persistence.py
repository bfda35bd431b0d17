"""Training statistics persistence."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import redis

from core.errors import StatsFormatError
from core.game.models import TrainingStats

logger = logging.getLogger(__name__)


class StatsStore(ABC):
    """Durable key-value storage for one player's training stats."""

    @abstractmethod
    def load(self) -> TrainingStats | None:
        """
        Load saved stats.

        Returns:
            The stats, or None if nothing was saved

        Raises:
            StatsFormatError: If the saved data is malformed or unreadable
        """
        ...

    @abstractmethod
    def save(self, stats: TrainingStats) -> None:
        """Save stats, replacing anything saved before."""
        ...


class InMemoryStatsStore(StatsStore):
    """Keeps stats for the lifetime of the process."""

    def __init__(self, stats: TrainingStats | None = None) -> None:
        self._stats = stats

    def load(self) -> TrainingStats | None:
        return self._stats

    def save(self, stats: TrainingStats) -> None:
        self._stats = stats


class JsonFileStatsStore(StatsStore):
    """Stats saved as a JSON file.

    Defaults to ~/.blackjack_trainer_training_stats.json.
    """

    def __init__(self, stats_file: str | Path | None = None) -> None:
        if stats_file is None:
            stats_file = os.path.join(
                os.path.expanduser("~"),
                ".blackjack_trainer_training_stats.json",
            )
        self.stats_file = Path(stats_file)

    def load(self) -> TrainingStats | None:
        if not self.stats_file.exists():
            return None

        try:
            with open(self.stats_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StatsFormatError(f"Cannot read {self.stats_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise StatsFormatError(f"Unexpected stats data in {self.stats_file}")
        return TrainingStats.from_dict(data)

    def save(self, stats: TrainingStats) -> None:
        try:
            self.stats_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.stats_file, "w", encoding="utf-8") as f:
                json.dump(stats.to_dict(), f, indent=2)
        except OSError as exc:
            logger.warning("Could not save training stats to %s: %s", self.stats_file, exc)


class RedisStatsStore(StatsStore):
    """Redis-backed stats, one key per player."""

    def __init__(
        self,
        redis_client: redis.Redis,
        key: str,
        prefix: str = "blackjack:training-stats:",
    ) -> None:
        self._redis = redis_client
        self._key = f"{prefix}{key}"

    def load(self) -> TrainingStats | None:
        try:
            data = self._redis.get(self._key)
        except redis.RedisError as exc:
            raise StatsFormatError(f"Cannot read {self._key}: {exc}") from exc

        if data is None:
            return None

        try:
            decoded = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StatsFormatError(f"Invalid stats JSON under {self._key}") from exc

        if not isinstance(decoded, dict):
            raise StatsFormatError(f"Unexpected stats data under {self._key}")
        return TrainingStats.from_dict(decoded)

    def save(self, stats: TrainingStats) -> None:
        try:
            self._redis.set(self._key, json.dumps(stats.to_dict()))
        except redis.RedisError as exc:
            logger.warning("Could not save training stats under %s: %s", self._key, exc)


def create_stats_store(
    backend: str,
    key: str = "default",
    stats_file: str | None = None,
    redis_url: str | None = None,
    prefix: str = "blackjack:training-stats:",
    redis_client: redis.Redis | None = None,
) -> StatsStore:
    """
    Build a stats store for the configured backend.

    Args:
        backend: "memory", "file", or "redis"
        key: Player or session identifier (redis only)
        stats_file: JSON file path (file only)
        redis_url: Connection URL (redis only)
        prefix: Key prefix (redis only)
        redis_client: Existing connection, used instead of redis_url
    """
    if backend == "memory":
        return InMemoryStatsStore()
    if backend == "file":
        return JsonFileStatsStore(stats_file)
    if backend == "redis":
        if redis_client is None:
            if not redis_url:
                raise ValueError("redis_url is required for the redis stats backend")
            redis_client = redis.Redis.from_url(redis_url)
        return RedisStatsStore(redis_client, key, prefix=prefix)
    raise ValueError(f"Unknown stats backend: {backend}")
