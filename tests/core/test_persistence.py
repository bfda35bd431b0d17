"""Tests for training statistics persistence."""

import json
import logging
from unittest.mock import MagicMock

import pytest
import redis

from core.errors import StatsFormatError
from core.game.models import CategoryStats, TrainingStats
from core.game.persistence import (
    InMemoryStatsStore,
    JsonFileStatsStore,
    RedisStatsStore,
    create_stats_store,
)
from core.hand import HandType


@pytest.fixture
def sample_stats():
    return TrainingStats(
        total_attempts=10,
        correct_attempts=7,
        streak=3,
        best_streak=5,
        by_category={
            HandType.HARD: CategoryStats(5, 4),
            HandType.SOFT: CategoryStats(3, 2),
            HandType.PAIR: CategoryStats(2, 1),
        },
    )


class TestTrainingStats:
    """Tests for the stats record itself."""

    def test_success_rate_rounds(self):
        assert TrainingStats().success_rate == 0
        assert TrainingStats(total_attempts=3, correct_attempts=2).success_rate == 67

    def test_record_answer(self):
        stats = TrainingStats().record_answer(HandType.SOFT, True)
        stats = stats.record_answer(HandType.SOFT, False)

        assert stats.total_attempts == 2
        assert stats.correct_attempts == 1
        assert stats.streak == 0
        assert stats.best_streak == 1
        assert stats.by_category[HandType.SOFT] == CategoryStats(2, 1)
        assert stats.by_category[HandType.HARD] == CategoryStats()

    def test_dict_round_trip(self, sample_stats):
        data = json.loads(json.dumps(sample_stats.to_dict()))
        assert TrainingStats.from_dict(data) == sample_stats

    def test_categories_are_read_only(self, sample_stats):
        with pytest.raises(TypeError):
            sample_stats.by_category[HandType.HARD] = CategoryStats(9, 9)

        updated = sample_stats.record_answer(HandType.HARD, True)
        with pytest.raises(TypeError):
            updated.by_category[HandType.HARD] = CategoryStats(9, 9)

    def test_categories_are_copied(self):
        categories = {t: CategoryStats() for t in HandType}
        stats = TrainingStats(by_category=categories)

        categories[HandType.SOFT] = CategoryStats(4, 4)

        assert stats.by_category[HandType.SOFT] == CategoryStats()

    def test_missing_category_defaults_to_zero(self):
        stats = TrainingStats.from_dict(
            {"total_attempts": 1, "correct_attempts": 1, "streak": 1, "best_streak": 1}
        )
        assert stats.by_category[HandType.PAIR] == CategoryStats()

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"total_attempts": 1},
            {"total_attempts": "1", "correct_attempts": 0, "streak": 0, "best_streak": 0},
            {"total_attempts": -1, "correct_attempts": 0, "streak": 0, "best_streak": 0},
            {"total_attempts": True, "correct_attempts": 0, "streak": 0, "best_streak": 0},
            {
                "total_attempts": 0,
                "correct_attempts": 0,
                "streak": 0,
                "best_streak": 0,
                "by_category": {"pair": {"total": False, "correct": 0}},
            },
            {
                "total_attempts": 0,
                "correct_attempts": 0,
                "streak": 0,
                "best_streak": 0,
                "by_category": {"hard": {"total": 1, "bogus": 2}},
            },
        ],
    )
    def test_malformed_data_rejected(self, data):
        with pytest.raises(StatsFormatError):
            TrainingStats.from_dict(data)


class TestInMemoryStatsStore:
    """Tests for InMemoryStatsStore."""

    def test_empty_store(self):
        assert InMemoryStatsStore().load() is None

    def test_save_and_load(self, sample_stats):
        store = InMemoryStatsStore()
        store.save(sample_stats)
        assert store.load() == sample_stats


class TestJsonFileStatsStore:
    """Tests for JsonFileStatsStore."""

    def test_missing_file_loads_nothing(self, tmp_path):
        assert JsonFileStatsStore(tmp_path / "stats.json").load() is None

    def test_save_and_load(self, tmp_path, sample_stats):
        path = tmp_path / "nested" / "stats.json"
        store = JsonFileStatsStore(path)

        store.save(sample_stats)

        assert path.exists()
        assert JsonFileStatsStore(path).load() == sample_stats

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(StatsFormatError):
            JsonFileStatsStore(path).load()

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StatsFormatError):
            JsonFileStatsStore(path).load()

    def test_save_failure_is_logged(self, tmp_path, sample_stats, caplog):
        # A directory where the file should be
        path = tmp_path / "stats.json"
        path.mkdir()

        with caplog.at_level(logging.WARNING, logger="core.game.persistence"):
            JsonFileStatsStore(path).save(sample_stats)

        assert "Could not save training stats" in caplog.text

    def test_default_location(self):
        store = JsonFileStatsStore()
        assert store.stats_file.name == ".blackjack_trainer_training_stats.json"


class TestRedisStatsStore:
    """Tests for RedisStatsStore with a mocked client."""

    def test_key_uses_prefix(self, sample_stats):
        client = MagicMock(spec=redis.Redis)
        RedisStatsStore(client, "abc", prefix="test:").save(sample_stats)

        key, payload = client.set.call_args.args
        assert key == "test:abc"
        assert json.loads(payload) == sample_stats.to_dict()

    def test_load_missing_key(self):
        client = MagicMock(spec=redis.Redis)
        client.get.return_value = None
        assert RedisStatsStore(client, "abc").load() is None

    def test_load_saved_stats(self, sample_stats):
        client = MagicMock(spec=redis.Redis)
        client.get.return_value = json.dumps(sample_stats.to_dict()).encode()
        assert RedisStatsStore(client, "abc").load() == sample_stats

    def test_load_invalid_json(self):
        client = MagicMock(spec=redis.Redis)
        client.get.return_value = b"not-json"
        with pytest.raises(StatsFormatError):
            RedisStatsStore(client, "abc").load()

    def test_load_connection_error(self):
        client = MagicMock(spec=redis.Redis)
        client.get.side_effect = redis.ConnectionError("down")
        with pytest.raises(StatsFormatError, match="down"):
            RedisStatsStore(client, "abc").load()

    def test_save_failure_is_logged(self, sample_stats, caplog):
        client = MagicMock(spec=redis.Redis)
        client.set.side_effect = redis.ConnectionError("down")

        with caplog.at_level(logging.WARNING, logger="core.game.persistence"):
            RedisStatsStore(client, "abc").save(sample_stats)

        assert "Could not save training stats" in caplog.text


class TestCreateStatsStore:
    """Tests for the backend factory."""

    def test_memory_backend(self):
        assert isinstance(create_stats_store("memory"), InMemoryStatsStore)

    def test_file_backend(self, tmp_path):
        store = create_stats_store("file", stats_file=str(tmp_path / "s.json"))
        assert isinstance(store, JsonFileStatsStore)

    def test_redis_backend(self):
        store = create_stats_store("redis", key="abc", redis_url="redis://localhost:6379/0")
        assert isinstance(store, RedisStatsStore)

    def test_redis_backend_requires_url(self):
        with pytest.raises(ValueError):
            create_stats_store("redis")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_stats_store("sqlite")
