"""Tests for the game event emitter."""

from core.game.events import EventEmitter, EventType, GameEvent


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_typed_handlers_run_before_catch_all(self):
        emitter = EventEmitter()
        calls = []
        emitter.subscribe(lambda e: calls.append("all"))
        emitter.subscribe(lambda e: calls.append("bet"), EventType.BET_PLACED)

        emitter.emit_new(EventType.BET_PLACED, amount=10)
        emitter.emit_new(EventType.ROUND_ENDED)

        assert calls == ["bet", "all", "all"]

    def test_emit_new_returns_event(self):
        event = EventEmitter().emit_new(EventType.CARD_DEALT, recipient="player")
        assert event.event_type == EventType.CARD_DEALT
        assert event.data == {"recipient": "player"}
        assert str(event) == "CARD_DEALT: {'recipient': 'player'}"

    def test_unsubscribe(self):
        emitter = EventEmitter()
        events = []
        emitter.subscribe(events.append, EventType.PLAYER_HIT)
        emitter.unsubscribe(events.append, EventType.PLAYER_HIT)
        # Unknown handlers are ignored
        emitter.unsubscribe(events.append)

        emitter.emit_new(EventType.PLAYER_HIT)

        assert events == []

    def test_history_is_bounded(self):
        emitter = EventEmitter(history_limit=3)
        for i in range(5):
            emitter.emit(GameEvent(EventType.HAND_SETTLED, {"hand_index": i}))

        assert [e.data["hand_index"] for e in emitter.history] == [2, 3, 4]

    def test_clear_history(self):
        emitter = EventEmitter()
        emitter.emit_new(EventType.STATS_RESET)

        history = emitter.history
        emitter.clear_history()

        assert emitter.history == []
        assert len(history) == 1
