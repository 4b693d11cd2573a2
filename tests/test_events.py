from poise.coaching.events import (
    EventType, PracticeEventBus, SessionMetrics, SessionStartedEvent, ScoreUpdatedEvent
)


def test_bus_delivers_to_typed_and_global_handlers():
    bus = PracticeEventBus()
    typed, everything = [], []
    bus.subscribe(EventType.SESSION_STARTED, typed.append)
    bus.subscribe_all(everything.append)

    bus.emit(SessionStartedEvent("t1", 1, "coffee-shop", "u1"))
    bus.emit(ScoreUpdatedEvent("t1", 2, 0, 13))

    assert [e.data["scenario_id"] for e in typed] == ["coffee-shop"]
    assert [e.event_type for e in everything] == [EventType.SESSION_STARTED, EventType.SCORE_UPDATED]


def test_failing_handler_does_not_stop_others():
    bus = PracticeEventBus()
    seen = []

    def broken(event):
        raise ValueError("boom")

    bus.subscribe(EventType.SCORE_UPDATED, broken)
    bus.subscribe(EventType.SCORE_UPDATED, seen.append)
    bus.emit(ScoreUpdatedEvent("t1", 2, 0, 13))
    assert len(seen) == 1

    bus.unsubscribe(EventType.SCORE_UPDATED, seen.append)
    bus.emit(ScoreUpdatedEvent("t1", 3, 13, 20))
    assert len(seen) == 1


def test_metrics_count_events():
    metrics = SessionMetrics()
    metrics.handle_event(SessionStartedEvent("t1", 1, "coffee-shop", "u1"))
    metrics.handle_event(ScoreUpdatedEvent("t1", 2, 0, 13))
    assert metrics.get_metrics()["sessions_started"] == 1
    assert metrics.get_metrics()["score_updates"] == 1
    metrics.reset()
    assert metrics.get_metrics()["sessions_started"] == 0


def test_clear_handlers():
    bus = PracticeEventBus()
    seen = []
    bus.subscribe_all(seen.append)
    bus.clear_handlers()
    bus.emit(SessionStartedEvent("t1", 1, "coffee-shop", "u1"))
    assert seen == []
