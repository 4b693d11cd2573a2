import pytest

from poise.coaching.errors import SessionStateError
from poise.coaching.schemas import SessionPhase, can_transition
from poise.coaching.session import ConversationSession

from conftest import sample


def test_operations_while_idle_raise():
    session = ConversationSession()
    assert session.phase == SessionPhase.IDLE
    with pytest.raises(SessionStateError):
        session.record_user_turn("hello")
    with pytest.raises(SessionStateError):
        session.record_ai_turn("hello")
    with pytest.raises(SessionStateError):
        session.ingest_emotion(sample("joy", 0.5))
    with pytest.raises(SessionStateError):
        session.update_conversation_score()
    with pytest.raises(SessionStateError):
        session.begin_recording()


def test_end_session_while_idle_returns_none():
    assert ConversationSession().end_session() is None


def test_second_start_is_rejected(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    with pytest.raises(SessionStateError):
        session.start_session(coffee_shop, "u2")
    assert session.user_id == "u1"


def test_transcript_has_one_line_per_message(coffee_shop, clock):
    session = ConversationSession(clock=clock)
    session.start_session(coffee_shop, "u1")
    session.record_ai_turn("Hi there!")
    session.record_user_turn("Hello")
    session.record_ai_turn("Nice day")
    clock.advance(90_000)

    record = session.end_session()
    assert record.id == ""
    assert record.transcript.split("\n") == ["ai: Hi there!", "user: Hello", "ai: Nice day"]
    assert record.duration_ms == 90_000
    assert session.phase == SessionPhase.IDLE
    assert session.messages == ()


def test_emotion_history_keeps_latest_fifty(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    for i in range(60):
        session.ingest_emotion(sample("joy", 0.5, timestamp=i))

    history = session.emotion_history
    assert len(history) == 50
    assert history[0].timestamp == 10
    assert history[-1].timestamp == 59
    # The full list still goes into the record
    assert len(session.emotions) == 60


def test_user_turn_carries_last_three_emotions(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    for i, name in enumerate(["calm", "joy", "anxiety", "confidence"]):
        session.ingest_emotion(sample(name, 0.4, timestamp=i))

    message = session.record_user_turn("So, what are you reading?")
    assert [e.emotion for e in message.emotions] == ["joy", "anxiety", "confidence"]
    assert session.current_emotion == "confidence"


def test_user_turn_without_emotions_has_none(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    assert session.record_user_turn("Hi").emotions == ()


def test_phase_table():
    assert can_transition(SessionPhase.AWAITING_USER_TURN, SessionPhase.RECORDING)
    assert can_transition(SessionPhase.RECORDING, SessionPhase.TRANSCRIBING)
    assert can_transition(SessionPhase.TRANSCRIBING, SessionPhase.GENERATING_REPLY)
    assert can_transition(SessionPhase.GENERATING_REPLY, SessionPhase.SPEAKING)
    assert can_transition(SessionPhase.SPEAKING, SessionPhase.AWAITING_USER_TURN)
    assert not can_transition(SessionPhase.SPEAKING, SessionPhase.RECORDING)
    assert not can_transition(SessionPhase.IDLE, SessionPhase.RECORDING)


def test_illegal_transition_raises(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    session.begin_recording()
    with pytest.raises(SessionStateError):
        session.begin_speaking()


def test_late_emotion_for_ended_session_is_dropped(coffee_shop):
    session = ConversationSession()
    old_token = session.start_session(coffee_shop, "u1")
    session.end_session()
    session.start_session(coffee_shop, "u2")

    assert session.ingest_emotion(sample("joy", 0.9), token=old_token) is False
    assert session.emotions == ()
    assert session.ingest_emotion(sample("joy", 0.9), token=session.token) is True


def test_score_uses_current_emotion_and_engagement(coffee_shop):
    session = ConversationSession()
    session.start_session(coffee_shop, "u1")
    session.record_ai_turn("Hi there!")
    session.record_user_turn("Hello")
    session.ingest_emotion(sample("joy", 0.8))
    assert session.update_conversation_score() == 13


def test_overtime_is_only_a_signal(coffee_shop, clock):
    session = ConversationSession(clock=clock)
    session.start_session(coffee_shop, "u1")
    assert not session.is_overtime()
    clock.advance(coffee_shop.success_conditions.max_duration + 1)
    assert session.is_overtime()
    session.record_user_turn("Still here")
    assert session.is_active
