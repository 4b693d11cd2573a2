from poise.coaching.models import ConversationMessage, SessionRecord, Speaker
from poise.coaching.report import (
    ENGAGE_MORE, PRACTICE_MORE, RELAXATION, build_report, format_report,
    improvement_suggestions, score_color, score_grade, summarize_emotions
)

from conftest import sample


def _message(speaker, text, ts=0):
    return ConversationMessage(id=f"m{ts}", speaker=speaker, content=text, timestamp=ts)


def _record(score, emotions=(), user_turns=2, start=0, end=90_000):
    messages = []
    for i in range(user_turns):
        messages.append(_message(Speaker.AI, "question", 2 * i))
        messages.append(_message(Speaker.USER, "answer", 2 * i + 1))
    return SessionRecord(
        id="s1", user_id="u1", scenario_id="coffee-shop", start_time=start, end_time=end,
        messages=tuple(messages), emotions=tuple(emotions), score=score, achievements=(),
        transcript="",
    )


def test_anxious_short_low_score_session_gets_every_suggestion():
    record = _record(45, emotions=[sample("anxiety", 0.8), sample("anxiety", 0.6), sample("joy", 0.3)])
    report = build_report(record)

    assert report.suggestions == (PRACTICE_MORE, RELAXATION, ENGAGE_MORE)
    assert report.grade == "F"
    assert report.color == "poor"
    assert report.user_message_count == 2
    assert report.message_count == 4
    assert report.emotion_count == 3


def test_strong_session_gets_no_suggestions():
    record = _record(85, emotions=[sample("confidence", 0.9)], user_turns=4)
    assert build_report(record).suggestions == ()


def test_anxiety_rule_uses_first_anxious_summary_entry():
    summary = summarize_emotions((
        sample("nervousness", 0.5), sample("anxiety", 0.9), sample("anxiety", 0.9),
    ))
    # anxiety (0.9) ranks above nervousness (0.5)
    assert summary[0].emotion == "anxiety"
    assert RELAXATION in improvement_suggestions(70, summary, 5)

    calm = summarize_emotions((sample("nervousness", 0.6),))
    # exactly at the threshold does not trigger
    assert RELAXATION not in improvement_suggestions(70, calm, 5)


def test_summary_is_limited_and_sorted():
    samples = tuple(sample(name, value) for name, value in [
        ("a", 0.1), ("b", 0.2), ("c", 0.3), ("d", 0.4), ("e", 0.5), ("f", 0.6), ("a", 0.3),
    ])
    summary = summarize_emotions(samples)
    assert [s.emotion for s in summary] == ["f", "e", "d", "c", "a"]
    assert summary[-1].count == 2


def test_grades_and_colors():
    assert [score_grade(s) for s in (95, 90, 85, 72, 60, 55, 10)] == ["A+", "A+", "A", "B", "C", "D", "F"]
    assert [score_color(s) for s in (80, 65, 40, 39)] == ["good", "fair", "poor", "neutral"]


def test_duration_rounds_to_minutes():
    assert build_report(_record(50, end=90_000)).duration_minutes == 2
    assert build_report(_record(50, end=29_000)).duration_minutes == 0


def test_format_report_mentions_score_and_suggestions():
    text = format_report(build_report(_record(45, emotions=[sample("anxiety", 0.9)])))
    assert "Score: 45 (F)" in text
    assert "Relaxation Techniques" in text
