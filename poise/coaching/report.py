"""
Post-session report: emotion summary, grade and improvement suggestions.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..config import (
    REPORT_TOP_EMOTIONS, SUGGESTION_SCORE_THRESHOLD, SUGGESTION_ANXIETY_THRESHOLD,
    SUGGESTION_MIN_USER_MESSAGES, ANXIOUS_EMOTIONS,
)
from ..utils import round_half_up
from .models import EmotionSample, SessionRecord


@dataclass(frozen=True)
class EmotionSummary:
    emotion: str
    average_intensity: float
    count: int


@dataclass(frozen=True)
class Suggestion:
    title: str
    description: str


PRACTICE_MORE = Suggestion("Practice More Scenarios", "Try different conversation types to build confidence")
RELAXATION = Suggestion("Relaxation Techniques", "Practice breathing exercises before conversations")
ENGAGE_MORE = Suggestion("Engage More", "Try to contribute more to the conversation")


@dataclass(frozen=True)
class SessionReport:
    """Everything the results screen shows for one session."""
    session_id: str
    scenario_id: str
    score: int
    grade: str
    color: str
    duration_minutes: int
    message_count: int
    user_message_count: int
    emotion_count: int
    emotion_summary: Tuple[EmotionSummary, ...]
    suggestions: Tuple[Suggestion, ...]
    achievements: Tuple[str, ...]


def score_grade(score: float) -> str:
    """Letter grade for a 0-100 score."""
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    if score >= 50:
        return "D"
    return "F"


def score_color(score: float) -> str:
    """Colour bucket for a 0-100 score."""
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    if score >= 40:
        return "poor"
    return "neutral"


def summarize_emotions(samples: Tuple[EmotionSample, ...],
                       limit: int = REPORT_TOP_EMOTIONS) -> Tuple[EmotionSummary, ...]:
    """Mean intensity and count per emotion, strongest first."""
    totals: Dict[str, list] = {}
    for sample in samples:
        entry = totals.setdefault(sample.emotion, [0.0, 0])
        entry[0] += sample.intensity
        entry[1] += 1

    summaries = [
        EmotionSummary(emotion=emotion, average_intensity=total / count, count=int(count))
        for emotion, (total, count) in totals.items()
    ]
    # sorted() is stable, so ties keep first-seen order
    summaries = sorted(summaries, key=lambda s: s.average_intensity, reverse=True)
    return tuple(summaries[:limit])


def improvement_suggestions(score: int, summary: Tuple[EmotionSummary, ...],
                            user_message_count: int) -> Tuple[Suggestion, ...]:
    """Each rule is checked on its own; any number may apply."""
    suggestions: List[Suggestion] = []

    if score < SUGGESTION_SCORE_THRESHOLD:
        suggestions.append(PRACTICE_MORE)

    # The strongest of the anxious emotions that made the summary
    anxious = next((s for s in summary if s.emotion in ANXIOUS_EMOTIONS), None)
    if anxious is not None and anxious.average_intensity > SUGGESTION_ANXIETY_THRESHOLD:
        suggestions.append(RELAXATION)

    if user_message_count < SUGGESTION_MIN_USER_MESSAGES:
        suggestions.append(ENGAGE_MORE)

    return tuple(suggestions)


def duration_minutes(record: SessionRecord) -> int:
    if record.end_time is None:
        return 0
    return round_half_up((record.end_time - record.start_time) / 60000)


def build_report(record: SessionRecord) -> SessionReport:
    """
    Derive the results screen for a finished session.

    Args:
        record: Finished session

    Returns:
        SessionReport
    """
    summary = summarize_emotions(record.emotions)
    user_messages = len(record.user_messages)
    return SessionReport(
        session_id=record.id,
        scenario_id=record.scenario_id,
        score=record.score,
        grade=score_grade(record.score),
        color=score_color(record.score),
        duration_minutes=duration_minutes(record),
        message_count=len(record.messages),
        user_message_count=user_messages,
        emotion_count=len(record.emotions),
        emotion_summary=summary,
        suggestions=improvement_suggestions(record.score, summary, user_messages),
        achievements=record.achievements,
    )


def format_report(report: SessionReport) -> str:
    """Plain-text rendering for the terminal."""
    lines = [
        f"Score: {report.score} ({report.grade})",
        f"Duration: {report.duration_minutes} min | Messages: {report.message_count} | "
        f"Emotions captured: {report.emotion_count}",
    ]

    if report.emotion_summary:
        lines.append("Emotions:")
        for entry in report.emotion_summary:
            lines.append(f"  {entry.emotion:<14} {entry.average_intensity * 100:5.1f}%  ({entry.count}x)")

    if report.achievements:
        lines.append("Achievements:")
        lines.extend(f"  - {label}" for label in report.achievements)

    if report.suggestions:
        lines.append("Suggestions:")
        lines.extend(f"  - {s.title}: {s.description}" for s in report.suggestions)

    return "\n".join(lines)
