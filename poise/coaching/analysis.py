"""
Emotion and score analytics across a user's past sessions.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from .models import SessionRecord

logger = logging.getLogger("analysis")

# Points the recent average must move by before a trend counts
TREND_THRESHOLD = 5.0
TREND_RECENT_SESSIONS = 3


@dataclass
class EmotionAnalytics:
    """Aggregates over a window of sessions, newest session first."""
    emotion_trends: Dict[str, List[float]] = field(default_factory=dict)
    average_score: float = 0.0
    total_sessions: int = 0
    score_history: List[int] = field(default_factory=list)
    score_trend: str = "insufficient_data"

    def emotion_means(self) -> Dict[str, float]:
        """Mean intensity per emotion over the window."""
        return {
            emotion: float(np.mean(values))
            for emotion, values in self.emotion_trends.items()
            if values
        }


def score_trend(scores_oldest_first: Sequence[float]) -> str:
    """
    Compare the most recent sessions against the ones before them.

    Returns:
        "improving", "declining", "stable" or "insufficient_data"
    """
    scores = list(scores_oldest_first)
    if len(scores) < TREND_RECENT_SESSIONS:
        return "insufficient_data"

    recent = scores[-TREND_RECENT_SESSIONS:]
    earlier = scores[:-TREND_RECENT_SESSIONS] if len(scores) > TREND_RECENT_SESSIONS else scores[:-1]

    recent_avg = float(np.mean(recent))
    earlier_avg = float(np.mean(earlier))

    if recent_avg > earlier_avg + TREND_THRESHOLD:
        return "improving"
    if recent_avg < earlier_avg - TREND_THRESHOLD:
        return "declining"
    return "stable"


def summarize_sessions(records: Sequence[SessionRecord]) -> EmotionAnalytics:
    """
    Build analytics from sessions ordered newest first.

    Args:
        records: Sessions already filtered to the window of interest

    Returns:
        EmotionAnalytics
    """
    trends: Dict[str, List[float]] = {}
    scores: List[int] = []

    for record in records:
        scores.append(record.score)
        for sample in record.emotions:
            trends.setdefault(sample.emotion, []).append(sample.intensity)

    analytics = EmotionAnalytics(
        emotion_trends=trends,
        average_score=float(np.mean(scores)) if scores else 0.0,
        total_sessions=len(scores),
        score_history=scores,
        score_trend=score_trend(list(reversed(scores))),
    )
    logger.debug(
        f"Analytics over {analytics.total_sessions} sessions: "
        f"avg={analytics.average_score:.2f} trend={analytics.score_trend}"
    )
    return analytics
