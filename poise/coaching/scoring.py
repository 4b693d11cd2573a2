"""
Live conversation scoring and long-term medal progression.

The scoring functions are pure and never raise. MedalEngine is the only part
that touches persistence.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple, Iterable

from ..config import (
    POSITIVE_EMOTIONS, NEGATIVE_EMOTIONS,
    POSITIVE_EMOTION_WEIGHT, NEGATIVE_EMOTION_WEIGHT, ENGAGEMENT_BONUS_PER_MESSAGE,
    MIN_SCORE, MAX_SCORE,
    FRIENDLINESS_EMOTIONS, STRESS_EMOTIONS, CHARISMA_EMOTIONS,
    COMPOSURE_BASELINE, COMPOSURE_THRESHOLD, MEDAL_PROGRESS_SCALE,
    POINTS_PER_MEDAL_LEVEL, MEDAL_LEVELS_PER_USER_LEVEL,
)
from ..utils import round_half_up, clamp
from .errors import ConcurrentUpdateError, PersistenceError
from .models import EmotionSample, SessionRecord, UserProfile, AchievementEntry, now_ms
from .scenarios import ScenarioScript

logger = logging.getLogger("scoring")


def update_conversation_score(score: int, emotion: Optional[str], intensity: float,
                              user_message_count: int) -> int:
    """
    Fold the current emotion and engagement into the running score.

    Args:
        score: Score before this update
        emotion: Current emotion tag, or None when nothing was observed
        intensity: Intensity of the current emotion in [0, 1]
        user_message_count: Number of user messages so far

    Returns:
        New score clamped to [0, 100]
    """
    new_score = score
    if emotion in POSITIVE_EMOTIONS:
        new_score += round_half_up(intensity * POSITIVE_EMOTION_WEIGHT)
    elif emotion in NEGATIVE_EMOTIONS:
        new_score -= round_half_up(intensity * NEGATIVE_EMOTION_WEIGHT)

    new_score += ENGAGEMENT_BONUS_PER_MESSAGE * user_message_count
    return int(clamp(new_score, MIN_SCORE, MAX_SCORE))


def compute_emotion_totals(samples: Iterable[EmotionSample]) -> Dict[str, float]:
    """Sum intensity per emotion tag."""
    totals: Dict[str, float] = {}
    for sample in samples:
        totals[sample.emotion] = totals.get(sample.emotion, 0.0) + sample.intensity
    return totals


def _sum_of(totals: Dict[str, float], emotions: Iterable[str]) -> float:
    return sum(totals.get(emotion, 0.0) for emotion in emotions)


def compute_medal_progress(totals: Dict[str, float]) -> Dict[str, float]:
    """
    Progress earned toward each medal by one session.

    Only medals whose signal qualifies appear in the result: friendliness and
    charisma need any positive total, composure needs to stay above the
    stress threshold.
    """
    progress: Dict[str, float] = {}

    friendliness = _sum_of(totals, FRIENDLINESS_EMOTIONS)
    if friendliness > 0:
        progress["friendliness"] = friendliness * MEDAL_PROGRESS_SCALE

    composure = COMPOSURE_BASELINE - _sum_of(totals, STRESS_EMOTIONS)
    if composure > COMPOSURE_THRESHOLD:
        # Unscaled, so composure alone never reaches level 1 in one session
        progress["composure"] = composure

    charisma = _sum_of(totals, CHARISMA_EMOTIONS)
    if charisma > 0:
        progress["charisma"] = charisma * MEDAL_PROGRESS_SCALE

    return progress


def level_for_progress(progress: float) -> int:
    """Medal level reached with a given amount of progress."""
    return int(math.floor(progress / POINTS_PER_MEDAL_LEVEL))


def updated_average(average: float, count: int, score: float) -> float:
    """Running average after adding one more score, to 2 decimals."""
    return round_half_up((average * count + score) / (count + 1), 2)


def user_level(medals: Dict[str, int]) -> int:
    """Overall user level derived from medal levels; starts at 1."""
    return 1 + sum(medals.values()) // MEDAL_LEVELS_PER_USER_LEVEL


def evaluate_achievements(scenario: Optional[ScenarioScript], score: int,
                          emotions: Iterable[EmotionSample],
                          duration_ms: Optional[int]) -> Tuple[str, ...]:
    """
    Labels earned against a scenario's success conditions.

    Returns:
        Tuple of labels, in a stable order
    """
    if scenario is None:
        return ()

    conditions = scenario.success_conditions
    achievements: List[str] = []

    if score >= conditions.min_score:
        achievements.append("Reached target score")

    observed = {sample.emotion for sample in emotions}
    for emotion in sorted(conditions.required_emotions):
        if emotion in observed:
            achievements.append(f"Showed {emotion}")

    if conditions.max_duration is not None and duration_ms is not None:
        if duration_ms <= conditions.max_duration:
            achievements.append("Finished in time")

    return tuple(achievements)


@dataclass
class ProgressUpdate:
    """Profile changes produced by folding one session into a user profile."""
    user_id: str
    total_sessions: int
    average_score: float
    level: int
    # medal -> (old level, new level); only medals that went up
    medal_level_ups: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    # Achievement log writes that failed after the profile was saved
    errors: List[PersistenceError] = field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        return bool(self.medal_level_ups)


class MedalEngine:
    """Folds finished sessions into user profiles."""

    def __init__(self, store, max_attempts: int = 3, clock=now_ms):
        """
        Args:
            store: Profile store (get_user, create_user, update_user, log_achievement)
            max_attempts: Read-modify-write attempts before a concurrent update wins
            clock: Returns epoch milliseconds
        """
        self.store = store
        self.max_attempts = max_attempts
        self.clock = clock

    def update_medal_progress_from_session(self, record: SessionRecord) -> ProgressUpdate:
        """
        Apply a session's score and emotions to its user's profile.

        Medal levels only ever go up. Each level-up is written to the
        achievement log after the profile write succeeds; a failed log write
        is collected in ProgressUpdate.errors and the rest are still written.

        Raises:
            PersistenceError: if reading or writing the profile fails
            ConcurrentUpdateError: if the profile keeps changing underneath us
        """
        for attempt in range(1, self.max_attempts + 1):
            profile = self.store.get_user(record.user_id)
            if profile is None:
                logger.info(f"No profile for {record.user_id}, creating default")
                profile = self.store.create_user(UserProfile(id=record.user_id))

            update, medals = self._plan_update(profile, record)
            try:
                self.store.update_user(
                    record.user_id,
                    {
                        "total_sessions": update.total_sessions,
                        "average_score": update.average_score,
                        "medals": medals,
                        "level": update.level,
                    },
                    expected_revision=profile.revision,
                )
            except ConcurrentUpdateError:
                if attempt == self.max_attempts:
                    raise
                logger.warning(f"Profile {record.user_id} changed during update, retrying ({attempt})")
                continue

            timestamp = self.clock()
            for medal, (_, new_level) in update.medal_level_ups.items():
                try:
                    self.store.log_achievement(AchievementEntry(
                        user_id=record.user_id, medal_type=medal, level=new_level, timestamp=timestamp
                    ))
                except PersistenceError as e:
                    logger.error(f"Could not log {medal} level {new_level} for {record.user_id}: {e}")
                    update.errors.append(e)
                    continue
                logger.info(f"User {record.user_id} reached {medal} level {new_level}")
            return update

        # Unreachable with max_attempts >= 1
        raise ConcurrentUpdateError(f"Could not update profile {record.user_id}")

    def _plan_update(self, profile: UserProfile,
                     record: SessionRecord) -> Tuple[ProgressUpdate, Dict[str, int]]:
        """Compute the new aggregate and medal levels from the pre-update profile."""
        medals = dict(profile.medals)
        level_ups: Dict[str, Tuple[int, int]] = {}

        progress = compute_medal_progress(compute_emotion_totals(record.emotions))
        for medal, amount in progress.items():
            current = medals.get(medal, 0)
            new_level = level_for_progress(amount)
            if new_level > current:
                medals[medal] = new_level
                level_ups[medal] = (current, new_level)

        update = ProgressUpdate(
            user_id=record.user_id,
            total_sessions=profile.total_sessions + 1,
            average_score=updated_average(profile.average_score, profile.total_sessions, record.score),
            level=max(profile.level, user_level(medals)),
            medal_level_ups=level_ups,
        )
        logger.debug(f"Planned progress for {record.user_id}: {update}")
        return update, medals
