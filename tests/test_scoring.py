import pytest

from poise.coaching.errors import ConcurrentUpdateError, PersistenceError
from poise.coaching.models import SessionRecord, UserProfile
from poise.coaching.scoring import (
    MedalEngine, compute_emotion_totals, compute_medal_progress, evaluate_achievements,
    level_for_progress, update_conversation_score, updated_average, user_level
)
from poise.infrastructure.data import ProfileStore

from conftest import sample


def _record(user_id="u1", score=50, emotions=(), start=0, end=60_000):
    return SessionRecord(
        id="", user_id=user_id, scenario_id="coffee-shop", start_time=start, end_time=end,
        messages=(), emotions=tuple(emotions), score=score, achievements=(), transcript="",
    )


def test_positive_emotion_adds_and_engagement_bonus():
    assert update_conversation_score(0, "joy", 0.8, 1) == 13


def test_negative_emotion_subtracts_half_weight():
    # round(0.5 * 5) rounds half up to 3
    assert update_conversation_score(20, "anxiety", 0.5, 0) == 17


def test_score_is_clamped():
    assert update_conversation_score(98, "confidence", 1.0, 4) == 100
    assert update_conversation_score(2, "sadness", 1.0, 0) == 0


def test_unknown_or_missing_emotion_only_counts_engagement():
    assert update_conversation_score(10, None, 0.0, 2) == 20
    assert update_conversation_score(10, "surprise", 0.9, 2) == 20


def test_medal_progress_formulas():
    totals = compute_emotion_totals([
        sample("joy", 0.5), sample("joy", 0.7), sample("confidence", 0.9), sample("anxiety", 2 / 5),
    ])
    progress = compute_medal_progress(totals)
    assert progress["friendliness"] == pytest.approx(12.0)
    assert progress["charisma"] == pytest.approx(9.0)
    assert progress["composure"] == pytest.approx(9.6)


def test_composure_needs_to_clear_threshold():
    totals = {"anxiety": 3.0, "stress": 2.5}
    assert "composure" not in compute_medal_progress(totals)


def test_levels():
    assert level_for_progress(19.9) == 0
    assert level_for_progress(40) == 2
    assert user_level({"friendliness": 3, "charisma": 2}) == 2
    assert user_level({}) == 1


def test_running_average_rounds_to_two_places():
    assert updated_average(0.0, 0, 73) == 73
    assert updated_average(50.0, 2, 61) == 53.67


def test_achievements(coffee_shop):
    labels = evaluate_achievements(
        coffee_shop, 55, [sample("friendliness", 0.4), sample("interest", 0.6)], 120_000
    )
    assert labels == ("Reached target score", "Showed friendliness", "Showed interest", "Finished in time")
    assert evaluate_achievements(coffee_shop, 10, [], 400_000) == ()
    assert evaluate_achievements(None, 100, [], 0) == ()


def test_medal_engine_creates_profile_and_levels_up(tmp_path, clock):
    store = ProfileStore(str(tmp_path), clock=clock)
    engine = MedalEngine(store, clock=clock)

    # friendliness progress 2.5 * 10 = 25 -> level 1
    record = _record(score=80, emotions=[sample("joy", 1.0), sample("happiness", 1.0), sample("joy", 0.5)])
    update = engine.update_medal_progress_from_session(record)

    assert update.total_sessions == 1
    assert update.average_score == 80
    assert update.medal_level_ups == {"friendliness": (0, 1)}
    profile = store.get_user("u1")
    assert profile.medal_level("friendliness") == 1
    assert profile.total_sessions == 1
    assert [(a.medal_type, a.level) for a in store.list_achievements("u1")] == [("friendliness", 1)]


def test_medal_levels_never_go_down(tmp_path):
    store = ProfileStore(str(tmp_path))
    store.create_user(UserProfile(id="u1", medals={"friendliness": 4}))
    engine = MedalEngine(store)

    update = engine.update_medal_progress_from_session(_record(score=40, emotions=[sample("joy", 0.2)]))
    assert update.medal_level_ups == {}
    assert store.get_user("u1").medal_level("friendliness") == 4


def test_medal_engine_retries_on_concurrent_update(tmp_path):
    store = ProfileStore(str(tmp_path))
    store.create_user(UserProfile(id="u1"))

    class RacingStore:
        """Bumps the profile once between the engine's read and write."""

        def __init__(self, inner):
            self.inner = inner
            self.raced = False

        def __getattr__(self, name):
            return getattr(self.inner, name)

        def get_user(self, user_id):
            profile = self.inner.get_user(user_id)
            if not self.raced:
                self.raced = True
                self.inner.update_user(user_id, {"total_sessions": 5, "average_score": 60.0})
            return profile

    engine = MedalEngine(RacingStore(store))
    update = engine.update_medal_progress_from_session(_record(score=90))

    assert update.total_sessions == 6
    assert store.get_user("u1").total_sessions == 6


def test_medal_engine_gives_up_after_max_attempts(tmp_path):
    store = ProfileStore(str(tmp_path))
    store.create_user(UserProfile(id="u1"))

    class AlwaysStale:
        def __init__(self, inner):
            self.inner = inner

        def __getattr__(self, name):
            return getattr(self.inner, name)

        def update_user(self, user_id, changes, expected_revision=None):
            raise ConcurrentUpdateError("stale")

    with pytest.raises(ConcurrentUpdateError):
        MedalEngine(AlwaysStale(store), max_attempts=2).update_medal_progress_from_session(_record())


def test_failed_achievement_log_does_not_stop_the_others(tmp_path):
    store = ProfileStore(str(tmp_path))

    class FlakyLog:
        """Refuses to log friendliness entries."""

        def __init__(self, inner):
            self.inner = inner

        def __getattr__(self, name):
            return getattr(self.inner, name)

        def log_achievement(self, entry):
            if entry.medal_type == "friendliness":
                raise PersistenceError("achievement log unavailable")
            self.inner.log_achievement(entry)

    record = _record(emotions=[sample("joy", 1.0), sample("joy", 1.0),
                               sample("confidence", 1.0), sample("confidence", 1.0)])
    update = MedalEngine(FlakyLog(store)).update_medal_progress_from_session(record)

    assert update.medal_level_ups == {"friendliness": (0, 1), "charisma": (0, 1)}
    assert [str(e) for e in update.errors] == ["achievement log unavailable"]
    assert store.get_user("u1").medal_level("friendliness") == 1
    assert [(a.medal_type, a.level) for a in store.list_achievements("u1")] == [("charisma", 1)]
