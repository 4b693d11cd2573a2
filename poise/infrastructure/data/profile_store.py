"""
Document store for users, sessions and achievements.
Each document is a JSON file under the data directory.
"""
import os
import json
import uuid
import logging
import tempfile
import threading
from dataclasses import fields, replace
from typing import Dict, List, Optional, Any, Tuple

from .conversations import (
    record_to_dict, record_from_dict,
    profile_to_dict, profile_from_dict,
    achievement_to_dict, achievement_from_dict,
)
from ...config import RECENT_SESSIONS_LIMIT, ANALYTICS_WINDOW_DAYS
from ...coaching.analysis import EmotionAnalytics, summarize_sessions
from ...coaching.errors import PersistenceError, ConcurrentUpdateError
from ...coaching.models import (
    SessionRecord, UserProfile, AchievementEntry, now_ms
)

logger = logging.getLogger("profile_store")

_PROFILE_FIELDS = {f.name for f in fields(UserProfile)} - {"id", "revision"}
_DAY_MS = 24 * 60 * 60 * 1000


class ProfileStore:
    """
    JSON-file persistence for practice data.

    Layout:
        <data_dir>/users/<user_id>.json
        <data_dir>/sessions/<session_id>.json
        <data_dir>/achievements/<user_id>.json

    Profile writes are serialized by an in-process lock and checked against
    the profile's revision, so a read-modify-write based on a stale read is
    rejected instead of silently overwriting a newer profile.
    """

    def __init__(self, data_dir: str, clock=now_ms):
        self.data_dir = data_dir
        self.clock = clock
        self._lock = threading.Lock()
        for sub in ("users", "sessions", "achievements"):
            os.makedirs(os.path.join(self.data_dir, sub), exist_ok=True)

    def _path(self, kind: str, doc_id: str) -> str:
        if not doc_id or os.sep in doc_id or doc_id.startswith("."):
            raise PersistenceError(f"Invalid document id: {doc_id!r}")
        return os.path.join(self.data_dir, kind, f"{doc_id}.json")

    def _read(self, path: str) -> Optional[Any]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

    def _write(self, path: str, data: Any) -> None:
        # Write to a temp file first so readers never see a half-written document
        directory = os.path.dirname(path)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, profile: UserProfile) -> UserProfile:
        """
        Store a new profile.

        Raises:
            PersistenceError: if a profile with this id already exists
        """
        path = self._path("users", profile.id)
        with self._lock:
            if os.path.exists(path):
                raise PersistenceError(f"User {profile.id} already exists")
            stored = replace(profile, revision=0)
            self._write(path, profile_to_dict(stored))
        logger.info(f"Created user {profile.id}")
        return stored

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        data = self._read(self._path("users", user_id))
        if data is None:
            return None
        return profile_from_dict(data)

    def update_user(self, user_id: str, changes: Dict[str, Any],
                    expected_revision: Optional[int] = None) -> UserProfile:
        """
        Apply a partial update to a profile.

        Args:
            user_id: Profile to update
            changes: Field name -> new value. "medals" is merged into the
                     existing medal map; "preferences" may be a dict.
            expected_revision: Revision the caller read; None skips the check

        Returns:
            The stored profile with its new revision

        Raises:
            PersistenceError: if the profile does not exist or a field is unknown
            ConcurrentUpdateError: if the stored revision differs from expected_revision
        """
        unknown = set(changes) - _PROFILE_FIELDS
        if unknown:
            raise PersistenceError(f"Unknown profile fields: {sorted(unknown)}")

        path = self._path("users", user_id)
        with self._lock:
            data = self._read(path)
            if data is None:
                raise PersistenceError(f"User {user_id} does not exist")
            current = profile_from_dict(data)

            if expected_revision is not None and current.revision != expected_revision:
                raise ConcurrentUpdateError(
                    f"User {user_id} is at revision {current.revision}, expected {expected_revision}"
                )

            updates = dict(changes)
            if "medals" in updates:
                medals = dict(current.medals)
                medals.update(updates["medals"])
                updates["medals"] = medals
            if isinstance(updates.get("preferences"), dict):
                prefs = updates["preferences"]
                updates["preferences"] = replace(current.preferences, **prefs)

            updated = replace(current, revision=current.revision + 1, **updates)
            self._write(path, profile_to_dict(updated))

        logger.debug(f"Updated user {user_id} to revision {updated.revision}: {sorted(changes)}")
        return updated

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def save_session(self, record: SessionRecord) -> str:
        """
        Persist a finished session.

        Returns:
            The id assigned to the session document
        """
        session_id = uuid.uuid4().hex
        data = record_to_dict(record)
        data['createdAt'] = self.clock()
        self._write(self._path("sessions", session_id), data)
        logger.info(f"Saved session {session_id} for user {record.user_id} (score {record.score})")
        return session_id

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        data = self._read(self._path("sessions", session_id))
        if data is None:
            return None
        return record_from_dict(session_id, data)

    def _load_user_sessions(self, user_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Raw session documents for a user, newest first."""
        sessions_dir = os.path.join(self.data_dir, "sessions")
        documents = []
        for filename in os.listdir(sessions_dir):
            if not filename.endswith('.json'):
                continue
            session_id = filename[:-5]
            data = self._read(os.path.join(sessions_dir, filename))
            if data is not None and data.get('userId') == user_id:
                documents.append((session_id, data))
        documents.sort(key=lambda item: item[1].get('createdAt', item[1].get('startTime', 0)), reverse=True)
        return documents

    def get_user_sessions(self, user_id: str, limit: int = RECENT_SESSIONS_LIMIT) -> List[SessionRecord]:
        """Most recent sessions for a user, newest first."""
        documents = self._load_user_sessions(user_id)[:limit]
        return [record_from_dict(session_id, data) for session_id, data in documents]

    def get_emotion_analytics(self, user_id: str, days: int = ANALYTICS_WINDOW_DAYS) -> EmotionAnalytics:
        """Emotion trends and score history over the last `days` days."""
        cutoff = self.clock() - days * _DAY_MS
        records = [
            record_from_dict(session_id, data)
            for session_id, data in self._load_user_sessions(user_id)
            if data.get('createdAt', data.get('startTime', 0)) >= cutoff
        ]
        return summarize_sessions(records)

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------

    def log_achievement(self, entry: AchievementEntry) -> None:
        path = self._path("achievements", entry.user_id)
        with self._lock:
            entries = self._read(path) or []
            entries.append(achievement_to_dict(entry))
            self._write(path, entries)
        logger.info(f"Logged achievement for {entry.user_id}: {entry.medal_type} level {entry.level}")

    def list_achievements(self, user_id: str) -> List[AchievementEntry]:
        """Achievement log for a user, oldest first."""
        entries = self._read(self._path("achievements", user_id)) or []
        return [achievement_from_dict(e) for e in entries]
