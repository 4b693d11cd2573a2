"""
Data models for the practice engine.
"""
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Dict, Tuple

from ..config import MEDAL_NAMES


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_message_id() -> str:
    """Unique id for a conversation message."""
    return uuid.uuid4().hex


class Speaker(str, Enum):
    """Who produced a conversation message."""
    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class EmotionSample:
    """One timestamped observation from the emotion recognizer."""
    emotion: str
    intensity: float
    confidence: float
    timestamp: int

    def __post_init__(self):
        if not 0.0 <= self.intensity <= 1.0:
            raise ValueError(f"intensity must be within [0, 1], got {self.intensity}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class ConversationMessage:
    """A single line of the conversation, immutable once created."""
    id: str
    speaker: Speaker
    content: str
    timestamp: int
    audio_ref: Optional[str] = None
    emotions: Tuple[EmotionSample, ...] = ()

    @property
    def is_user(self) -> bool:
        return self.speaker == Speaker.USER

    def transcript_line(self) -> str:
        """Render as "speaker: content"."""
        return f"{self.speaker.value}: {self.content}"


@dataclass(frozen=True)
class SessionRecord:
    """Immutable snapshot of one completed practice session."""
    id: str
    user_id: str
    scenario_id: str
    start_time: int
    end_time: Optional[int]
    messages: Tuple[ConversationMessage, ...]
    emotions: Tuple[EmotionSample, ...]
    score: int
    achievements: Tuple[str, ...]
    transcript: str

    @property
    def user_messages(self) -> Tuple[ConversationMessage, ...]:
        return tuple(m for m in self.messages if m.is_user)

    @property
    def duration_ms(self) -> Optional[int]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def with_id(self, record_id: str) -> 'SessionRecord':
        """Copy of this record carrying the id assigned by persistence."""
        return replace(self, id=record_id)


@dataclass
class UserPreferences:
    """Per-user practice preferences."""
    voice_enabled: bool = True
    emotion_analysis: bool = True
    difficulty: str = "beginner"


def default_medals() -> Dict[str, int]:
    """Every medal locked at level 0."""
    return {name: 0 for name in MEDAL_NAMES}


@dataclass
class UserProfile:
    """Long-lived user progression, updated after each session."""
    id: str
    email: str = ""
    name: str = ""
    level: int = 1
    total_sessions: int = 0
    average_score: float = 0.0
    medals: Dict[str, int] = field(default_factory=default_medals)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    # Bumped on every write; used for optimistic concurrency checks
    revision: int = 0

    def medal_level(self, medal: str) -> int:
        return self.medals.get(medal, 0)

    @property
    def unlocked_medals(self) -> Dict[str, int]:
        return {name: level for name, level in self.medals.items() if level > 0}


@dataclass(frozen=True)
class AchievementEntry:
    """Log entry written when a medal reaches a new level."""
    user_id: str
    medal_type: str
    level: int
    timestamp: int
