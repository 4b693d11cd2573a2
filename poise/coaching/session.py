"""
Session state machine for one practice conversation.

A session is Idle until start_session, then moves through the phases in
PHASE_TRANSITIONS until end_session snapshots it into a SessionRecord and
returns it to Idle.
"""
import logging
import threading
import uuid
from collections import deque
from contextlib import contextmanager
from typing import Optional, List, Tuple, Iterable, Iterator

from ..config import EMOTION_HISTORY_LIMIT, EMOTIONS_PER_USER_MESSAGE
from .errors import SessionStateError
from .models import (
    EmotionSample, ConversationMessage, SessionRecord, Speaker, now_ms, new_message_id
)
from .scenarios import ScenarioScript
from .schemas import SessionPhase, can_transition
from . import scoring

logger = logging.getLogger("session")


class ConversationSession:
    """
    Live state of a practice session.

    Emotion samples may be pushed from a background feed thread, so every
    mutation holds the session lock. Callers that start slow work (STT, LLM)
    keep the token returned by start_session and check is_current() before
    applying the result.
    """

    def __init__(self, history_limit: int = EMOTION_HISTORY_LIMIT, clock=now_ms):
        self.history_limit = history_limit
        self.clock = clock
        self._lock = threading.RLock()
        self._reset()

    def _reset(self):
        self._phase = SessionPhase.IDLE
        self._token: Optional[str] = None
        self._scenario: Optional[ScenarioScript] = None
        self._user_id: Optional[str] = None
        self._start_time: Optional[int] = None
        self._messages: List[ConversationMessage] = []
        self._emotions: List[EmotionSample] = []
        self._emotion_history = deque(maxlen=self.history_limit)
        self._current_emotion: Optional[str] = None
        self._current_intensity = 0.0
        self._score = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase.is_active

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def scenario(self) -> Optional[ScenarioScript]:
        return self._scenario

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def start_time(self) -> Optional[int]:
        return self._start_time

    @property
    def score(self) -> int:
        return self._score

    @property
    def current_emotion(self) -> Optional[str]:
        return self._current_emotion

    @property
    def current_intensity(self) -> float:
        return self._current_intensity

    @property
    def messages(self) -> Tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    @property
    def emotions(self) -> Tuple[EmotionSample, ...]:
        return tuple(self._emotions)

    @property
    def emotion_history(self) -> Tuple[EmotionSample, ...]:
        """Most recent samples, oldest first."""
        return tuple(self._emotion_history)

    @property
    def user_message_count(self) -> int:
        return sum(1 for message in self._messages if message.is_user)

    def is_current(self, token: Optional[str]) -> bool:
        """True if token belongs to the session that is active right now."""
        return token is not None and self.is_active and token == self._token

    @contextmanager
    def holding(self, token: Optional[str]) -> Iterator[bool]:
        """
        Hold the session lock and report whether token is still current.

        Lets a caller check the token and apply a late result atomically.
        """
        with self._lock:
            yield self.is_current(token)

    def elapsed_ms(self) -> int:
        if self._start_time is None:
            return 0
        return self.clock() - self._start_time

    def is_overtime(self) -> bool:
        """
        True once the scenario's max_duration has passed.

        Only a signal for the UI; the session keeps running.
        """
        if not self.is_active or self._scenario is None:
            return False
        max_duration = self._scenario.success_conditions.max_duration
        return max_duration is not None and self.elapsed_ms() > max_duration

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _require_active(self, operation: str):
        if not self.is_active:
            raise SessionStateError(f"{operation} requires an active session")

    def start_session(self, scenario: ScenarioScript, user_id: str) -> str:
        """
        Begin a new session.

        Args:
            scenario: Scenario being practiced
            user_id: Who is practicing

        Returns:
            Token identifying this session

        Raises:
            SessionStateError: if a session is already active
        """
        with self._lock:
            if self.is_active:
                raise SessionStateError(
                    f"Session for scenario '{self._scenario.id}' is still active"
                )
            self._reset()
            self._scenario = scenario
            self._user_id = user_id
            self._start_time = self.clock()
            self._token = uuid.uuid4().hex
            self._phase = SessionPhase.AWAITING_USER_TURN
            logger.info(f"Session {self._token} started: scenario={scenario.id} user={user_id}")
            return self._token

    def end_session(self) -> Optional[SessionRecord]:
        """
        Snapshot the session and return to Idle.

        Returns:
            The finished SessionRecord (id empty until saved), or None if no
            session was active
        """
        with self._lock:
            if not self.is_active:
                logger.debug("end_session called while idle")
                return None

            end_time = self.clock()
            emotions = tuple(self._emotions)
            achievements = scoring.evaluate_achievements(
                self._scenario, self._score, emotions, end_time - self._start_time
            )
            record = SessionRecord(
                id="",
                user_id=self._user_id,
                scenario_id=self._scenario.id,
                start_time=self._start_time,
                end_time=end_time,
                messages=tuple(self._messages),
                emotions=emotions,
                score=self._score,
                achievements=achievements,
                transcript="\n".join(m.transcript_line() for m in self._messages),
            )
            logger.info(
                f"Session {self._token} ended: {len(record.messages)} messages, "
                f"{len(emotions)} emotion samples, score {record.score}"
            )
            self._reset()
            return record

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def transition(self, target: SessionPhase) -> None:
        """
        Move to another active phase.

        Raises:
            SessionStateError: if idle or the move is not in the transition table
        """
        with self._lock:
            self._require_active("transition")
            if not can_transition(self._phase, target):
                raise SessionStateError(f"Illegal phase change {self._phase.value} -> {target.value}")
            logger.debug(f"Phase {self._phase.value} -> {target.value}")
            self._phase = target

    def begin_recording(self):
        self.transition(SessionPhase.RECORDING)

    def begin_transcribing(self):
        self.transition(SessionPhase.TRANSCRIBING)

    def begin_generating(self):
        self.transition(SessionPhase.GENERATING_REPLY)

    def begin_speaking(self):
        self.transition(SessionPhase.SPEAKING)

    def await_user(self):
        """Return to waiting for the user; a no-op if already there."""
        with self._lock:
            if self._phase == SessionPhase.AWAITING_USER_TURN:
                return
            self.transition(SessionPhase.AWAITING_USER_TURN)

    # ------------------------------------------------------------------
    # Turns and emotions
    # ------------------------------------------------------------------

    def record_user_turn(self, text: str,
                         recent_emotions: Optional[Iterable[EmotionSample]] = None) -> ConversationMessage:
        """
        Append a user message.

        Args:
            text: What the user said
            recent_emotions: Samples to attach; defaults to the live emotion list.
                             Only the last few are kept on the message.
        """
        with self._lock:
            self._require_active("record_user_turn")
            source = list(recent_emotions) if recent_emotions is not None else self._emotions
            attached = tuple(source[-EMOTIONS_PER_USER_MESSAGE:]) if source else ()
            message = ConversationMessage(
                id=new_message_id(),
                speaker=Speaker.USER,
                content=text,
                timestamp=self.clock(),
                emotions=attached,
            )
            self._messages.append(message)
            logger.debug(f"User turn {len(self._messages)}: {text!r}")
            return message

    def record_ai_turn(self, text: str, audio_ref: Optional[str] = None) -> ConversationMessage:
        """Append an AI message."""
        with self._lock:
            self._require_active("record_ai_turn")
            message = ConversationMessage(
                id=new_message_id(),
                speaker=Speaker.AI,
                content=text,
                timestamp=self.clock(),
                audio_ref=audio_ref,
            )
            self._messages.append(message)
            logger.debug(f"AI turn {len(self._messages)}: {text!r}")
            return message

    def ingest_emotion(self, sample: EmotionSample, token: Optional[str] = None) -> bool:
        """
        Record an emotion sample and make it the current emotion.

        Args:
            sample: Sample from the recognizer
            token: Session the sample was captured for; when given, samples
                   for a session that has since ended are dropped

        Returns:
            True if the sample was recorded, False if it was dropped

        Raises:
            SessionStateError: if idle and no token was given
        """
        with self._lock:
            if token is not None and not self.is_current(token):
                logger.debug(f"Dropping late emotion sample {sample.emotion} for session {token}")
                return False
            self._require_active("ingest_emotion")
            self._emotions.append(sample)
            self._emotion_history.append(sample)
            self._current_emotion = sample.emotion
            self._current_intensity = sample.intensity
            return True

    def update_conversation_score(self) -> int:
        """Re-score from the current emotion and the user message count."""
        with self._lock:
            self._require_active("update_conversation_score")
            previous = self._score
            self._score = scoring.update_conversation_score(
                self._score, self._current_emotion, self._current_intensity, self.user_message_count
            )
            logger.debug(f"Score {previous} -> {self._score} (emotion={self._current_emotion})")
            return self._score
