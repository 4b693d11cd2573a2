"""
Practice orchestrator: drives one session at a time through its collaborators.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Tuple, Dict

from .errors import CollaboratorError, EmotionDetectionError, TranscriptionError, SessionStateError
from .events import (
    PracticeEventBus, EventLogger, SessionMetrics,
    SessionStartedEvent, TurnRecordedEvent, EmotionIngestedEvent, ScoreUpdatedEvent,
    SessionEndedEvent, MedalLevelUpEvent, ErrorOccurredEvent,
)
from .models import ConversationMessage, EmotionSample, SessionRecord, now_ms
from .report import SessionReport, build_report
from .responder import ReplyEngine
from .scenarios import ScenarioCatalog, opening_line
from .schemas import TurnOutcome
from .scoring import MedalEngine, ProgressUpdate
from .services import TranscriptionService, SpeechService, EmotionFeed
from .session import ConversationSession

logger = logging.getLogger("orchestrator")


@dataclass
class SessionSummary:
    """Everything produced when a session is finished."""
    record: SessionRecord
    report: SessionReport
    feedback: str
    progress: Optional[ProgressUpdate] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)


class PracticeOrchestrator:
    """
    Wires the session state machine to speech, emotion, LLM and storage.

    Collaborator failures are caught here: they are logged, emitted as
    ErrorOccurredEvent and reported back as a short user-facing message,
    and the session goes back to waiting for the user.
    """

    def __init__(self,
                 catalog: ScenarioCatalog,
                 store,
                 reply_engine: ReplyEngine,
                 transcription: Optional[TranscriptionService] = None,
                 speech: Optional[SpeechService] = None,
                 emotion_feed: Optional[EmotionFeed] = None,
                 session: Optional[ConversationSession] = None,
                 event_bus: Optional[PracticeEventBus] = None,
                 clock=now_ms):
        self.catalog = catalog
        self.store = store
        self.reply_engine = reply_engine
        self.transcription = transcription
        self.speech = speech
        self.emotion_feed = emotion_feed
        self.clock = clock
        self.session = session or ConversationSession(clock=clock)
        self.medal_engine = MedalEngine(store, clock=clock)

        # Initialize event system
        self.event_bus = event_bus or PracticeEventBus()
        self.event_logger = EventLogger()
        self.metrics = SessionMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _report_error(self, token: Optional[str], error: Exception, component: str) -> None:
        logger.error(f"{component} failed: {error}")
        self.event_bus.emit(ErrorOccurredEvent(
            token or "none", self.clock(), type(error).__name__, str(error), component
        ))

    def _emit_turn(self, token: str, message: ConversationMessage) -> None:
        self.event_bus.emit(TurnRecordedEvent(
            token, self.clock(), message.speaker.value, message.content, len(self.session.messages)
        ))

    def _speak(self, token: str, text: str) -> Tuple[str, ...]:
        """Speak a reply; a failure is a warning since the text is already recorded."""
        if self.speech is None:
            return ()
        try:
            self.speech.speak(text, self.session.current_emotion)
        except CollaboratorError as e:
            self._report_error(token, e, "speech")
            return (e.user_message,)
        return ()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self, scenario_id: str, user_id: str) -> TurnOutcome:
        """
        Start practicing a scenario and deliver its opening line.

        Args:
            scenario_id: Catalog id of the scenario
            user_id: Who is practicing

        Returns:
            TurnOutcome whose ai_message is the opening line; a failure to
            speak it shows up in warnings

        Raises:
            KeyError: if the scenario is not in the catalog
            SessionStateError: if a session is already running
        """
        scenario = self.catalog.get_scenario(scenario_id)
        if scenario is None:
            raise KeyError(f"Unknown scenario: {scenario_id}")

        token = self.session.start_session(scenario, user_id)
        self.event_bus.emit(SessionStartedEvent(token, self.clock(), scenario.id, user_id))

        if self.emotion_feed is not None and self.emotion_feed.available:
            self.emotion_feed.start(
                lambda samples: self.ingest_emotions(samples, token),
                on_error=lambda e: self._report_error(token, e, "emotion_feed"),
            )

        self.session.begin_speaking()
        opening = self.session.record_ai_turn(opening_line(scenario))
        self._emit_turn(token, opening)
        warnings = self._speak(token, opening.content)
        self.session.await_user()

        logger.info(f"Started {scenario.id} for {user_id}")
        return TurnOutcome(ok=True, ai_message=opening, score=self.session.score, warnings=warnings)

    def ingest_emotions(self, samples: List[EmotionSample], token: Optional[str] = None) -> int:
        """
        Record emotion samples for the running session.

        Returns:
            Number of samples recorded; samples for an ended session are dropped
        """
        token = token or self.session.token
        recorded = 0
        for sample in samples:
            if self.session.ingest_emotion(sample, token=token):
                recorded += 1
                self.event_bus.emit(EmotionIngestedEvent(token, self.clock(), sample.emotion, sample.intensity))
        return recorded

    def submit_text(self, text: str) -> TurnOutcome:
        """Handle a typed user turn."""
        token = self.session.token
        if token is None:
            raise SessionStateError("submit_text requires an active session")
        text = (text or "").strip()
        if not text:
            return TurnOutcome.failed("Say something first.")

        with self.session.holding(token) as live:
            if not live:
                return TurnOutcome.stale()
            user_message = self.session.record_user_turn(text)
        self._emit_turn(token, user_message)
        return self._respond(token, user_message)

    def submit_audio(self, audio: bytes) -> TurnOutcome:
        """
        Handle a recorded user turn: transcribe, analyze emotion, reply.

        Raises:
            SessionStateError: if no session is waiting for the user
        """
        token = self.session.token
        self.session.begin_recording()
        self.session.begin_transcribing()

        if self.emotion_feed is not None:
            try:
                self.emotion_feed.submit_audio(audio)
            except EmotionDetectionError as e:
                # Scoring falls back to engagement only
                self._report_error(token, e, "emotion_feed")

        try:
            if self.transcription is None:
                raise TranscriptionError("No transcription service configured")
            text = self.transcription.transcribe(audio)
        except CollaboratorError as e:
            self._report_error(token, e, "transcription")
            with self.session.holding(token) as live:
                if not live:
                    return TurnOutcome.stale()
                self.session.await_user()
            return TurnOutcome.failed(e.user_message)

        with self.session.holding(token) as live:
            if not live:
                logger.info(f"Discarding transcript for ended session {token}")
                return TurnOutcome.stale()
            user_message = self.session.record_user_turn(text)
        self._emit_turn(token, user_message)
        return self._respond(token, user_message)

    def _respond(self, token: str, user_message: ConversationMessage) -> TurnOutcome:
        """Generate, record, score and speak the AI reply to a recorded user turn."""
        with self.session.holding(token) as live:
            if not live:
                return TurnOutcome.stale()
            self.session.begin_generating()
            history = self.session.messages
            scenario = self.session.scenario
            emotion = self.session.current_emotion
            intensity = self.session.current_intensity

        try:
            reply = self.reply_engine.generate(history, scenario, emotion, intensity)
        except CollaboratorError as e:
            self._report_error(token, e, "reply_engine")
            with self.session.holding(token) as live:
                if live:
                    self.session.await_user()
            return TurnOutcome(ok=False, user_message=user_message, error_message=e.user_message)

        with self.session.holding(token) as live:
            if not live:
                logger.info(f"Discarding reply for ended session {token}")
                return TurnOutcome.stale()
            ai_message = self.session.record_ai_turn(reply)
            previous = self.session.score
            score = self.session.update_conversation_score()
            self.session.begin_speaking()
        self._emit_turn(token, ai_message)
        self.event_bus.emit(ScoreUpdatedEvent(token, self.clock(), previous, score))

        warnings = self._speak(token, reply)

        with self.session.holding(token) as live:
            if live:
                self.session.await_user()

        return TurnOutcome(
            ok=True, user_message=user_message, ai_message=ai_message, score=score, warnings=warnings
        )

    def finish(self) -> Optional[SessionSummary]:
        """
        End the session, save it, update the profile and build the report.

        Returns:
            SessionSummary, or None if no session was running
        """
        if self.emotion_feed is not None:
            self.emotion_feed.stop()

        token = self.session.token
        record = self.session.end_session()
        if record is None:
            return None

        warnings: List[str] = []

        try:
            record = record.with_id(self.store.save_session(record))
        except CollaboratorError as e:
            self._report_error(token, e, "store")
            warnings.append(e.user_message)

        progress: Optional[ProgressUpdate] = None
        # Only a stored session counts toward the profile
        if record.id:
            try:
                progress = self.medal_engine.update_medal_progress_from_session(record)
            except CollaboratorError as e:
                self._report_error(token, e, "medal_engine")
                if e.user_message not in warnings:
                    warnings.append(e.user_message)

        if progress is not None:
            for error in progress.errors:
                self._report_error(token, error, "achievement_log")
                if error.user_message not in warnings:
                    warnings.append(error.user_message)
            for medal, (old_level, new_level) in progress.medal_level_ups.items():
                self.event_bus.emit(MedalLevelUpEvent(
                    token, self.clock(), record.user_id, medal, old_level, new_level
                ))

        report = build_report(record)
        feedback = self.reply_engine.generate_feedback(record.messages, record.emotions, record.score)

        self.event_bus.emit(SessionEndedEvent(
            token, self.clock(), record.id or None, record.score,
            len(record.messages), list(record.achievements)
        ))
        logger.info(f"Finished session {record.id or '(unsaved)'}: score {record.score} ({report.grade})")

        return SessionSummary(
            record=record, report=report, feedback=feedback,
            progress=progress, warnings=tuple(warnings)
        )

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()

    def reset_metrics(self):
        """Reset session metrics."""
        self.metrics.reset()
