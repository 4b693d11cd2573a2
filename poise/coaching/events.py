"""
Event-driven notifications for the practice engine.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of practice events."""
    SESSION_STARTED = "session_started"
    TURN_RECORDED = "turn_recorded"
    EMOTION_INGESTED = "emotion_ingested"
    SCORE_UPDATED = "score_updated"
    SESSION_ENDED = "session_ended"
    MEDAL_LEVEL_UP = "medal_level_up"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class PracticeEvent(ABC):
    """Base class for all practice events."""
    event_type: EventType
    session_token: str
    timestamp: int
    data: Dict[str, Any]


@dataclass
class SessionStartedEvent(PracticeEvent):
    """Event fired when a session begins."""
    def __init__(self, session_token: str, timestamp: int, scenario_id: str, user_id: str):
        super().__init__(
            event_type=EventType.SESSION_STARTED,
            session_token=session_token,
            timestamp=timestamp,
            data={"scenario_id": scenario_id, "user_id": user_id}
        )


@dataclass
class TurnRecordedEvent(PracticeEvent):
    """Event fired when a user or AI message is added."""
    def __init__(self, session_token: str, timestamp: int, speaker: str,
                 content: str, message_count: int):
        super().__init__(
            event_type=EventType.TURN_RECORDED,
            session_token=session_token,
            timestamp=timestamp,
            data={
                "speaker": speaker,
                "content": content,
                "message_count": message_count
            }
        )


@dataclass
class EmotionIngestedEvent(PracticeEvent):
    """Event fired when an emotion sample is recorded."""
    def __init__(self, session_token: str, timestamp: int, emotion: str, intensity: float):
        super().__init__(
            event_type=EventType.EMOTION_INGESTED,
            session_token=session_token,
            timestamp=timestamp,
            data={"emotion": emotion, "intensity": intensity}
        )


@dataclass
class ScoreUpdatedEvent(PracticeEvent):
    """Event fired after the live score is recomputed."""
    def __init__(self, session_token: str, timestamp: int, previous: int, score: int):
        super().__init__(
            event_type=EventType.SCORE_UPDATED,
            session_token=session_token,
            timestamp=timestamp,
            data={"previous": previous, "score": score}
        )


@dataclass
class SessionEndedEvent(PracticeEvent):
    """Event fired when a session is finished and saved."""
    def __init__(self, session_token: str, timestamp: int, session_id: Optional[str],
                 score: int, message_count: int, achievements: List[str]):
        super().__init__(
            event_type=EventType.SESSION_ENDED,
            session_token=session_token,
            timestamp=timestamp,
            data={
                "session_id": session_id,
                "score": score,
                "message_count": message_count,
                "achievements": achievements
            }
        )


@dataclass
class MedalLevelUpEvent(PracticeEvent):
    """Event fired when a medal reaches a new level."""
    def __init__(self, session_token: str, timestamp: int, user_id: str,
                 medal: str, old_level: int, new_level: int):
        super().__init__(
            event_type=EventType.MEDAL_LEVEL_UP,
            session_token=session_token,
            timestamp=timestamp,
            data={
                "user_id": user_id,
                "medal": medal,
                "old_level": old_level,
                "new_level": new_level
            }
        )


@dataclass
class ErrorOccurredEvent(PracticeEvent):
    """Event fired when a collaborator fails."""
    def __init__(self, session_token: str, timestamp: int, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_token=session_token,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[PracticeEvent], None]


class PracticeEventBus:
    """Event bus for practice engine communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: PracticeEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and does not stop the others.
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_token}")

        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.log_level = log_level

    def handle_event(self, event: PracticeEvent) -> None:
        self.logger.log(
            self.log_level,
            f"Event: {event.event_type.value} | Session: {event.session_token} | Data: {event.data}"
        )


class SessionMetrics:
    """Counts practice events."""

    def __init__(self):
        self.reset()

    def handle_event(self, event: PracticeEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.SESSION_STARTED:
            self.sessions_started += 1
        elif event.event_type == EventType.SESSION_ENDED:
            self.sessions_completed += 1
        elif event.event_type == EventType.TURN_RECORDED:
            self.turns_recorded += 1
        elif event.event_type == EventType.EMOTION_INGESTED:
            self.emotions_ingested += 1
        elif event.event_type == EventType.SCORE_UPDATED:
            self.score_updates += 1
        elif event.event_type == EventType.MEDAL_LEVEL_UP:
            self.medal_level_ups += 1
        elif event.event_type == EventType.ERROR_OCCURRED:
            self.errors_occurred += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "sessions_started": self.sessions_started,
            "sessions_completed": self.sessions_completed,
            "turns_recorded": self.turns_recorded,
            "emotions_ingested": self.emotions_ingested,
            "score_updates": self.score_updates,
            "medal_level_ups": self.medal_level_ups,
            "errors_occurred": self.errors_occurred
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.sessions_started = 0
        self.sessions_completed = 0
        self.turns_recorded = 0
        self.emotions_ingested = 0
        self.score_updates = 0
        self.medal_level_ups = 0
        self.errors_occurred = 0
