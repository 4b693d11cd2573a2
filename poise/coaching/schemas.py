"""
Session phases and structured results passed between the engine and its callers.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, FrozenSet, Tuple

from .models import ConversationMessage


class SessionPhase(str, Enum):
    """Where a session is in its turn cycle."""
    IDLE = "idle"
    AWAITING_USER_TURN = "awaiting_user_turn"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    GENERATING_REPLY = "generating_reply"
    SPEAKING = "speaking"

    @property
    def is_active(self) -> bool:
        return self is not SessionPhase.IDLE


# Legal moves between active phases. Leaving IDLE happens only through
# start_session, and any active phase may end the session.
PHASE_TRANSITIONS: Dict[SessionPhase, FrozenSet[SessionPhase]] = {
    SessionPhase.AWAITING_USER_TURN: frozenset({
        SessionPhase.RECORDING,
        SessionPhase.GENERATING_REPLY,  # typed input skips recording
        SessionPhase.SPEAKING,          # opening line
    }),
    SessionPhase.RECORDING: frozenset({
        SessionPhase.TRANSCRIBING,
        SessionPhase.AWAITING_USER_TURN,
    }),
    SessionPhase.TRANSCRIBING: frozenset({
        SessionPhase.GENERATING_REPLY,
        SessionPhase.AWAITING_USER_TURN,
    }),
    SessionPhase.GENERATING_REPLY: frozenset({
        SessionPhase.SPEAKING,
        SessionPhase.AWAITING_USER_TURN,
    }),
    SessionPhase.SPEAKING: frozenset({
        SessionPhase.AWAITING_USER_TURN,
    }),
}


def can_transition(current: SessionPhase, target: SessionPhase) -> bool:
    """Check the transition table."""
    return target in PHASE_TRANSITIONS.get(current, frozenset())


@dataclass
class TurnOutcome:
    """
    What happened during one turn (or the opening line), as seen by the UI.

    error_message is short user-facing text; the failure itself is logged and
    emitted as an event.
    """
    ok: bool
    user_message: Optional[ConversationMessage] = None
    ai_message: Optional[ConversationMessage] = None
    score: Optional[int] = None
    error_message: Optional[str] = None
    discarded: bool = False
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def failed(cls, error_message: str) -> 'TurnOutcome':
        return cls(ok=False, error_message=error_message)

    @classmethod
    def stale(cls) -> 'TurnOutcome':
        """Result for a turn whose session ended while it was in flight."""
        return cls(ok=False, discarded=True)
