"""Practice engine components.

This module contains the business logic for social-confidence practice:
scenarios, the live session state machine, scoring, medals and reports.

The orchestrator, services and testing helpers depend on infrastructure and
are imported from their own modules (poise.coaching.orchestrator, ...).
"""

# Data models
from .models import (
    Speaker, EmotionSample, ConversationMessage, SessionRecord,
    UserPreferences, UserProfile, AchievementEntry, default_medals
)

# Errors
from .errors import (
    PoiseError, SessionStateError, ScenarioValidationError, CollaboratorError,
    TranscriptionError, GenerationError, SynthesisError, EmotionDetectionError,
    PersistenceError, ConcurrentUpdateError
)

# Scenarios
from .scenarios import (
    NodeCondition, DialogueResponse, DialogueNode, SuccessConditions,
    ScenarioDisplay, ScenarioScript, ScenarioCatalog,
    validate_scenario, scenario_from_dict, load_scenarios, opening_line, next_node
)
from .scenario_library import builtin_scenarios, default_catalog

# Session state and outcomes
from .schemas import SessionPhase, PHASE_TRANSITIONS, can_transition, TurnOutcome
from .session import ConversationSession

# Scoring and reports
from .scoring import (
    update_conversation_score, compute_emotion_totals, compute_medal_progress,
    evaluate_achievements, MedalEngine, ProgressUpdate
)
from .report import SessionReport, EmotionSummary, Suggestion, build_report, format_report
from .analysis import EmotionAnalytics, summarize_sessions

__all__ = [
    # Data models
    "Speaker", "EmotionSample", "ConversationMessage", "SessionRecord",
    "UserPreferences", "UserProfile", "AchievementEntry", "default_medals",

    # Errors
    "PoiseError", "SessionStateError", "ScenarioValidationError", "CollaboratorError",
    "TranscriptionError", "GenerationError", "SynthesisError", "EmotionDetectionError",
    "PersistenceError", "ConcurrentUpdateError",

    # Scenarios
    "NodeCondition", "DialogueResponse", "DialogueNode", "SuccessConditions",
    "ScenarioDisplay", "ScenarioScript", "ScenarioCatalog",
    "validate_scenario", "scenario_from_dict", "load_scenarios", "opening_line", "next_node",
    "builtin_scenarios", "default_catalog",

    # Session
    "SessionPhase", "PHASE_TRANSITIONS", "can_transition", "TurnOutcome", "ConversationSession",

    # Scoring and reports
    "update_conversation_score", "compute_emotion_totals", "compute_medal_progress",
    "evaluate_achievements", "MedalEngine", "ProgressUpdate",
    "SessionReport", "EmotionSummary", "Suggestion", "build_report", "format_report",
    "EmotionAnalytics", "summarize_sessions",
]
