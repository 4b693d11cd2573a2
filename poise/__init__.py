"""
Poise: voice-driven social-confidence practice.

Roleplay everyday conversations with an AI partner that adapts to how you
sound, then get a score, medals and coaching feedback.
"""

__version__ = "1.0.0"

# Main entry points
from .coaching.orchestrator import PracticeOrchestrator, SessionSummary
from .coaching.models import ConversationMessage, SessionRecord
from .coaching.scenario_library import default_catalog

__all__ = ["PracticeOrchestrator", "SessionSummary", "ConversationMessage", "SessionRecord", "default_catalog"]
