"""
Prompt templates for the conversation partner and the coach.

Kept separate from the reply engine so the wording can be edited without
touching the call logic.
"""

from typing import Dict, List, Optional, Sequence

from .models import ConversationMessage, EmotionSample, Speaker
from .scenarios import ScenarioScript


FALLBACK_FEEDBACK = "Great job practicing! Keep working on your conversation skills."
FALLBACK_REPLY = "I'm not sure how to respond to that."


class PracticePrompts:
    """Collection of all practice-related prompts."""

    @staticmethod
    def roleplay_system_prompt(scenario: ScenarioScript, emotion_context: str = "") -> str:
        """System instruction for the in-scenario conversation partner."""
        return f"""
You are roleplaying in a social confidence training scenario: "{scenario.title}".

Scenario Description: {scenario.description}

Your role:
- Act as a realistic conversation partner in this scenario
- Respond naturally and authentically to the user's messages
- Adapt your responses based on the user's emotional state
- Keep responses conversational and under 30 words
- Help create a realistic practice environment

{emotion_context}

Guidelines:
- If the user seems nervous or anxious, be encouraging and patient
- If the user is confident, engage more dynamically
- If the user seems confused, provide gentle guidance
- Stay in character for the scenario context
- Don't break the fourth wall or mention this is training

Remember: This is practice for real social situations. Be helpful but realistic.
        """.strip()

    @staticmethod
    def coach_system_prompt() -> str:
        """System instruction for post-session feedback."""
        return """
You are a social confidence coach providing feedback on a practice conversation.

Analyze the conversation and emotional data to provide constructive feedback.

Focus on:
- Communication strengths
- Areas for improvement
- Emotional awareness
- Specific actionable advice

Keep feedback encouraging but honest. Limit to 100 words.
        """.strip()

    @staticmethod
    def feedback_request(conversation: str, emotion_summary: str, score: int) -> str:
        """User turn carrying the session data for the coach."""
        return f"Conversation:\n{conversation}\n\n{emotion_summary}\n\nScore: {score}/100"


class PromptFormatter:
    """Helper class for formatting session data into prompts."""

    @staticmethod
    def emotion_context(emotion: Optional[str], intensity: Optional[float]) -> str:
        """One line describing the user's current emotion, or empty when unknown."""
        if emotion and intensity:
            return f"The user is currently showing {emotion} with intensity {intensity:.2f}."
        return ""

    @staticmethod
    def history_turns(messages: Sequence[ConversationMessage], window: int) -> List[Dict[str, str]]:
        """Recent messages as chat turns; the AI speaks as the model."""
        recent = list(messages)[-window:] if window > 0 else []
        return [
            {"role": "user" if m.speaker == Speaker.USER else "model", "text": m.content}
            for m in recent
        ]

    @staticmethod
    def conversation_summary(messages: Sequence[ConversationMessage]) -> str:
        return "\n".join(m.transcript_line() for m in messages)

    @staticmethod
    def emotion_summary(emotions: Sequence[EmotionSample]) -> str:
        if not emotions:
            return "No emotion data available"
        listed = ", ".join(f"{e.emotion} ({e.intensity:.2f})" for e in emotions)
        return f"Emotions detected: {listed}"
