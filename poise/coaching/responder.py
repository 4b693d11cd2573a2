"""
LLM-backed reply and feedback generation.
"""
import logging
from typing import Dict, List, Optional, Sequence

from ..config import HISTORY_WINDOW, REPLY_TEMPERATURE, FEEDBACK_TEMPERATURE, MAX_OUTPUT_TOKENS
from .errors import GenerationError
from .models import ConversationMessage, EmotionSample
from .prompts import PracticePrompts, PromptFormatter, FALLBACK_FEEDBACK, FALLBACK_REPLY
from .scenarios import ScenarioScript

logger = logging.getLogger("responder")

# Chat history must open with a user turn
_OPENING_CUE = "(The conversation begins.)"


def _alternating(turns: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """Merge consecutive same-role turns and make sure the first turn is the user's."""
    merged: List[Dict[str, str]] = []
    for turn in turns:
        if merged and merged[-1]["role"] == turn["role"]:
            merged[-1] = {"role": turn["role"], "text": merged[-1]["text"] + "\n" + turn["text"]}
        else:
            merged.append(dict(turn))
    if not merged or merged[0]["role"] != "user":
        merged.insert(0, {"role": "user", "text": _OPENING_CUE})
    return merged


class ReplyEngine:
    """Generates the conversation partner's replies and the coach's feedback."""

    def __init__(self, llm_client,
                 history_window: int = HISTORY_WINDOW,
                 temperature: float = REPLY_TEMPERATURE,
                 feedback_temperature: float = FEEDBACK_TEMPERATURE,
                 max_output_tokens: int = MAX_OUTPUT_TOKENS):
        """
        Args:
            llm_client: Anything with VertexRestClient.generate_chat's signature
            history_window: How many recent messages the model sees
        """
        self.llm_client = llm_client
        self.history_window = history_window
        self.temperature = temperature
        self.feedback_temperature = feedback_temperature
        self.max_output_tokens = max_output_tokens

    def generate(self, history: Sequence[ConversationMessage], scenario: ScenarioScript,
                 emotion: Optional[str] = None, intensity: Optional[float] = None) -> str:
        """
        Produce the partner's next line.

        Args:
            history: Conversation so far, oldest first
            scenario: Scenario being played
            emotion: User's current emotion, if known
            intensity: Intensity of that emotion

        Returns:
            Reply text

        Raises:
            GenerationError: if the model call fails
        """
        system_prompt = PracticePrompts.roleplay_system_prompt(
            scenario, PromptFormatter.emotion_context(emotion, intensity)
        )
        turns = _alternating(PromptFormatter.history_turns(history, self.history_window))

        try:
            reply = self.llm_client.generate_chat(
                turns,
                system_instruction=system_prompt,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"Reply generation failed for scenario {scenario.id}: {e}")
            raise GenerationError(f"Reply generation failed: {e}") from e

        reply = (reply or "").strip()
        logger.info(f"Generated reply ({len(turns)} turns of context): {reply!r}")
        return reply or FALLBACK_REPLY

    def generate_feedback(self, history: Sequence[ConversationMessage],
                          emotions: Sequence[EmotionSample], score: int) -> str:
        """
        Coach feedback for a finished session.

        Never raises; falls back to a fixed encouraging line.
        """
        request = PracticePrompts.feedback_request(
            PromptFormatter.conversation_summary(history),
            PromptFormatter.emotion_summary(emotions),
            score,
        )
        try:
            feedback = self.llm_client.generate_chat(
                [{"role": "user", "text": request}],
                system_instruction=PracticePrompts.coach_system_prompt(),
                temperature=self.feedback_temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"Feedback generation failed: {e}")
            return FALLBACK_FEEDBACK

        feedback = (feedback or "").strip()
        return feedback or FALLBACK_FEEDBACK
