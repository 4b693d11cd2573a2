"""
Exception hierarchy for the practice engine.
"""


class PoiseError(Exception):
    """Base exception for all practice engine errors."""

    pass


class SessionStateError(PoiseError):
    """Raised when a session operation is invoked in the wrong state."""

    pass


class ScenarioValidationError(PoiseError):
    """Raised when a scenario script has dangling or inconsistent node references."""

    pass


class CollaboratorError(PoiseError):
    """Base for failures of external services (speech, LLM, emotion, storage)."""

    # Short text safe to show the user
    user_message = "Something went wrong. Please try again."


class TranscriptionError(CollaboratorError):
    """Raised when speech-to-text fails or returns nothing usable."""

    user_message = "Could not process recording."


class GenerationError(CollaboratorError):
    """Raised when the LLM fails to produce a reply."""

    user_message = "Could not generate a reply."


class SynthesisError(CollaboratorError):
    """Raised when text-to-speech or playback fails."""

    user_message = "Could not play the reply."


class EmotionDetectionError(CollaboratorError):
    """Raised when the emotion recognizer cannot be reached or fails a job."""

    user_message = "Emotion analysis is unavailable."


class PersistenceError(CollaboratorError):
    """Raised when the document store cannot read or write a document."""

    user_message = "Could not save your progress."


class ConcurrentUpdateError(PersistenceError):
    """Raised when a profile changed between read and write."""

    pass
