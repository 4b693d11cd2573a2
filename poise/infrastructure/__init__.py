"""Infrastructure components for the Poise practice engine.

This module contains low-level technical components: the Vertex AI client,
Google Cloud speech, the Hume emotion client and the JSON profile store.
"""

# Speech infrastructure
from .speech import synthesize_speech, play_wav_bytes, voice_settings_for_emotion, recognize_google_sync

# LLM infrastructure
from .llm import VertexRestClient

# Emotion recognition
from .emotion import HumeBatchClient

# Persistence
from .data import ProfileStore

__all__ = [
    # Speech services
    "synthesize_speech", "play_wav_bytes", "voice_settings_for_emotion", "recognize_google_sync",

    # LLM client
    "VertexRestClient",

    # Emotion recognition
    "HumeBatchClient",

    # Persistence
    "ProfileStore"
]
