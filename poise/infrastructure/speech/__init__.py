"""Speech-to-text and text-to-speech modules."""

from .tts import synthesize_speech, play_wav_bytes, voice_settings_for_emotion
from .stt import recognize_google_sync

__all__ = ["synthesize_speech", "play_wav_bytes", "voice_settings_for_emotion", "recognize_google_sync"]
