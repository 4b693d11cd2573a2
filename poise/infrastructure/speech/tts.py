"""
Text-to-speech functionality using Google Cloud TTS.
"""
import os
import subprocess
import tempfile
import logging
from typing import Optional, Dict, Tuple

from google.cloud import texttospeech

from ...config import (
    TTS_VOICE, LANGUAGE_CODE, TTS_SAMPLE_RATE, TTS_BASE_SPEAKING_RATE, TTS_BASE_PITCH
)

logger = logging.getLogger("speech_tts")

# emotion -> (speaking rate multiplier, pitch offset in semitones)
EMOTION_VOICE_SETTINGS: Dict[str, Tuple[float, float]] = {
    "happy": (1.1, 2.0),
    "joy": (1.1, 2.0),
    "sad": (0.9, -2.0),
    "melancholy": (0.9, -2.0),
    "angry": (1.05, -1.0),
    "frustration": (1.05, -1.0),
    "calm": (0.95, 0.0),
    "neutral": (0.95, 0.0),
    "excited": (1.15, 3.0),
    "enthusiasm": (1.15, 3.0),
}


def voice_settings_for_emotion(emotion: Optional[str]) -> Tuple[float, float]:
    """Speaking rate and pitch for a reply delivered with the given emotion."""
    rate, pitch = EMOTION_VOICE_SETTINGS.get((emotion or "").lower(), (1.0, 0.0))
    return TTS_BASE_SPEAKING_RATE * rate, TTS_BASE_PITCH + pitch


def synthesize_speech(text: str,
                      voice: str = TTS_VOICE,
                      language_code: str = LANGUAGE_CODE,
                      speaking_rate: float = TTS_BASE_SPEAKING_RATE,
                      pitch: float = TTS_BASE_PITCH) -> bytes:
    """
    Render text to 16-bit WAV audio with Google Cloud TTS.

    Raises:
        google.api_core.exceptions.GoogleAPIError: if the request fails
    """
    client = texttospeech.TextToSpeechClient()
    synthesis_input = texttospeech.SynthesisInput(text=text)
    voice_params = texttospeech.VoiceSelectionParams(
        language_code=language_code,
        name=voice
    )
    audio_config = texttospeech.AudioConfig(
        audio_encoding=texttospeech.AudioEncoding.LINEAR16,
        sample_rate_hertz=TTS_SAMPLE_RATE,
        speaking_rate=speaking_rate,
        pitch=pitch,
    )
    response = client.synthesize_speech(
        input=synthesis_input, voice=voice_params, audio_config=audio_config
    )
    logger.debug(f"Synthesized {len(text)} chars -> {len(response.audio_content)} bytes")
    return response.audio_content


def play_wav_bytes(audio: bytes) -> None:
    """
    Play WAV audio with the platform player (afplay on macOS, aplay on Linux).

    Raises:
        RuntimeError: if no player is available or playback fails
    """
    with tempfile.NamedTemporaryFile(suffix='.wav', delete=False) as tmp_file:
        wav_path = tmp_file.name
        tmp_file.write(audio)

    try:
        for player in (["afplay", wav_path], ["aplay", "-q", wav_path]):
            try:
                subprocess.run(player, check=True, capture_output=True)
                return
            except FileNotFoundError:
                continue
            except subprocess.CalledProcessError as e:
                raise RuntimeError(f"{player[0]} failed: {e.stderr!r}") from e
        raise RuntimeError("No audio player found (tried afplay, aplay)")
    finally:
        try:
            os.unlink(wav_path)
        except OSError:
            pass
