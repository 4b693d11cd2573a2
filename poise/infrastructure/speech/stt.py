"""
Speech-to-text functionality using Google Cloud Speech.
"""
import logging

from google.cloud import speech
from ...config import LANGUAGE_CODE, TTS_SAMPLE_RATE

logger = logging.getLogger("speech_stt")


def recognize_google_sync(pcm16_bytes: bytes,
                          sr_hz: int = TTS_SAMPLE_RATE,
                          language: str = LANGUAGE_CODE) -> str:
    """
    Synchronous Google Cloud Speech-to-Text recognition.
    Returns transcribed text or empty string if no speech detected.

    Raises:
        google.api_core.exceptions.GoogleAPIError: if the request fails
    """
    client = speech.SpeechClient()
    audio = speech.RecognitionAudio(content=pcm16_bytes)
    config = speech.RecognitionConfig(
        encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
        sample_rate_hertz=sr_hz,
        language_code=language,
        enable_automatic_punctuation=True,
    )

    resp = client.recognize(config=config, audio=audio)
    texts = [r.alternatives[0].transcript for r in resp.results if r.alternatives]
    text = " ".join(texts).strip()
    logger.debug(f"Recognized {len(pcm16_bytes)} bytes -> {text!r}")
    return text
