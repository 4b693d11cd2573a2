"""
Service classes wrapping the speech, emotion and synthesis infrastructure.

Each service turns infrastructure failures into the matching CollaboratorError
so the orchestrator can handle them at one boundary.
"""
import logging
import threading
from typing import Callable, List, Optional

from ..config import LANGUAGE_CODE, TTS_SAMPLE_RATE, TTS_VOICE, EMOTION_WORKER_JOIN_TIMEOUT
from .errors import TranscriptionError, SynthesisError, EmotionDetectionError
from .models import EmotionSample

logger = logging.getLogger("services")

EmotionCallback = Callable[[List[EmotionSample]], None]
ErrorCallback = Callable[[Exception], None]


class TranscriptionService:
    """Speech-to-text for recorded user turns."""

    def __init__(self, language_code: str = LANGUAGE_CODE, sample_rate: int = TTS_SAMPLE_RATE,
                 recognizer: Optional[Callable[..., str]] = None):
        self.language_code = language_code
        self.sample_rate = sample_rate
        if recognizer is None:
            from ..infrastructure.speech import recognize_google_sync
            recognizer = recognize_google_sync
        self.recognizer = recognizer

    def transcribe(self, audio: bytes) -> str:
        """
        Transcribe 16-bit PCM audio.

        Raises:
            TranscriptionError: on empty audio, a failed request or no speech
        """
        if not audio:
            raise TranscriptionError("No audio recorded")
        try:
            text = self.recognizer(audio, sr_hz=self.sample_rate, language=self.language_code)
        except Exception as e:
            logger.error(f"Speech recognition failed: {e}")
            raise TranscriptionError(f"Speech recognition failed: {e}") from e

        text = (text or "").strip()
        if not text:
            raise TranscriptionError("No speech detected")
        logger.info(f"Speech recognition result: {text}")
        return text


class SpeechService:
    """Text-to-speech for the conversation partner's replies."""

    def __init__(self, enabled: bool = True, voice: str = TTS_VOICE,
                 language_code: str = LANGUAGE_CODE,
                 synthesizer: Optional[Callable[..., bytes]] = None,
                 player: Optional[Callable[[bytes], None]] = None):
        self.enabled = enabled
        self.voice = voice
        self.language_code = language_code
        if synthesizer is None or player is None:
            from ..infrastructure.speech import synthesize_speech, play_wav_bytes
            synthesizer = synthesizer or synthesize_speech
            player = player or play_wav_bytes
        self.synthesizer = synthesizer
        self.player = player

    def synthesize(self, text: str, emotion: Optional[str] = None) -> bytes:
        """
        Render a reply, with delivery adjusted to the emotion.

        Raises:
            SynthesisError: if synthesis fails
        """
        from ..infrastructure.speech import voice_settings_for_emotion
        speaking_rate, pitch = voice_settings_for_emotion(emotion)
        try:
            return self.synthesizer(
                text,
                voice=self.voice,
                language_code=self.language_code,
                speaking_rate=speaking_rate,
                pitch=pitch,
            )
        except Exception as e:
            logger.error(f"Speech synthesis failed: {e}")
            raise SynthesisError(f"Speech synthesis failed: {e}") from e

    def play(self, audio: bytes) -> None:
        """
        Raises:
            SynthesisError: if playback fails
        """
        try:
            self.player(audio)
        except Exception as e:
            logger.error(f"Audio playback failed: {e}")
            raise SynthesisError(f"Audio playback failed: {e}") from e

    def speak(self, text: str, emotion: Optional[str] = None) -> bool:
        """
        Synthesize and play text when speech is enabled.

        Returns:
            True if audio was played, False when speech is disabled
        """
        if not self.enabled or not text.strip():
            return False
        self.play(self.synthesize(text, emotion))
        return True


class EmotionFeed:
    """
    Pushes emotion samples recognized from submitted audio clips.

    Samples go to the callback registered with start(); nothing is delivered
    while the feed is stopped.
    """

    def __init__(self, client=None, background: bool = False,
                 join_timeout: float = EMOTION_WORKER_JOIN_TIMEOUT):
        """
        Args:
            client: Emotion recognizer with analyze_audio(bytes) -> List[EmotionSample]
            background: Analyze clips on a worker thread instead of the caller's
            join_timeout: Seconds stop() waits for each worker still running
        """
        self.client = client
        self.background = background
        self.join_timeout = join_timeout
        self._callback: Optional[EmotionCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._workers: List[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    @property
    def available(self) -> bool:
        return self.client is not None

    @property
    def pending(self) -> int:
        """Number of background analyses still running."""
        with self._lock:
            return sum(1 for worker in self._workers if worker.is_alive())

    def start(self, callback: EmotionCallback, on_error: Optional[ErrorCallback] = None) -> None:
        with self._lock:
            self._callback = callback
            self._on_error = on_error
        logger.info("Emotion feed started")

    def stop(self) -> None:
        """Stop delivering samples and wait for in-flight analyses to finish."""
        with self._lock:
            self._callback = None
            self._on_error = None
            workers, self._workers = self._workers, []

        for worker in workers:
            worker.join(self.join_timeout)
            if worker.is_alive():
                logger.warning(f"Emotion worker {worker.name} still running after {self.join_timeout}s")
        logger.info("Emotion feed stopped")

    def submit_audio(self, audio: bytes) -> None:
        """
        Analyze a clip and deliver its samples.

        Raises:
            EmotionDetectionError: if analysis fails (foreground mode only;
                                   background failures go to on_error)
        """
        if not self.available or not self.is_running or not audio:
            return

        if self.background:
            worker = threading.Thread(target=self._analyze_in_background, args=(audio,),
                                      name="emotion-feed", daemon=True)
            with self._lock:
                self._workers = [w for w in self._workers if w.is_alive()]
                self._workers.append(worker)
            worker.start()
        else:
            self._deliver(self._analyze(audio))

    def _analyze(self, audio: bytes) -> List[EmotionSample]:
        try:
            samples = self.client.analyze_audio(audio)
        except Exception as e:
            logger.error(f"Emotion analysis failed: {e}")
            raise EmotionDetectionError(f"Emotion analysis failed: {e}") from e
        logger.debug(f"Emotion analysis returned {len(samples)} samples")
        return samples

    def _analyze_in_background(self, audio: bytes) -> None:
        try:
            samples = self._analyze(audio)
        except EmotionDetectionError as e:
            with self._lock:
                on_error = self._on_error
            if on_error is not None:
                on_error(e)
            return
        self._deliver(samples)

    def _deliver(self, samples: List[EmotionSample]) -> None:
        with self._lock:
            callback = self._callback
        if callback is not None and samples:
            callback(samples)
