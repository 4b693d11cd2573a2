import threading

import pytest

from poise.coaching.errors import EmotionDetectionError, SynthesisError, TranscriptionError
from poise.coaching.services import EmotionFeed, SpeechService, TranscriptionService
from poise.coaching.testing import MockEmotionClient


def test_transcription_passes_audio_settings():
    calls = []

    def recognizer(audio, sr_hz, language):
        calls.append((audio, sr_hz, language))
        return "  hello there  "

    service = TranscriptionService(language_code="en-GB", sample_rate=8000, recognizer=recognizer)
    assert service.transcribe(b"pcm") == "hello there"
    assert calls == [(b"pcm", 8000, "en-GB")]


@pytest.mark.parametrize("audio, text", [(b"", "unused"), (b"pcm", "   ")])
def test_transcription_rejects_empty_audio_and_silence(audio, text):
    service = TranscriptionService(recognizer=lambda *a, **k: text)
    with pytest.raises(TranscriptionError):
        service.transcribe(audio)


def test_disabled_speech_does_nothing():
    played = []
    service = SpeechService(enabled=False, synthesizer=lambda *a, **k: b"wav", player=played.append)
    assert service.speak("Hello") is False
    assert played == []


def test_speech_failure_is_wrapped():
    def broken_player(audio):
        raise RuntimeError("no audio device")

    service = SpeechService(synthesizer=lambda *a, **k: b"wav", player=broken_player)
    with pytest.raises(SynthesisError):
        service.speak("Hello", "anxiety")


def test_emotion_feed_delivers_only_while_running():
    received = []
    feed = EmotionFeed(MockEmotionClient([[("joy", 0.4)], [("calm", 0.6)]]))

    feed.submit_audio(b"ignored")
    feed.start(received.append)
    feed.submit_audio(b"clip")
    feed.stop()
    feed.submit_audio(b"clip")

    assert [[s.emotion for s in batch] for batch in received] == [["joy"]]


def test_emotion_feed_errors():
    feed = EmotionFeed(MockEmotionClient([], fail=True))
    feed.start(lambda samples: None)
    with pytest.raises(EmotionDetectionError):
        feed.submit_audio(b"clip")


def test_emotion_feed_without_client_is_unavailable():
    feed = EmotionFeed()
    assert not feed.available
    feed.start(lambda samples: None)
    feed.submit_audio(b"clip")


def test_stop_waits_for_background_analysis():
    release = threading.Event()
    received = []

    class SlowClient(MockEmotionClient):
        """Holds each clip until released."""

        def analyze_audio(self, audio):
            release.wait(5)
            return super().analyze_audio(audio)

    client = SlowClient([[("joy", 0.4)]])
    feed = EmotionFeed(client, background=True)
    feed.start(received.append)
    feed.submit_audio(b"clip")
    assert feed.pending == 1

    threading.Timer(0.05, release.set).start()
    feed.stop()

    assert feed.pending == 0
    assert client.clips == [b"clip"]
    # Finished after stop(), so nothing was delivered
    assert received == []
