"""
Testing infrastructure with mock services for the practice engine.

Also backs the CLI's --offline mode, where no cloud service is reachable.
"""
import re
import tempfile
from typing import Dict, Any, List, Optional

from .models import EmotionSample, now_ms
from .orchestrator import PracticeOrchestrator
from .prompts import PracticePrompts
from .responder import ReplyEngine
from .scenario_library import default_catalog
from .scenarios import ScenarioCatalog, ScenarioScript, DialogueNode, next_node
from .services import TranscriptionService, SpeechService, EmotionFeed


class MockLLMClient:
    """Mock LLM client for testing."""

    def __init__(self, mock_responses: Optional[List[str]] = None, fail_with: Optional[Exception] = None):
        self.mock_responses = list(mock_responses or [])
        self.current_response_idx = 0
        self.fail_with = fail_with
        self.request_history = []

    def generate_chat(self, turns: List[Dict[str, str]], system_instruction: Optional[str] = None,
                      temperature: float = 0.0, **kwargs) -> str:
        """Return the next queued response."""
        self.request_history.append({
            "turns": turns,
            "system_instruction": system_instruction,
            "temperature": temperature,
            "kwargs": kwargs
        })

        if self.fail_with is not None:
            raise self.fail_with

        if self.current_response_idx < len(self.mock_responses):
            response = self.mock_responses[self.current_response_idx]
            self.current_response_idx += 1
            return response
        # Default fallback response
        return "That's interesting, tell me more."


class MockTranscriptionService(TranscriptionService):
    """Mock transcription service; a None entry simulates a failed request."""

    def __init__(self, mock_transcripts: List[Optional[str]]):
        # Don't call super().__init__ to avoid loading Google Cloud Speech
        self.mock_transcripts = list(mock_transcripts)
        self.current_transcript_idx = 0
        self.language_code = "en-US"
        self.sample_rate = 16000
        self.recognizer = self._next_transcript

    def _next_transcript(self, audio: bytes, **kwargs) -> str:
        if self.current_transcript_idx >= len(self.mock_transcripts):
            return ""
        transcript = self.mock_transcripts[self.current_transcript_idx]
        self.current_transcript_idx += 1
        if transcript is None:
            raise RuntimeError("Mock recognizer unavailable")
        return transcript


class MockSpeechService(SpeechService):
    """Mock speech service that records what would have been spoken."""

    def __init__(self, enabled: bool = True, fail: bool = False):
        # Don't call super().__init__ to avoid initializing real TTS
        self.enabled = enabled
        self.voice = "mock"
        self.language_code = "en-US"
        self.fail = fail
        self.spoken_messages = []
        self.synthesizer = self._synthesize
        self.player = self._play

    def _synthesize(self, text: str, **kwargs) -> bytes:
        if self.fail:
            raise RuntimeError("Mock synthesizer unavailable")
        return text.encode("utf-8")

    def _play(self, audio: bytes) -> None:
        self.spoken_messages.append(audio.decode("utf-8"))


class MockEmotionClient:
    """Mock emotion recognizer returning queued samples per clip."""

    def __init__(self, mock_results: List[List[Any]], fail: bool = False):
        """
        Args:
            mock_results: One list of (emotion, intensity) pairs per submitted clip
            fail: Raise on every clip instead
        """
        self.mock_results = list(mock_results)
        self.current_result_idx = 0
        self.fail = fail
        self.clips = []

    def analyze_audio(self, audio: bytes) -> List[EmotionSample]:
        self.clips.append(audio)
        if self.fail:
            raise RuntimeError("Mock emotion service unavailable")
        if self.current_result_idx >= len(self.mock_results):
            return []
        pairs = self.mock_results[self.current_result_idx]
        self.current_result_idx += 1
        return [
            EmotionSample(emotion=name, intensity=value, confidence=1.0, timestamp=now_ms())
            for name, value in pairs
        ]


class ScriptedLLMClient:
    """
    Plays a scenario's dialogue graph instead of calling a model.

    Each reply follows the response whose wording best overlaps what the user
    said; a branch that ends closes the conversation politely.
    """

    CLOSING_LINE = "It was really nice talking with you. Take care!"

    def __init__(self, scenario: ScenarioScript):
        self.scenario = scenario
        self.current: Optional[DialogueNode] = scenario.opening
        self.request_history = []

    @staticmethod
    def _words(text: str) -> set:
        return set(re.findall(r"[a-z']+", text.lower()))

    def _last_user_text(self, turns: List[Dict[str, str]]) -> str:
        for turn in reversed(turns):
            if turn["role"] == "user":
                return turn["text"]
        return ""

    def generate_chat(self, turns: List[Dict[str, str]], system_instruction: Optional[str] = None,
                      temperature: float = 0.0, **kwargs) -> str:
        self.request_history.append({"turns": turns, "system_instruction": system_instruction})

        if system_instruction == PracticePrompts.coach_system_prompt():
            return "Nice work staying in the conversation. Try asking a follow-up question next time."

        if self.current is None or not self.current.responses:
            self.current = None
            return self.CLOSING_LINE

        said = self._words(self._last_user_text(turns))
        best = max(self.current.responses, key=lambda r: len(said & self._words(r.content)))
        self.current = next_node(self.scenario, self.current.id, best.id)
        if self.current is None:
            return self.CLOSING_LINE
        return self.current.content


def create_offline_orchestrator(scenario_id: str,
                                data_dir: Optional[str] = None,
                                catalog: Optional[ScenarioCatalog] = None) -> PracticeOrchestrator:
    """
    Build an orchestrator that runs without any cloud service.

    Replies walk the scenario's dialogue graph and speech is switched off.
    """
    from ..infrastructure.data import ProfileStore

    catalog = catalog or default_catalog()
    scenario = catalog.get_scenario(scenario_id)
    if scenario is None:
        raise KeyError(f"Unknown scenario: {scenario_id}")

    return PracticeOrchestrator(
        catalog=catalog,
        store=ProfileStore(data_dir or tempfile.mkdtemp()),
        reply_engine=ReplyEngine(ScriptedLLMClient(scenario)),
        transcription=None,
        speech=MockSpeechService(enabled=False),
        emotion_feed=None,
    )


def create_mock_practice_setup(data_dir: str,
                               replies: Optional[List[str]] = None,
                               transcripts: Optional[List[Optional[str]]] = None,
                               emotions: Optional[List[List[Any]]] = None) -> Dict[str, Any]:
    """Create a complete mock practice setup for testing."""
    from ..infrastructure.data import ProfileStore

    llm_client = MockLLMClient(replies or [
        "Oh nice, what brings you here today?",
        "Ha, same here. Do you come here often?",
        "Well, it was lovely chatting!"
    ])
    transcription = MockTranscriptionService(transcripts or [])
    speech = MockSpeechService()
    emotion_client = MockEmotionClient(emotions or [])
    store = ProfileStore(data_dir)

    orchestrator = PracticeOrchestrator(
        catalog=default_catalog(),
        store=store,
        reply_engine=ReplyEngine(llm_client),
        transcription=transcription,
        speech=speech,
        emotion_feed=EmotionFeed(emotion_client),
    )

    return {
        "orchestrator": orchestrator,
        "llm_client": llm_client,
        "transcription": transcription,
        "speech": speech,
        "emotion_client": emotion_client,
        "store": store,
    }
