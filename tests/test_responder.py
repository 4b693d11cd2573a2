import pytest

from poise.coaching.errors import GenerationError
from poise.coaching.models import ConversationMessage, Speaker
from poise.coaching.prompts import FALLBACK_FEEDBACK, FALLBACK_REPLY, PracticePrompts, PromptFormatter
from poise.coaching.responder import ReplyEngine, _alternating
from poise.coaching.testing import MockLLMClient


def _history(*lines):
    return [
        ConversationMessage(id=str(i), speaker=speaker, content=text, timestamp=i)
        for i, (speaker, text) in enumerate(lines)
    ]


def test_alternating_opens_with_user_and_merges_runs():
    turns = _alternating([
        {"role": "model", "text": "Hi there!"},
        {"role": "user", "text": "Hello"},
        {"role": "user", "text": "Nice place"},
        {"role": "model", "text": "Isn't it?"},
    ])
    assert [t["role"] for t in turns] == ["user", "model", "user", "model"]
    assert turns[2]["text"] == "Hello\nNice place"


def test_history_window_keeps_latest_messages():
    history = _history(*[(Speaker.USER if i % 2 else Speaker.AI, f"line {i}") for i in range(14)])
    turns = PromptFormatter.history_turns(history, 10)
    assert len(turns) == 10
    assert turns[0]["text"] == "line 4"


def test_emotion_context_needs_emotion_and_intensity():
    assert PromptFormatter.emotion_context("joy", 0.5) == "The user is currently showing joy with intensity 0.50."
    assert PromptFormatter.emotion_context("joy", 0.0) == ""
    assert PromptFormatter.emotion_context(None, 0.5) == ""


def test_generate_sends_scenario_prompt_and_history(coffee_shop):
    llm = MockLLMClient(["  Oh, I love that book!  "])
    engine = ReplyEngine(llm)
    history = _history((Speaker.AI, "Hi there!"), (Speaker.USER, "It's The Midnight Library"))

    reply = engine.generate(history, coffee_shop, "joy", 0.7)

    assert reply == "Oh, I love that book!"
    request = llm.request_history[0]
    assert coffee_shop.title in request["system_instruction"]
    assert "joy with intensity 0.70" in request["system_instruction"]
    assert request["temperature"] == 0.8
    assert request["turns"][-1] == {"role": "user", "text": "It's The Midnight Library"}


def test_empty_reply_falls_back(coffee_shop):
    engine = ReplyEngine(MockLLMClient([""]))
    assert engine.generate(_history((Speaker.USER, "Hi")), coffee_shop) == FALLBACK_REPLY


def test_model_failure_raises_generation_error(coffee_shop):
    engine = ReplyEngine(MockLLMClient(fail_with=RuntimeError("quota")))
    with pytest.raises(GenerationError):
        engine.generate(_history((Speaker.USER, "Hi")), coffee_shop)


def test_feedback_never_raises():
    engine = ReplyEngine(MockLLMClient(fail_with=RuntimeError("offline")))
    assert engine.generate_feedback(_history((Speaker.USER, "Hi")), [], 40) == FALLBACK_FEEDBACK


def test_feedback_uses_coach_prompt():
    llm = MockLLMClient(["Nice follow-up questions!"])
    feedback = ReplyEngine(llm).generate_feedback(_history((Speaker.USER, "Hi")), [], 64)
    assert feedback == "Nice follow-up questions!"
    request = llm.request_history[0]
    assert request["system_instruction"] == PracticePrompts.coach_system_prompt()
    assert "Score: 64/100" in request["turns"][0]["text"]
    assert "No emotion data available" in request["turns"][0]["text"]
