import pytest

from poise.infrastructure.llm import client as client_module
from poise.infrastructure.llm import VertexRestClient


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self.payload


@pytest.fixture
def vertex():
    client = VertexRestClient(project="practice-123", location="us-central1", model="gemini-test")
    client._token = "token"
    return client


def test_generate_chat_sends_turns_and_system_instruction(vertex, monkeypatch):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append((url, headers, json))
        return FakeResponse({"candidates": [{"content": {"parts": [{"text": "Hello!"}]}}]})

    monkeypatch.setattr(client_module.requests, "post", fake_post)
    text = vertex.generate_chat(
        [{"role": "user", "text": "Hi"}, {"role": "model", "text": "Hey"}, {"role": "user", "text": "Sup"}],
        system_instruction="Be a barista.",
        temperature=0.8,
        max_output_tokens=150,
    )

    assert text == "Hello!"
    url, headers, body = calls[0]
    assert url.endswith("projects/practice-123/locations/us-central1/publishers/google/models/gemini-test:generateContent")
    assert headers["Authorization"] == "Bearer token"
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["systemInstruction"] == {"parts": [{"text": "Be a barista."}]}
    assert body["generationConfig"] == {"temperature": 0.8, "maxOutputTokens": 150}


def test_generate_content_is_a_single_user_turn(vertex, monkeypatch):
    bodies = []

    def fake_post(url, headers=None, json=None, timeout=None):
        bodies.append(json)
        return FakeResponse({"text": "ok"})

    monkeypatch.setattr(client_module.requests, "post", fake_post)
    assert vertex.generate_content("Summarize this") == "ok"
    assert bodies[0]["contents"] == [{"role": "user", "parts": [{"text": "Summarize this"}]}]
    assert "systemInstruction" not in bodies[0]


def test_http_error_raises(vertex, monkeypatch):
    monkeypatch.setattr(client_module.requests, "post",
                        lambda *a, **k: FakeResponse({"error": "quota"}, status_code=429))
    with pytest.raises(RuntimeError):
        vertex.generate_content("Hi")


def test_blocked_response_raises(vertex, monkeypatch):
    monkeypatch.setattr(client_module.requests, "post",
                        lambda *a, **k: FakeResponse({"candidates": [{"finishReason": "SAFETY"}]}))
    with pytest.raises(ValueError):
        vertex.generate_content("Hi")
