import pytest

from poise.infrastructure.emotion import HumeBatchClient


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self.payload


class FakeHttp:
    """Stands in for requests.Session: one submit, then queued poll responses."""

    def __init__(self, polls, submit=None):
        self.submit = submit or FakeResponse({"job_id": "job-1"})
        self.polls = list(polls)
        self.posts = []
        self.gets = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.posts.append((url, headers, json))
        return self.submit

    def get(self, url, headers=None, timeout=None):
        self.gets.append(url)
        return self.polls.pop(0)


PREDICTIONS = {
    "results": [{
        "predictions": [
            {"prob": 0.9, "emotions": [{"name": "Joy", "score": 0.72}, {"name": "Calmness", "score": 0.2}]},
            {"emotions": [{"name": "Anxiety", "score": 1.3}]},
            {"emotions": []},
        ]
    }]
}


def test_parse_predictions_takes_top_emotion_lower_cased():
    samples = HumeBatchClient.parse_predictions(PREDICTIONS, timestamp=5)
    assert [(s.emotion, s.intensity) for s in samples] == [("joy", 0.72), ("anxiety", 1.0)]
    assert samples[0].confidence == 0.9
    assert samples[1].confidence == 1.0
    assert all(s.timestamp == 5 for s in samples)


def test_parse_predictions_tolerates_empty_payload():
    assert HumeBatchClient.parse_predictions({}) == []


def test_analyze_audio_polls_until_completed():
    completed = dict(PREDICTIONS, state={"status": "COMPLETED"})
    http = FakeHttp([FakeResponse({"state": "IN_PROGRESS"}), FakeResponse(completed)])
    sleeps = []
    client = HumeBatchClient("key", base_url="https://hume.test/v0/", http=http, sleep=sleeps.append)

    samples = client.analyze_audio(b"RIFF....")

    url, headers, body = http.posts[0]
    assert url == "https://hume.test/v0/batch/jobs"
    assert headers["X-Hume-Api-Key"] == "key"
    assert body["models"] == {"prosody": {}}
    assert body["urls"][0].startswith("data:audio/wav;base64,")
    assert http.gets == ["https://hume.test/v0/batch/jobs/job-1"] * 2
    assert len(sleeps) == 1
    assert [s.emotion for s in samples] == ["joy", "anxiety"]


def test_failed_job_raises():
    http = FakeHttp([FakeResponse({"state": "FAILED"})])
    client = HumeBatchClient("key", http=http, sleep=lambda _: None)
    with pytest.raises(RuntimeError):
        client.analyze_audio(b"audio")


def test_polling_gives_up():
    http = FakeHttp([FakeResponse({"state": "QUEUED"}) for _ in range(3)])
    client = HumeBatchClient("key", poll_attempts=3, http=http, sleep=lambda _: None)
    with pytest.raises(RuntimeError):
        client.analyze_image(b"jpeg")
    assert len(http.gets) == 3


def test_submit_error_raises():
    http = FakeHttp([], submit=FakeResponse({"error": "bad key"}, status_code=401))
    with pytest.raises(RuntimeError):
        HumeBatchClient("key", http=http).analyze_audio(b"audio")


def test_api_key_required():
    with pytest.raises(ValueError):
        HumeBatchClient("")
