import pytest

from poise.config import get_config
from poise.utils import clamp, round_half_up


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.25 * 10) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(53.665, 2) == 53.67


def test_clamp():
    assert clamp(120, 0, 100) == 100
    assert clamp(-3, 0, 100) == 0


def test_config_requires_project_unless_offline(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    with pytest.raises(ValueError):
        get_config()
    assert get_config(require_cloud=False).google_cloud_project == "your-project-id"


def test_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "practice-123")
    monkeypatch.setenv("POISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HUME_API_KEY", "hume-key")
    config = get_config()
    assert config.google_cloud_project == "practice-123"
    assert config.data_dir == str(tmp_path)
    assert config.has_emotion_feed
