import pytest

from poise.coaching.models import EmotionSample
from poise.coaching.scenario_library import default_catalog


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def sample(emotion: str, intensity: float, timestamp: int = 0) -> EmotionSample:
    return EmotionSample(emotion=emotion, intensity=intensity, confidence=1.0, timestamp=timestamp)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def coffee_shop(catalog):
    return catalog.get_scenario("coffee-shop")
