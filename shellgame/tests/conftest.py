"""
Pytest fixtures for shell game tests.
"""

import random

import pytest

from ..config import GameConfig
from ..session import AudioService, GameSession, ManualScheduler


class ScriptedRandom:
    """RNG that replays a fixed list of integers, then fails."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randrange(self, stop):
        self.calls += 1
        if not self.values:
            raise IndexError("scripted values exhausted")
        return self.values.pop(0)


class RecordingAudio(AudioService):
    """Records every trigger name in call order."""

    def __init__(self):
        self.calls = []

    def on_shuffle_step(self):
        self.calls.append("shuffle_step")

    def on_tap(self):
        self.calls.append("tap")

    def on_win(self):
        self.calls.append("win")

    def on_lose(self):
        self.calls.append("lose")

    def start_ambience(self):
        self.calls.append("ambience")

    def stop_all(self):
        self.calls.append("stop_all")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture
def no_shuffle_config() -> GameConfig:
    """Reference timings, but the coin is never moved."""
    return GameConfig(shuffle_steps=0)


@pytest.fixture
def make_session(scheduler, audio):
    """Factory for started sessions sharing the test scheduler and audio."""

    def _make(config=None, rng=None, start=True):
        session = GameSession(
            config=config or GameConfig(),
            rng=rng if rng is not None else random.Random(1234),
            scheduler=scheduler,
            audio=audio,
            session_id="test-session",
        )
        if start:
            session.start()
        return session

    return _make


def play_to_guessing(session: GameSession, scheduler: ManualScheduler) -> None:
    """Confirm the bet and run the coin display and shuffle."""
    assert session.confirm_bet()
    scheduler.run_until_idle()
