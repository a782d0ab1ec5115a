"""Shared pytest fixtures."""

from __future__ import annotations

import random

import pytest

from bot_mood.driver.activity import ActivityTracker
from bot_mood.driver.clock import ManualClock
from bot_mood.driver.service import MoodDriver
from bot_mood.engine.emotion import EmotionEngine
from bot_mood.engine.matrix import TransitionMatrix
from bot_mood.models import EngineContext, State


class FixedRandom(random.Random):
    """Random generator whose ``random()`` always returns *value*."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_rng() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def neutral_ctx() -> EngineContext:
    return EngineContext(activity_level=0.5, recently_interacted=False, is_daytime=True)


@pytest.fixture
def engine(rng: random.Random) -> EmotionEngine:
    return EmotionEngine(rng=rng)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=0.0, hour=12.0)


@pytest.fixture
def tracker() -> ActivityTracker:
    return ActivityTracker()


@pytest.fixture
def driver(engine: EmotionEngine, tracker: ActivityTracker, clock: ManualClock) -> MoodDriver:
    return MoodDriver(engine, tracker, clock=clock, hour_of_day=clock.hour)


@pytest.fixture
def ping_pong_matrices() -> dict[State, TransitionMatrix]:
    """Rows that always leave the current state (Idle <-> Curious)."""
    return {
        State.IDLE: TransitionMatrix(curious=1.0),
        State.CURIOUS: TransitionMatrix(idle=1.0),
    }
