"""Tests for the mood driver, activity tracker and clock helpers."""

from __future__ import annotations

import random

import pytest

from bot_mood.driver.activity import ActivityTracker
from bot_mood.driver.clock import ManualClock, day_fraction, is_daytime
from bot_mood.driver.service import MoodDriver
from bot_mood.engine.emotion import EmotionEngine
from bot_mood.models import EngineSnapshot, State, StateChange


def _spy_decide(monkeypatch, engine: EmotionEngine, clock: ManualClock) -> list[float]:
    """Record the clock reading of every ``decide`` call."""
    calls: list[float] = []
    original = engine.decide

    def spy(current, ctx):
        calls.append(clock())
        return original(current, ctx)

    monkeypatch.setattr(engine, "decide", spy)
    return calls


# ── Clock helpers ────────────────────────────────────────────


class TestClock:
    @pytest.mark.parametrize(
        ("hour", "expected"),
        [(0, False), (6, False), (6.01, True), (12, True), (21.99, True), (22, False), (23.5, False)],
    )
    def test_is_daytime(self, hour, expected):
        assert is_daytime(hour) is expected

    def test_custom_window(self):
        assert is_daytime(7, start=8, end=20) is False
        assert is_daytime(9, start=8, end=20) is True

    def test_day_fraction(self):
        assert day_fraction(6) == 0.25
        assert day_fraction(30) == 0.25

    def test_manual_clock_advances_hour(self):
        clock = ManualClock(start=10.0, hour=23.5)
        clock.advance(3600)
        assert clock() == 3610.0
        assert clock.hour() == pytest.approx(0.5)

    def test_manual_clock_rejects_negative(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)


# ── Activity tracker ─────────────────────────────────────────


class TestActivityTracker:
    def test_defaults(self, tracker):
        assert tracker.activity_level == 0.5
        assert tracker.interaction_count == 0
        assert tracker.recently_interacted(100.0, 30.0) is False

    def test_record_interaction(self, tracker):
        tracker.record_interaction(at=12.0, day_fraction=0.75)
        assert tracker.interaction_count == 1
        assert tracker.last_interaction_at == 12.0
        assert tracker.preferred_play_time == pytest.approx(0.5025)

    def test_recency_window(self, tracker):
        tracker.record_interaction(at=10.0, day_fraction=0.5)
        assert tracker.recently_interacted(39.9, 30.0) is True
        assert tracker.recently_interacted(40.0, 30.0) is False

    def test_recent_interaction_raises_activity(self, tracker):
        assert tracker.update_activity(True) == pytest.approx(0.505)

    def test_idle_activity_drifts_to_play_time_target(self, tracker):
        # target = max(0.2, 0.5 * 0.8) = 0.4
        assert tracker.update_activity(False) == pytest.approx(0.499)

    def test_idle_activity_floor(self):
        tracker = ActivityTracker(adaptation_speed=1.0, preferred_play_time=0.1)
        assert tracker.update_activity(False) == pytest.approx(0.2)


# ── Driver ───────────────────────────────────────────────────


class TestMoodDriver:
    def test_starts_idle_with_jittered_dwell(self, driver):
        assert driver.state is State.IDLE
        # 5s * 0.5 (idle) * [0.8, 1.2]
        assert 2.0 <= driver.dwell_deadline <= 3.0

    def test_dwell_duration_bounds(self, driver):
        for _ in range(200):
            assert 1.2 <= driver.dwell_duration(State.EXCITED) <= 1.8
            assert 8.0 <= driver.dwell_duration(State.SLEEPY) <= 12.0
            assert 4.0 <= driver.dwell_duration(State.CURIOUS) <= 6.0

    def test_no_decision_before_dwell_expires(self, monkeypatch, driver, engine, clock):
        calls = _spy_decide(monkeypatch, engine, clock)
        clock.advance(1.9)
        assert driver.tick() is None
        assert calls == []

    def test_decides_once_dwell_expires(self, monkeypatch, driver, engine, clock):
        calls = _spy_decide(monkeypatch, engine, clock)
        clock.advance(3.0)
        driver.tick()
        assert calls == [3.0]
        assert driver.dwell_deadline > 3.0

    def test_interaction_forces_excited(self, driver, clock):
        received: list[StateChange] = []
        driver.add_listener(received.append)
        clock.advance(0.5)

        change = driver.record_interaction()

        assert driver.state is State.EXCITED
        assert change is not None and change.reason == "interaction"
        assert change.previous is State.IDLE and change.at == 0.5
        assert received == [change]
        assert driver.tracker.interaction_count == 1
        assert 0.5 + 1.2 <= driver.dwell_deadline <= 0.5 + 1.8

    def test_repeated_interaction_resets_dwell(self, driver, clock):
        driver.record_interaction()
        clock.advance(1.0)
        assert driver.record_interaction() is None
        assert driver.state is State.EXCITED
        assert driver.dwell_deadline >= 1.0 + 1.2
        assert driver.tracker.interaction_count == 2

    def test_interaction_bypasses_engine(self, monkeypatch, driver, engine, clock):
        calls = _spy_decide(monkeypatch, engine, clock)
        driver.record_interaction()
        assert calls == []
        assert engine.confidence == 0.5

    def test_cooldown_suppresses_decision_entirely(self, monkeypatch, driver, engine, clock):
        driver.record_interaction()  # change at t=0, excited dwell <= 1.8s
        calls = _spy_decide(monkeypatch, engine, clock)
        clock.advance(1.9)

        assert driver.tick() is None
        assert calls == []
        assert engine.confidence == 0.5
        assert driver.state is State.EXCITED
        assert driver.dwell_deadline > 1.9

    def test_cooldown_spacing_with_fake_clock(self, monkeypatch, ping_pong_matrices, tracker, clock):
        engine = EmotionEngine(base_matrices=ping_pong_matrices, rng=random.Random(0))
        driver = MoodDriver(
            engine,
            tracker,
            clock=clock,
            hour_of_day=clock.hour,
            base_state_duration=0.5,
            cooldown=2.0,
        )
        calls = _spy_decide(monkeypatch, engine, clock)
        for _ in range(200):
            driver.tick()
            clock.advance(0.1)

        assert len(calls) >= 5
        for earlier, later in zip(calls, calls[1:]):
            assert later - earlier >= 2.0

    def test_context_reflects_interaction_and_night(self, engine, tracker, clock):
        clock.set_hour(23.0)
        driver = MoodDriver(engine, tracker, clock=clock, hour_of_day=clock.hour)
        driver.record_interaction()

        ctx = driver.build_context()
        assert ctx.recently_interacted is True
        assert ctx.is_daytime is False
        assert ctx.activity_level == tracker.activity_level

        clock.advance(31.0)
        assert driver.build_context().recently_interacted is False

    def test_listener_errors_are_isolated(self, driver):
        received: list[StateChange] = []

        def broken(change: StateChange) -> None:
            raise RuntimeError("boom")

        driver.add_listener(broken)
        driver.add_listener(received.append)

        change = driver.set_state(State.PLAYFUL)
        assert change is not None and change.reason == "external"
        assert received == [change]
        assert driver.state is State.PLAYFUL

    @pytest.mark.parametrize(("start", "end"), [(22, 6), (12, 12)])
    def test_reversed_day_window_rejected(self, engine, tracker, clock, start, end):
        with pytest.raises(ValueError):
            MoodDriver(engine, tracker, clock=clock, day_start_hour=start, day_end_hour=end)

    def test_set_same_state_is_noop(self, driver):
        assert driver.set_state(State.IDLE) is None

    def test_seeded_runs_are_reproducible(self):
        def run(seed: int) -> list[tuple[State, State, float]]:
            clock = ManualClock()
            driver = MoodDriver(
                EmotionEngine(rng=random.Random(seed)),
                ActivityTracker(),
                clock=clock,
                hour_of_day=clock.hour,
            )
            seen: list[tuple[State, State, float]] = []
            driver.add_listener(lambda c: seen.append((c.previous, c.current, c.at)))
            for step in range(3_000):
                if step == 1_000:
                    driver.record_interaction()
                driver.tick()
                clock.advance(0.1)
            return seen

        first = run(11)
        assert first
        assert first == run(11)


class TestDriverSnapshot:
    def test_round_trip(self, driver):
        driver.record_interaction()
        payload = driver.snapshot().model_dump_json()

        clock = ManualClock()
        restored = MoodDriver(EmotionEngine(confidence=0.1), ActivityTracker(), clock=clock, hour_of_day=clock.hour)
        restored.restore(EngineSnapshot.model_validate_json(payload))

        assert restored.state is State.EXCITED
        assert restored.engine.confidence == pytest.approx(driver.engine.confidence)
        assert restored.tracker.interaction_count == 1
        assert restored.tracker.activity_level == pytest.approx(driver.tracker.activity_level)
        assert restored.tracker.preferred_play_time == pytest.approx(driver.tracker.preferred_play_time)

    def test_round_trip_keeps_learned_play_time(self, engine, clock):
        tracker = ActivityTracker(preferred_play_time=0.9)
        driver = MoodDriver(engine, tracker, clock=clock, hour_of_day=clock.hour)
        payload = driver.snapshot().model_dump_json()

        restored = MoodDriver(EmotionEngine(), ActivityTracker(), clock=clock, hour_of_day=clock.hour)
        restored.restore(EngineSnapshot.model_validate_json(payload))

        assert restored.tracker.preferred_play_time == pytest.approx(0.9)
        # idle target follows the restored play time: max(0.2, 0.9 * 0.8)
        restored.tracker.adaptation_speed = 1.0
        assert restored.tracker.update_activity(False) == pytest.approx(0.72)

    def test_restore_without_play_time_keeps_current(self, driver):
        driver.tracker.preferred_play_time = 0.3
        driver.restore(EngineSnapshot(state=State.CURIOUS, confidence=0.4))
        assert driver.tracker.preferred_play_time == 0.3
        assert driver.state is State.CURIOUS
