"""Mood driver — the tick-driven coordinator around :class:`EmotionEngine`.

Architecture
~~~~~~~~~~~~
The ``MoodDriver`` owns the current :class:`State`, a per-state dwell
timer and the state-change cooldown.  It is polled at an externally
controlled cadence via :meth:`MoodDriver.tick`; it never schedules itself.

On every tick whose dwell timer has expired it:

1. Refreshes the :class:`ActivityTracker` activity level.
2. Skips the decision entirely if the cooldown since the last accepted
   change has not elapsed (engine confidence is left untouched).
3. Otherwise builds an :class:`EngineContext` and asks the engine for the
   next state, accepting it when it differs.
4. Re-arms the dwell timer for the (possibly new) state.

Explicit interactions bypass the engine and force ``EXCITED``.

Integration::

    driver = MoodDriver(EmotionEngine(rng=rng), ActivityTracker(), rng=rng)
    driver.add_listener(on_change)
    while running:
        driver.tick()
"""

from __future__ import annotations

import random
import time
from typing import Callable

import structlog

from bot_mood.driver.activity import ActivityTracker
from bot_mood.driver.clock import DAY_END_HOUR, DAY_START_HOUR, day_fraction, is_daytime, local_hour
from bot_mood.engine.emotion import EmotionEngine
from bot_mood.models import EngineContext, EngineSnapshot, State, StateChange

logger = structlog.get_logger(__name__)

BASE_STATE_DURATION = 5.0
DWELL_JITTER = 0.2
STATE_CHANGE_COOLDOWN = 2.0
INTERACTION_WINDOW = 30.0

# Dwell-time multipliers; states not listed use 1.0
_DWELL_MULTIPLIERS: dict[State, float] = {
    State.IDLE: 0.5,
    State.EXCITED: 0.3,
    State.SLEEPY: 2.0,
}

Listener = Callable[[StateChange], None]


class MoodDriver:
    """Drive an :class:`EmotionEngine` from a clock.

    Parameters
    ----------
    engine : EmotionEngine
        The decision engine; its confidence persists across ticks.
    tracker : ActivityTracker
        Source of the activity level and interaction recency.
    clock : Callable[[], float]
        Monotonic seconds source (``time.monotonic`` by default).
    hour_of_day : Callable[[], float]
        Fractional hour of day for the day/night signal.
    rng : random.Random | None
        Generator for dwell jitter; defaults to the engine's generator so a
        single seed reproduces a whole run.
    """

    def __init__(
        self,
        engine: EmotionEngine,
        tracker: ActivityTracker,
        *,
        clock: Callable[[], float] = time.monotonic,
        hour_of_day: Callable[[], float] = local_hour,
        rng: random.Random | None = None,
        initial_state: State = State.IDLE,
        base_state_duration: float = BASE_STATE_DURATION,
        dwell_jitter: float = DWELL_JITTER,
        cooldown: float = STATE_CHANGE_COOLDOWN,
        interaction_window: float = INTERACTION_WINDOW,
        day_start_hour: float = DAY_START_HOUR,
        day_end_hour: float = DAY_END_HOUR,
    ) -> None:
        if day_start_hour >= day_end_hour:
            raise ValueError("day_start_hour must be before day_end_hour")
        self._engine = engine
        self._tracker = tracker
        self._clock = clock
        self._hour_of_day = hour_of_day
        self._rng = rng or engine.rng
        self._state = initial_state

        self._base_duration = base_state_duration
        self._jitter = max(0.0, min(1.0, dwell_jitter))
        self._cooldown = cooldown
        self._interaction_window = interaction_window
        self._day_start = day_start_hour
        self._day_end = day_end_hour

        self._listeners: list[Listener] = []
        self._last_change_at: float | None = None
        self._dwell_deadline = 0.0
        self._reset_dwell_timer(self._clock())

    # ── Accessors ─────────────────────────────────────────────

    @property
    def state(self) -> State:
        return self._state

    @property
    def engine(self) -> EmotionEngine:
        return self._engine

    @property
    def tracker(self) -> ActivityTracker:
        return self._tracker

    @property
    def dwell_deadline(self) -> float:
        return self._dwell_deadline

    def add_listener(self, fn: Listener) -> None:
        """Register a callback that receives every accepted :class:`StateChange`."""
        self._listeners.append(fn)

    def dwell_duration(self, state: State) -> float:
        """Draw a jittered dwell duration for *state*."""
        multiplier = _DWELL_MULTIPLIERS.get(state, 1.0)
        jitter = self._rng.uniform(1.0 - self._jitter, 1.0 + self._jitter)
        return self._base_duration * multiplier * jitter

    def in_cooldown(self, now: float | None = None) -> bool:
        if self._last_change_at is None:
            return False
        now = self._clock() if now is None else now
        return (now - self._last_change_at) < self._cooldown

    def build_context(self, now: float | None = None) -> EngineContext:
        now = self._clock() if now is None else now
        return EngineContext(
            activity_level=self._tracker.activity_level,
            recently_interacted=self._tracker.recently_interacted(now, self._interaction_window),
            is_daytime=is_daytime(self._hour_of_day(), self._day_start, self._day_end),
        )

    # ── Tick loop ─────────────────────────────────────────────

    def tick(self) -> StateChange | None:
        """Advance the driver; return the accepted change, if any."""
        now = self._clock()
        if now < self._dwell_deadline:
            return None

        change: StateChange | None = None
        recent = self._tracker.recently_interacted(now, self._interaction_window)
        self._tracker.update_activity(recent)

        if self.in_cooldown(now):
            logger.debug(
                "mood_driver.cooldown_suppressed",
                state=self._state.value,
                since_last_change=round(now - self._last_change_at, 3),
            )
        else:
            next_state, _ = self._engine.decide(self._state, self.build_context(now))
            if next_state != self._state:
                change = self.set_state(next_state, reason="engine")

        if change is None:
            self._reset_dwell_timer(now)
        return change

    def record_interaction(self) -> StateChange | None:
        """Handle an explicit user interaction: force ``EXCITED``."""
        now = self._clock()
        self._tracker.record_interaction(now, day_fraction(self._hour_of_day()))
        change = self.set_state(State.EXCITED, reason="interaction")
        if change is None:
            self._reset_dwell_timer(now)
        return change

    def set_state(self, state: State, reason: str = "external") -> StateChange | None:
        """Switch to *state*; a no-op when already there."""
        if state == self._state:
            return None

        now = self._clock()
        change = StateChange(
            previous=self._state,
            current=state,
            confidence=self._engine.confidence,
            reason=reason,
            at=now,
        )
        self._state = state
        self._last_change_at = now
        self._reset_dwell_timer(now)

        logger.info(
            "mood_driver.state_changed",
            previous=change.previous.value,
            current=change.current.value,
            reason=reason,
            confidence=round(change.confidence, 4),
        )
        for listener in self._listeners:
            try:
                listener(change)
            except Exception as exc:
                logger.error(
                    "mood_driver.listener_error",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(exc),
                )
        return change

    # ── Persistence ───────────────────────────────────────────

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            state=self._state,
            confidence=self._engine.confidence,
            activity_level=self._tracker.activity_level,
            preferred_play_time=self._tracker.preferred_play_time,
            interaction_count=self._tracker.interaction_count,
        )

    def restore(self, snapshot: EngineSnapshot) -> None:
        """Load state, confidence and tracker counters from a save."""
        self._state = self._engine.restore(snapshot)
        if snapshot.activity_level is not None:
            self._tracker.activity_level = snapshot.activity_level
        if snapshot.preferred_play_time is not None:
            self._tracker.preferred_play_time = snapshot.preferred_play_time
        self._tracker.interaction_count = snapshot.interaction_count
        self._reset_dwell_timer(self._clock())
        logger.info("mood_driver.restored", state=self._state.value, confidence=snapshot.confidence)

    # ── Internals ─────────────────────────────────────────────

    def _reset_dwell_timer(self, now: float) -> None:
        self._dwell_deadline = now + self.dwell_duration(self._state)
