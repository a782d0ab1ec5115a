"""Activity tracker — slow adaptation of the bot's activity level.

Tracks how often and when the user plays with the bot and derives the
``activity_level`` signal consumed by :class:`EngineContext`.  All values
are smoothed with the same small adaptation speed, so a single burst of
interaction only nudges them.
"""

from __future__ import annotations

import structlog

from bot_mood.engine.emotion import lerp

logger = structlog.get_logger(__name__)

ADAPTATION_SPEED = 0.01
DEFAULT_PREFERRED_PLAY_TIME = 0.5  # midday

# Floor for the idle target so a neglected bot never goes fully dormant
_MIN_IDLE_ACTIVITY = 0.2
_IDLE_PLAY_TIME_WEIGHT = 0.8


class ActivityTracker:
    """Interaction memory and activity level for one bot.

    Parameters
    ----------
    adaptation_speed : float
        Smoothing factor applied to every update.
    preferred_play_time : float
        Remembered time of day (as a day fraction) the user tends to play.
    activity_level : float | None
        Starting activity level; defaults to *preferred_play_time*.
    interaction_count : int
        Total interactions so far (restored from a save).
    """

    def __init__(
        self,
        adaptation_speed: float = ADAPTATION_SPEED,
        preferred_play_time: float = DEFAULT_PREFERRED_PLAY_TIME,
        activity_level: float | None = None,
        interaction_count: int = 0,
    ) -> None:
        self.adaptation_speed = adaptation_speed
        self.preferred_play_time = preferred_play_time
        self.activity_level = preferred_play_time if activity_level is None else activity_level
        self.interaction_count = interaction_count
        self.last_interaction_at: float | None = None

    def record_interaction(self, at: float, day_fraction: float) -> None:
        """Remember an interaction at clock time *at*."""
        self.interaction_count += 1
        self.last_interaction_at = at
        self.preferred_play_time = lerp(self.preferred_play_time, day_fraction, self.adaptation_speed)
        logger.debug(
            "activity_tracker.interaction",
            count=self.interaction_count,
            preferred_play_time=round(self.preferred_play_time, 4),
        )

    def recently_interacted(self, now: float, window: float) -> bool:
        if self.last_interaction_at is None:
            return False
        return (now - self.last_interaction_at) < window

    def update_activity(self, recent: bool) -> float:
        """Smooth the activity level toward its current target and return it."""
        if recent:
            target = 1.0
        else:
            target = max(_MIN_IDLE_ACTIVITY, self.preferred_play_time * _IDLE_PLAY_TIME_WEIGHT)
        self.activity_level = lerp(self.activity_level, target, self.adaptation_speed)
        return self.activity_level
