"""Driver sub-package — clock-driven coordination around the engine."""

from bot_mood.driver.activity import ActivityTracker
from bot_mood.driver.clock import ManualClock, is_daytime
from bot_mood.driver.service import MoodDriver

__all__ = ["ActivityTracker", "ManualClock", "MoodDriver", "is_daytime"]
