"""Shared Pydantic models used across the mood engine and its driver."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Enums ─────────────────────────────────────────────────────


class State(str, Enum):
    """The closed set of behavioural modes a bot can be in.

    Declaration order matters: :meth:`TransitionMatrix.sample` walks the
    weights in exactly this order.
    """

    IDLE = "idle"
    CURIOUS = "curious"
    EXCITED = "excited"
    SLEEPY = "sleepy"
    PLAYFUL = "playful"


# ── Engine input ──────────────────────────────────────────────


class EngineContext(BaseModel):
    """Environmental signals consumed by a single decision.

    Out-of-range activity levels are clamped rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    activity_level: float = Field(
        0.5,
        description="Externally tracked activity level [0=dormant, 1=very active].",
    )
    recently_interacted: bool = Field(
        False,
        description="Whether the user interacted with the bot within the recency window.",
    )
    is_daytime: bool = Field(
        True,
        description="Whether the external clock falls inside the day window.",
    )

    @field_validator("activity_level", mode="before")
    @classmethod
    def _clamp_activity(cls, v: float) -> float:
        return max(0.0, min(1.0, float(v)))


# ── Persistence & events ─────────────────────────────────────


class EngineSnapshot(BaseModel):
    """The slice of mood state an external save system needs to round-trip.

    Transition matrices are never persisted; they are rebuilt from code.
    """

    state: State = State.IDLE
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    activity_level: float | None = Field(None, ge=0.0, le=1.0)
    preferred_play_time: float | None = Field(None, ge=0.0, le=1.0)
    interaction_count: int = Field(0, ge=0)


class StateChange(BaseModel):
    """An accepted state change, fanned out to driver listeners."""

    previous: State
    current: State
    confidence: float
    reason: str = Field(
        "engine",
        description="What caused the change: 'engine', 'interaction' or 'external'.",
    )
    at: float = Field(description="Driver clock reading when the change was accepted.")
    timestamp: datetime = Field(default_factory=datetime.now)
