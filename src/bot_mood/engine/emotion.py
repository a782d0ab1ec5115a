"""Emotion engine — context-biased, confidence-weighted state transitions.

Decision pipeline
-----------------
1. Copy the prior (base) matrix for the current state.
2. Add context biases in a fixed order: recent interaction, night time,
   then low *or* high activity.  The additions are plain arithmetic and are
   not clamped between steps, so their order matters.
3. When confidence exceeds :data:`PERSISTENCE_THRESHOLD`, boost the current
   state and shrink the others ("a confident bot is sticky").
4. Normalise.  Negative weights left by the biases survive normalisation
   unless the engine was built with ``clamp_before_normalize=True``.
5. Sample the next state and smooth confidence toward
   :data:`CONFIDENCE_ON_CHANGE` or :data:`CONFIDENCE_ON_STAY`.

The engine does not own the current state or any timers; the caller
(:class:`bot_mood.driver.service.MoodDriver`) does.
"""

from __future__ import annotations

import random
from typing import Literal, Mapping

import structlog

from bot_mood.engine.matrix import TransitionMatrix
from bot_mood.models import EngineContext, EngineSnapshot, State

logger = structlog.get_logger(__name__)

DegenerateFallback = Literal["last_state", "uniform"]

# ── Constants ─────────────────────────────────────────────────

INITIAL_CONFIDENCE = 0.5

# Persistence bias only kicks in above this confidence
PERSISTENCE_THRESHOLD = 0.7
PERSISTENCE_BOOST = 0.4

# Exponential smoothing targets / factors for the confidence update
CONFIDENCE_ON_CHANGE = 0.8
CONFIDENCE_CHANGE_RATE = 0.05
CONFIDENCE_ON_STAY = 0.3
CONFIDENCE_STAY_RATE = 0.1

LOW_ACTIVITY_THRESHOLD = 0.3
HIGH_ACTIVITY_THRESHOLD = 0.7

_INTERACTION_BIAS: dict[State, float] = {
    State.EXCITED: 0.3,
    State.PLAYFUL: 0.2,
    State.IDLE: -0.3,
    State.SLEEPY: -0.2,
}

_NIGHT_BIAS: dict[State, float] = {
    State.SLEEPY: 0.4,
    State.IDLE: 0.1,
    State.EXCITED: -0.3,
    State.PLAYFUL: -0.2,
}

_LOW_ACTIVITY_BIAS: dict[State, float] = {
    State.SLEEPY: 0.5,
    State.IDLE: 0.2,
    State.EXCITED: -0.3,
    State.PLAYFUL: -0.4,
}

_HIGH_ACTIVITY_BIAS: dict[State, float] = {
    State.CURIOUS: 0.2,
    State.PLAYFUL: 0.3,
    State.EXCITED: 0.1,
}


def default_base_matrices() -> dict[State, TransitionMatrix]:
    """Return the tuned prior rows, one per source state (unnormalised)."""
    return {
        # Tends to stay idle or become curious
        State.IDLE: TransitionMatrix(idle=0.3, curious=0.4, excited=0.1, sleepy=0.15, playful=0.05),
        State.CURIOUS: TransitionMatrix(idle=0.2, curious=0.25, excited=0.2, sleepy=0.05, playful=0.3),
        # Winds down to idle
        State.EXCITED: TransitionMatrix(idle=0.4, curious=0.1, excited=0.2, sleepy=0.05, playful=0.25),
        State.SLEEPY: TransitionMatrix(idle=0.25, curious=0.1, excited=0.05, sleepy=0.5, playful=0.1),
        State.PLAYFUL: TransitionMatrix(idle=0.2, curious=0.2, excited=0.3, sleepy=0.05, playful=0.25),
    }


def lerp(current: float, target: float, t: float) -> float:
    """Linear interpolation with *t* clamped into [0, 1]."""
    t = max(0.0, min(1.0, t))
    return current + (target - current) * t


def apply_context_bias(matrix: TransitionMatrix, ctx: EngineContext) -> list[str]:
    """Add the context biases to *matrix* in place, without clamping.

    Returns the names of the rules that fired, in application order.
    """
    rules: list[tuple[str, dict[State, float]]] = []
    if ctx.recently_interacted:
        rules.append(("recent_interaction", _INTERACTION_BIAS))
    if not ctx.is_daytime:
        rules.append(("night_time", _NIGHT_BIAS))
    if ctx.activity_level < LOW_ACTIVITY_THRESHOLD:
        rules.append(("low_activity", _LOW_ACTIVITY_BIAS))
    elif ctx.activity_level > HIGH_ACTIVITY_THRESHOLD:
        rules.append(("high_activity", _HIGH_ACTIVITY_BIAS))

    for _, bias in rules:
        for state, delta in bias.items():
            matrix.adjust(state, delta)
    return [name for name, _ in rules]


class EmotionEngine:
    """Probabilistic state machine over :class:`State`.

    Parameters
    ----------
    base_matrices : Mapping[State, TransitionMatrix] | None
        Prior rows per source state.  Copied and normalised at construction
        and never mutated afterwards.  Must contain at least an ``IDLE`` row,
        which is the fallback for any state without its own row.
    confidence : float
        Starting confidence, clamped into [0, 1].
    rng : random.Random | None
        Shared random generator; pass a seeded instance for reproducibility.
    degenerate_fallback : "last_state" | "uniform"
        What to sample from when every biased weight ends up at zero.
        ``"last_state"`` lets the walk fall through to the last state;
        ``"uniform"`` samples uniformly instead.
    clamp_before_normalize : bool
        Clamp every weight into [0, 1] just before normalising, so the
        returned distribution is a proper one.  Off by default, which keeps
        the tuned behaviour where negative weights shift the sampling walk.
    """

    def __init__(
        self,
        base_matrices: Mapping[State, TransitionMatrix] | None = None,
        confidence: float = INITIAL_CONFIDENCE,
        rng: random.Random | None = None,
        degenerate_fallback: DegenerateFallback = "last_state",
        clamp_before_normalize: bool = False,
    ) -> None:
        source = base_matrices if base_matrices is not None else default_base_matrices()
        if State.IDLE not in source:
            raise ValueError("base_matrices must define a row for State.IDLE")
        if degenerate_fallback not in ("last_state", "uniform"):
            raise ValueError(f"Unknown degenerate_fallback: {degenerate_fallback!r}")

        self._base: dict[State, TransitionMatrix] = {}
        for state, matrix in source.items():
            row = matrix.copy()
            row.normalize()
            self._base[State(state)] = row

        self._confidence = max(0.0, min(1.0, confidence))
        self._rng = rng or random.Random()
        self._degenerate_fallback = degenerate_fallback
        self._clamp_before_normalize = clamp_before_normalize

    # ── Accessors ─────────────────────────────────────────────

    @property
    def confidence(self) -> float:
        return self._confidence

    @property
    def rng(self) -> random.Random:
        return self._rng

    def base_matrix(self, state: State) -> TransitionMatrix:
        """Return a copy of the prior row for *state* (Idle if missing)."""
        return self._base.get(state, self._base[State.IDLE]).copy()

    # ── Decision ──────────────────────────────────────────────

    def distribution(self, current: State, ctx: EngineContext) -> TransitionMatrix:
        """Return the biased, normalised next-state distribution.

        Weights may be negative unless ``clamp_before_normalize`` is set.

        Has no side effects: confidence is read but not updated.
        """
        matrix = self.base_matrix(current)
        apply_context_bias(matrix, ctx)

        if self._confidence > PERSISTENCE_THRESHOLD:
            boost = PERSISTENCE_BOOST / self._confidence
            matrix.set(current, matrix.get(current) + boost)
            matrix.scale_away_from(current, (1.0 - self._confidence) * 0.5)

        if self._clamp_before_normalize:
            matrix.clamp()
        matrix.normalize()

        if matrix.total() <= 0 and self._degenerate_fallback == "uniform":
            logger.warning("emotion_engine.degenerate_matrix", current=current.value)
            return TransitionMatrix.uniform()
        return matrix

    def decide(self, current: State, ctx: EngineContext) -> tuple[State, float]:
        """Pick the next state and update confidence.

        Returns ``(next_state, updated_confidence)``.
        """
        matrix = self.distribution(current, ctx)
        next_state = matrix.sample(self._rng)

        previous_confidence = self._confidence
        if next_state != current:
            self._confidence = lerp(self._confidence, CONFIDENCE_ON_CHANGE, CONFIDENCE_CHANGE_RATE)
        else:
            self._confidence = lerp(self._confidence, CONFIDENCE_ON_STAY, CONFIDENCE_STAY_RATE)

        logger.debug(
            "emotion_engine.decided",
            current=current.value,
            next=next_state.value,
            confidence_before=round(previous_confidence, 4),
            confidence=round(self._confidence, 4),
        )
        return next_state, self._confidence

    # ── Persistence ───────────────────────────────────────────

    def snapshot(self, state: State) -> EngineSnapshot:
        return EngineSnapshot(state=state, confidence=self._confidence)

    def restore(self, snapshot: EngineSnapshot) -> State:
        """Load confidence from *snapshot* and return its state."""
        self._confidence = max(0.0, min(1.0, snapshot.confidence))
        return snapshot.state
