"""Transition matrix — one row of next-state weights for a single source state.

A :class:`TransitionMatrix` maps every :class:`State` to a weight.  The
mutators :meth:`set` and :meth:`scale_away_from` always clamp all weights
into ``[0, 1]`` afterwards but never renormalise; callers must call
:meth:`normalize` before sampling.  :meth:`adjust` is plain arithmetic with
no clamping, so intermediate values may go negative or above one.
"""

from __future__ import annotations

import random
from typing import Iterator, Mapping

from bot_mood.models import State

# Sampling walks the weights in enum declaration order.
_ORDER: tuple[State, ...] = tuple(State)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class TransitionMatrix:
    """Weights over destination states for one source state."""

    __slots__ = ("_weights",)

    def __init__(self, weights: Mapping[State, float] | None = None, **kwargs: float) -> None:
        self._weights: dict[State, float] = {s: 0.0 for s in _ORDER}
        for state, value in (weights or {}).items():
            self._weights[State(state)] = float(value)
        for name, value in kwargs.items():
            self._weights[State(name)] = float(value)

    # ── Construction helpers ──────────────────────────────────

    @classmethod
    def uniform(cls) -> TransitionMatrix:
        share = 1.0 / len(_ORDER)
        return cls({s: share for s in _ORDER})

    def copy(self) -> TransitionMatrix:
        return TransitionMatrix(self._weights)

    # ── Read access ───────────────────────────────────────────

    def get(self, state: State) -> float:
        """Return the weight for *state* (0 for anything unknown)."""
        return self._weights.get(state, 0.0)

    def total(self) -> float:
        return sum(self._weights.values())

    def as_dict(self) -> dict[State, float]:
        return dict(self._weights)

    def __iter__(self) -> Iterator[tuple[State, float]]:
        return iter(self._weights.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransitionMatrix):
            return NotImplemented
        return self._weights == other._weights

    def __repr__(self) -> str:
        body = ", ".join(f"{s.value}={w:.4f}" for s, w in self._weights.items())
        return f"TransitionMatrix({body})"

    # ── Mutators ──────────────────────────────────────────────

    def adjust(self, state: State, delta: float) -> None:
        """Add *delta* to a weight without clamping."""
        self._weights[state] += delta

    def set(self, state: State, value: float) -> None:
        """Overwrite one weight, then clamp every weight into [0, 1]."""
        self._weights[state] = float(value)
        self.clamp()

    def scale_away_from(self, state: State, scale: float) -> None:
        """Shrink every weight except *state* by ``(1 - scale)``, then clamp.

        Concentrates probability mass on *state* without growing it.
        """
        factor = 1.0 - _clamp01(scale)
        for other in _ORDER:
            if other is not state:
                self._weights[other] *= factor
        self.clamp()

    def clamp(self) -> None:
        for state in _ORDER:
            self._weights[state] = _clamp01(self._weights[state])

    def normalize(self) -> None:
        """Divide every weight by the total; no-op when the total is <= 0."""
        total = self.total()
        if total <= 0:
            return
        for state in _ORDER:
            self._weights[state] /= total

    # ── Sampling ──────────────────────────────────────────────

    def sample(self, rng: random.Random | None = None) -> State:
        """Draw a destination state.

        A uniform draw in ``[0, 1)`` is walked through the weights in
        declaration order.  If the weights are exhausted without a match
        (unnormalised or zero-sum rows) the last state wins.
        """
        draw = (rng or random).random()
        for state in _ORDER:
            weight = self._weights[state]
            if draw < weight:
                return state
            draw -= weight
        return _ORDER[-1]
