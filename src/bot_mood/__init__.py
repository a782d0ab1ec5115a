"""Bot mood — a context-biased probabilistic emotion state machine."""

from bot_mood.engine import EmotionEngine, TransitionMatrix
from bot_mood.models import EngineContext, EngineSnapshot, State, StateChange

__all__ = [
    "EmotionEngine",
    "EngineContext",
    "EngineSnapshot",
    "State",
    "StateChange",
    "TransitionMatrix",
]
