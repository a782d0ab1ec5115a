"""Emotion engine — transition matrices and the biased decision procedure.

Architecture
------------
1. **Transition matrix** (`matrix.py`)
   - One row of next-state weights per source state
   - Clamp-after-mutate setters, explicit normalisation
   - Fixed-order cumulative sampling

2. **Emotion engine** (`emotion.py`)
   - Tuned prior rows, copied fresh for every decision
   - Additive context biases (interaction, night, activity)
   - Confidence-driven persistence and exponential confidence smoothing
"""

from bot_mood.engine.emotion import EmotionEngine, apply_context_bias, default_base_matrices
from bot_mood.engine.matrix import TransitionMatrix

__all__ = [
    "EmotionEngine",
    "TransitionMatrix",
    "apply_context_bias",
    "default_base_matrices",
]
