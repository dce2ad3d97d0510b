"""Circuit package."""

from .models import (
    BlockExercise,
    CircuitBlock,
    CircuitExerciseLog,
    CircuitRound,
    CircuitSessionData,
)
from .progression import RoundProgressionController
from .scoring import CircuitMetrics, calculate_circuit_score, calculate_metrics

__all__ = [
    "BlockExercise",
    "CircuitBlock",
    "CircuitExerciseLog",
    "CircuitRound",
    "CircuitSessionData",
    "RoundProgressionController",
    "CircuitMetrics",
    "calculate_circuit_score",
    "calculate_metrics",
]
