"""Database package."""

from .circuit_log import DatabaseCircuitLogger
from .db import configure_engine, get_session, init_db
from .models import CircuitLog, ExerciseSetLog, RoundLog

__all__ = [
    "DatabaseCircuitLogger",
    "configure_engine",
    "get_session",
    "init_db",
    "CircuitLog",
    "ExerciseSetLog",
    "RoundLog",
]
