"""Writes finished circuit sessions to the database.

:class:`DatabaseCircuitLogger` is the log sink handed to
:class:`~repclock.circuit.progression.RoundProgressionController`.
Only rounds the athlete closed (completed or skipped) are stored; the
open round at completion time is summarized by the score alone.
"""

from __future__ import annotations

import logging

from ..circuit.models import CircuitRound, CircuitSessionData
from ..circuit.scoring import CircuitMetrics
from .db import get_session
from .models import CircuitLog, ExerciseSetLog, RoundLog

logger = logging.getLogger(__name__)


class DatabaseCircuitLogger:
    """Persists a circuit session, its rounds, and every exercise set."""

    def log_circuit(self, session: CircuitSessionData, metrics: CircuitMetrics) -> int:
        """Store *session* in one transaction; returns the new log id."""
        log = CircuitLog(
            block_id=session.block_id,
            block_type=session.block_type.value,
            block_name=session.block_name or None,
            rounds_completed=metrics.rounds_completed,
            target_rounds=session.target_rounds,
            time_cap_minutes=session.time_cap_minutes,
            actual_time_minutes=metrics.total_time_minutes,
            total_duration_seconds=session.timer.current_time,
            total_reps=metrics.total_reps,
            score=metrics.score,
            completed=session.is_completed,
            notes=session.notes or None,
            started_at=session.started_at,
            completed_at=session.completed_at,
        )
        log.rounds = [
            _round_log(r) for r in session.rounds if r.is_completed or r.is_skipped
        ]

        with get_session() as db:
            db.add(log)
            db.flush()
            log_id = log.id

        logger.info("circuit logged: id=%s block=%s rounds=%s score=%s",
                    log_id, session.block_id, len(log.rounds), metrics.score)
        return log_id

    def history(self, block_id: int | None = None, limit: int = 20) -> list[CircuitLog]:
        """Most recent circuit logs first, optionally for one block."""
        with get_session() as db:
            query = db.query(CircuitLog)
            if block_id is not None:
                query = query.filter(CircuitLog.block_id == block_id)
            return (
                query.order_by(CircuitLog.logged_at.desc(), CircuitLog.id.desc())
                .limit(limit)
                .all()
            )


def _round_log(round_: CircuitRound) -> RoundLog:
    return RoundLog(
        round_number=round_.round_number,
        round_time_seconds=round_.round_time_seconds,
        completed=round_.is_completed,
        skipped=round_.is_skipped,
        notes=round_.notes or None,
        completed_at=round_.completed_at,
        sets=[
            ExerciseSetLog(
                exercise_id=ex.exercise_id,
                plan_day_exercise_id=ex.plan_day_exercise_id,
                set_number=round_.round_number,
                target_reps=ex.target_reps,
                actual_reps=ex.actual_reps,
                weight=ex.weight,
                completed=ex.completed,
                skipped=ex.skipped,
                notes=ex.notes or None,
            )
            for ex in round_.exercises
        ],
    )
