"""Round bookkeeping for a circuit block.

The controller owns one :class:`CircuitSessionData`.  It decides whether
completing a round moves the athlete on to a new one and when the block
may be finished.  Persisting the finished session is handed to a log
sink; the controller itself performs no I/O.

Advancement rules
-----------------
amrap     always advances; ``target_rounds`` is a floor, not a ceiling.
for_time  never advances on its own; the block is eligible to finish.
others    advance while ``target_rounds`` is unset or not yet reached;
          past the target, ``start_additional_round`` opens another.

Skipping a round follows the ``others`` rule for every format, so a
skipped for_time round does open the next one while a completed one
does not.

Every operation on an impossible transition (round already completed,
circuit already finished, unknown exercise) is a no-op, so rapid
repeated taps are harmless.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Protocol

from ..timer.circuit_timer import BlockType
from ..timer.state import CIRCUIT_WAKE_TAG, Event, KeepAwake, TimerEvent, TimerState
from .models import CircuitBlock, CircuitRound, CircuitSessionData
from .scoring import CircuitMetrics, calculate_metrics

logger = logging.getLogger(__name__)


class CircuitLogSink(Protocol):
    """Receives a finished session (e.g. a database or API logger)."""

    def log_circuit(self, session: CircuitSessionData, metrics: CircuitMetrics) -> None:
        ...


def reps_mark_completed(reps: int) -> bool:
    """Product rule: an exercise with any reps logged counts as done."""
    return reps > 0


class RoundProgressionController:
    """Owns the round list of one circuit block.

    Events returned
    ---------------
    complete_round(round_number)
        From :meth:`complete_round`, once per round closed.
    complete
        From :meth:`complete_circuit`.
    """

    def __init__(
        self,
        block: CircuitBlock,
        *,
        allow_partial_rounds: bool = True,
        log_sink: CircuitLogSink | None = None,
    ) -> None:
        self._block = block
        self._allow_partial_rounds = allow_partial_rounds
        self._log_sink = log_sink
        self._session = CircuitSessionData.for_block(block)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def block(self) -> CircuitBlock:
        return self._block

    @property
    def session(self) -> CircuitSessionData:
        return self._session

    @property
    def block_type(self) -> BlockType:
        return self._session.block_type

    @property
    def current_round_data(self) -> CircuitRound | None:
        return self._session.round_at(self._session.current_round)

    @property
    def can_complete_round(self) -> bool:
        current = self.current_round_data
        if current is None or current.is_completed or self._session.is_completed:
            return False
        return self._allow_partial_rounds or _has_reps(current)

    @property
    def can_complete_circuit(self) -> bool:
        if self._session.is_completed:
            return False
        if self._session.completed_rounds:
            return True
        current = self.current_round_data
        return current is not None and _has_reps(current)

    @property
    def can_start_additional_round(self) -> bool:
        current = self.current_round_data
        return (
            not self._session.is_completed
            and current is not None
            and current.is_completed
        )

    @property
    def metrics(self) -> CircuitMetrics:
        return calculate_metrics(self._session)

    # ══════════════════════════════════════════════════════════════════
    #  TIMER HAND-OFF
    # ══════════════════════════════════════════════════════════════════

    def update_timer(self, timer: TimerState, now: datetime | None = None) -> None:
        """Adopt the circuit timer's latest state."""
        if timer.is_active and self._session.started_at is None:
            self._session.started_at = now or timer.start_time
            logger.info(
                "circuit session started: block=%s type=%s target_rounds=%s",
                self._session.block_id, self._session.block_type.value,
                self._session.target_rounds,
            )
        self._session.timer = timer

    # ══════════════════════════════════════════════════════════════════
    #  ROUNDS
    # ══════════════════════════════════════════════════════════════════

    def complete_round(
        self,
        now: datetime,
        notes: str = "",
        round_number: int | None = None,
    ) -> list:
        """Close the current round and maybe open the next.

        *round_number* is set by timer-driven completions (Tabata, EMOM):
        if the athlete already closed that round by hand, the current
        round has moved on and the timer's request is ignored.
        """
        session = self._session
        current = self.current_round_data
        if session.is_completed or current is None or current.is_completed:
            logger.debug("complete_round ignored: round %s not open", session.current_round)
            return []
        if round_number is not None and round_number != session.current_round:
            logger.debug("complete_round ignored: timer closed round %s, current is %s",
                         round_number, session.current_round)
            return []
        if not self._allow_partial_rounds and not _has_reps(current):
            logger.debug("complete_round ignored: round %s has no reps", current.round_number)
            return []

        current.is_completed = True
        current.completed_at = now
        current.round_time_seconds = session.timer.current_time
        if notes:
            current.notes = notes

        logger.info("circuit round completed: block=%s round=%s reps=%s",
                    session.block_id, current.round_number, current.total_reps)

        if self._should_advance(session.current_round + 1):
            self._advance()

        return [Event(TimerEvent.COMPLETE_ROUND, current.round_number)]

    def start_additional_round(self) -> bool:
        """Open one more round past the target (explicit override)."""
        if not self.can_start_additional_round:
            return False
        self._advance()
        return True

    def skip_round(self, reason: str = "") -> bool:
        session = self._session
        current = self.current_round_data
        if (
            session.is_completed
            or current is None
            or current.is_completed
            or current.is_skipped
        ):
            return False

        current.is_skipped = True
        if reason:
            current.notes = reason
        logger.info("circuit round skipped: block=%s round=%s reason=%s",
                    session.block_id, current.round_number, reason or "none given")

        next_round = session.current_round + 1
        target = session.target_rounds
        if not target or next_round <= target:
            self._advance()
        return True

    def _should_advance(self, next_round: int) -> bool:
        block_type = self._session.block_type
        if block_type is BlockType.AMRAP:
            return True
        if block_type is BlockType.FOR_TIME:
            return False
        target = self._session.target_rounds
        return not target or next_round <= target

    def _advance(self) -> None:
        session = self._session
        session.current_round += 1
        if session.round_at(session.current_round) is None:
            session.rounds.append(CircuitRound.from_block(session.current_round, self._block))

    # ══════════════════════════════════════════════════════════════════
    #  EXERCISE EDITS
    # ══════════════════════════════════════════════════════════════════

    def update_exercise_reps(self, exercise_id: int, reps: int) -> bool:
        exercise = self._editable_exercise(exercise_id)
        if exercise is None:
            return False
        exercise.actual_reps = max(0, reps)
        exercise.completed = reps_mark_completed(reps)
        return True

    def update_exercise_weight(self, exercise_id: int, weight: float) -> bool:
        exercise = self._editable_exercise(exercise_id)
        if exercise is None:
            return False
        exercise.weight = max(0, weight)
        return True

    def _editable_exercise(self, exercise_id: int):
        current = self.current_round_data
        if self._session.is_completed or current is None or current.is_completed:
            return None
        return current.find_exercise(exercise_id)

    # ══════════════════════════════════════════════════════════════════
    #  CIRCUIT
    # ══════════════════════════════════════════════════════════════════

    def complete_circuit(
        self,
        now: datetime,
        notes: str = "",
        *,
        timer_finished: bool = False,
    ) -> list:
        """Finish the block and hand it to the log sink.

        *timer_finished* is set when the block timer ran out (AMRAP cap,
        last EMOM minute, last Tabata interval): the session ends even if
        nothing was logged, e.g. a block of timed holds.
        """
        if self._session.is_completed:
            logger.debug("complete_circuit ignored: block %s already finished",
                         self._session.block_id)
            return []
        if not timer_finished and not self.can_complete_circuit:
            logger.debug("complete_circuit ignored for block %s", self._session.block_id)
            return []

        session = self._session
        effects: list = []
        if session.timer.is_running:
            effects.append(KeepAwake(CIRCUIT_WAKE_TAG, False))
        session.timer = replace(session.timer, is_active=False, is_paused=False, paused_at=None)
        session.is_completed = True
        session.completed_at = now
        if notes:
            session.notes = notes

        metrics = self.metrics
        logger.info(
            "circuit session completed: block=%s type=%s rounds=%s reps=%s score=%s",
            session.block_id, session.block_type.value, metrics.rounds_completed,
            metrics.total_reps, metrics.score,
        )

        if self._log_sink is not None:
            try:
                self._log_sink.log_circuit(session, metrics)
            except Exception:
                logger.warning("circuit log hand-off failed for block %s",
                               session.block_id, exc_info=True)

        effects.append(Event(TimerEvent.COMPLETE))
        return effects

    def reset_session(self) -> None:
        self._session = CircuitSessionData.for_block(self._block)
        logger.info("circuit session reset: block=%s", self._block.id)


def _has_reps(round_: CircuitRound) -> bool:
    return any(ex.actual_reps > 0 for ex in round_.exercises)
