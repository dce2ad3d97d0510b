"""Circuit session data: rounds, per-exercise logs, and the block template.

These are plain mutable dataclasses owned by
:class:`~repclock.circuit.progression.RoundProgressionController`; the
timer state embedded in a session is the immutable
:class:`~repclock.timer.state.TimerState` and is swapped wholesale on
every tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..timer.circuit_timer import BlockType, TABATA_INTERVALS
from ..timer.state import TimerState


# ── plan template (owned by the workout plan, read-only here) ─────────────


@dataclass(frozen=True)
class BlockExercise:
    """One exercise slot in a block as prescribed by the plan."""

    id: int                        # plan-day exercise id
    exercise_id: int | None = None
    reps: int | None = None
    weight: float | None = None
    duration: int | None = None    # seconds, for timed work


@dataclass(frozen=True)
class CircuitBlock:
    id: int
    block_type: BlockType | str | None = BlockType.CIRCUIT
    name: str = ""
    exercises: tuple[BlockExercise, ...] = ()
    rounds: int | None = None
    time_cap_minutes: int | None = None

    @property
    def type(self) -> BlockType:
        return BlockType.parse(self.block_type)

    @property
    def target_rounds(self) -> int | None:
        """EMOM counts minutes from the cap; Tabata is always 8."""
        kind = self.type
        if kind is BlockType.EMOM and self.time_cap_minutes:
            return self.time_cap_minutes
        if kind is BlockType.TABATA:
            return TABATA_INTERVALS
        return self.rounds


# ── session data ──────────────────────────────────────────────────────────


@dataclass
class CircuitExerciseLog:
    exercise_id: int
    plan_day_exercise_id: int
    target_reps: int = 0
    actual_reps: int = 0
    weight: float | None = None
    completed: bool = False
    notes: str = ""
    skipped: bool = False

    @classmethod
    def from_template(cls, exercise: BlockExercise) -> "CircuitExerciseLog":
        reps = exercise.reps or 0
        return cls(
            exercise_id=exercise.exercise_id or exercise.id,
            plan_day_exercise_id=exercise.id,
            target_reps=reps,
            actual_reps=reps,
            weight=exercise.weight,
        )


@dataclass
class CircuitRound:
    round_number: int
    exercises: list[CircuitExerciseLog] = field(default_factory=list)
    is_completed: bool = False
    completed_at: datetime | None = None
    round_time_seconds: int = 0
    notes: str = ""
    is_skipped: bool = False

    @classmethod
    def from_block(cls, round_number: int, block: CircuitBlock) -> "CircuitRound":
        """A fresh round cloned from the block template, progress zeroed."""
        return cls(
            round_number=round_number,
            exercises=[CircuitExerciseLog.from_template(ex) for ex in block.exercises],
        )

    @property
    def total_reps(self) -> int:
        return sum(ex.actual_reps for ex in self.exercises)

    @property
    def completed_exercises(self) -> int:
        return sum(1 for ex in self.exercises if ex.completed)

    def find_exercise(self, exercise_id: int) -> CircuitExerciseLog | None:
        for ex in self.exercises:
            if ex.exercise_id == exercise_id:
                return ex
        return None


@dataclass
class CircuitSessionData:
    block_id: int
    block_type: BlockType
    block_name: str = ""
    target_rounds: int | None = None
    time_cap_minutes: int | None = None
    current_round: int = 1
    rounds: list[CircuitRound] = field(default_factory=list)
    timer: TimerState = field(default_factory=TimerState)
    is_completed: bool = False
    started_at: datetime | None = None
    completed_at: datetime | None = None
    notes: str = ""

    @classmethod
    def for_block(cls, block: CircuitBlock) -> "CircuitSessionData":
        """New session on block entry; round 1 is created eagerly."""
        return cls(
            block_id=block.id,
            block_type=block.type,
            block_name=block.name,
            target_rounds=block.target_rounds,
            time_cap_minutes=block.time_cap_minutes,
            rounds=[CircuitRound.from_block(1, block)],
        )

    def round_at(self, round_number: int) -> CircuitRound | None:
        if 1 <= round_number <= len(self.rounds):
            return self.rounds[round_number - 1]
        return None

    @property
    def completed_rounds(self) -> list[CircuitRound]:
        return [r for r in self.rounds if r.is_completed]
