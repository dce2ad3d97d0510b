"""Circuit metrics, scores and the small bits of text the UI shows.

Scores by format
----------------
amrap     ``"5+12"``: full rounds plus reps logged in the unfinished round
for_time  ``"12:34"``: time to completion
emom      ``"8/10"``: minutes completed out of the target
tabata    ``"142 reps"``: total reps across every interval
circuit   ``"4 rounds"``
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..timer.circuit_timer import BlockType, TABATA_INTERVALS
from .models import CircuitSessionData

CIRCUIT_BLOCK_TYPES = tuple(t.value for t in BlockType)
TRADITIONAL_BLOCK_TYPES = ("traditional", "superset", "warmup", "cooldown", "flow")


def is_circuit_block(block_type: str | None) -> bool:
    """True when the block logs rounds rather than sets."""
    return bool(block_type) and block_type in CIRCUIT_BLOCK_TYPES


# ── metrics ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RoundBreakdown:
    round_number: int
    total_reps: int
    time_seconds: int
    completed_exercises: int


@dataclass(frozen=True)
class CircuitMetrics:
    rounds_completed: int
    total_reps: int
    total_time_minutes: float
    score: str
    average_round_time: float | None = None
    round_breakdown: tuple[RoundBreakdown, ...] = field(default_factory=tuple)


def calculate_metrics(session: CircuitSessionData) -> CircuitMetrics:
    completed = session.completed_rounds
    total_reps = sum(r.total_reps for r in session.rounds)
    total_minutes = session.timer.current_time / 60

    breakdown = tuple(
        RoundBreakdown(
            round_number=r.round_number,
            total_reps=r.total_reps,
            time_seconds=r.round_time_seconds,
            completed_exercises=r.completed_exercises,
        )
        for r in completed
    )
    average = (
        sum(b.time_seconds for b in breakdown) / len(breakdown)
        if breakdown else None
    )

    return CircuitMetrics(
        rounds_completed=len(completed),
        total_reps=total_reps,
        total_time_minutes=total_minutes,
        score=calculate_circuit_score(
            session.block_type,
            rounds_completed=len(completed),
            total_reps=total_reps,
            time_minutes=total_minutes,
            target_rounds=session.target_rounds,
            partial_reps=_partial_round_reps(session),
        ),
        average_round_time=average,
        round_breakdown=breakdown,
    )


def _partial_round_reps(session: CircuitSessionData) -> int:
    """Reps ticked off in the round still in progress."""
    current = session.round_at(session.current_round)
    if current is None or current.is_completed:
        return 0
    return sum(ex.actual_reps for ex in current.exercises if ex.completed)


# ── score ─────────────────────────────────────────────────────────────────


def calculate_circuit_score(
    block_type: BlockType | str,
    *,
    rounds_completed: int,
    total_reps: int,
    time_minutes: float,
    target_rounds: int | None = None,
    partial_reps: int = 0,
) -> str:
    kind = BlockType.parse(block_type)

    if kind is BlockType.AMRAP:
        return f"{rounds_completed}+{partial_reps}" if partial_reps > 0 else str(rounds_completed)

    if kind is BlockType.FOR_TIME:
        total_seconds = round(time_minutes * 60)
        minutes, seconds = divmod(total_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    if kind is BlockType.EMOM:
        return f"{rounds_completed}/{target_rounds or rounds_completed}"

    if kind is BlockType.TABATA:
        return f"{total_reps} reps"

    return f"{rounds_completed} rounds"


# ── UI text ───────────────────────────────────────────────────────────────


def round_complete_button_text(
    block_type: BlockType | str,
    current_round: int,
    total_rounds: int | None = None,
) -> str | None:
    """Label for the "complete round" button; ``None`` hides it (EMOM)."""
    kind = BlockType.parse(block_type)

    if kind is BlockType.AMRAP:
        return "Complete Round"
    if kind is BlockType.EMOM:
        return None
    if kind is BlockType.FOR_TIME:
        if total_rounds and current_round >= total_rounds:
            return "Finish Workout"
        return "Complete Round"
    if kind is BlockType.TABATA:
        return "Complete Tabata" if current_round >= TABATA_INTERVALS else "Complete Interval"
    if total_rounds and current_round > total_rounds:
        return "Complete Additional Round"
    return "Complete Round"


def circuit_instruction_text(
    block_type: BlockType | str,
    time_cap_minutes: int | None = None,
    rounds: int | None = None,
) -> str:
    kind = BlockType.parse(block_type)

    if kind is BlockType.AMRAP:
        cap = f" in {time_cap_minutes} minutes" if time_cap_minutes else ""
        return (f"Complete as many rounds as possible{cap}. "
                "Log your reps for each exercise in each round.")
    if kind is BlockType.EMOM:
        span = f" for {rounds} minutes" if rounds else ""
        return (f"Every minute on the minute{span}, complete the prescribed reps. "
                "Log actual reps completed each minute.")
    if kind is BlockType.FOR_TIME:
        what = f"{rounds} rounds" if rounds else "all rounds"
        return f"Complete {what} as fast as possible. Log your reps for each round."
    if kind is BlockType.TABATA:
        return ("Complete 8 rounds of 20 seconds work, 10 seconds rest. "
                "Log reps completed in each work interval.")
    what = f"{rounds} rounds" if rounds else "all rounds"
    return (f"Complete {what} of the circuit. "
            "Log your performance for each exercise in each round.")
