"""Workout and current-exercise elapsed time for a linear workout.

Two count-up values share one pause: ``workout_timer`` runs from the
moment the workout started, ``exercise_timer`` from the moment the
current exercise began.  Start instants are captured once and never
shifted; time spent paused is accumulated separately, so ``tick`` can
be called at any cadence (or after a long suspension) with the same
result.

Transitions
-----------
idle    -> running   (start)
running -> paused    (pause)
paused  -> running   (resume)
any     -> idle      (reset)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .clock import elapsed_seconds, paused_seconds, seconds_before
from .state import KeepAwake, Step, WORKOUT_WAKE_TAG


@dataclass(frozen=True)
class SessionClockState:
    is_active: bool = False
    is_paused: bool = False
    workout_start_time: datetime | None = None
    exercise_start_time: datetime | None = None
    paused_at: datetime | None = None
    workout_paused_time: float = 0
    exercise_paused_time: float = 0
    workout_timer: int = 0
    exercise_timer: int = 0

    @property
    def is_running(self) -> bool:
        return self.is_active and not self.is_paused


def start(
    state: SessionClockState,
    now: datetime,
    prior_workout: int = 0,
    prior_exercise: int = 0,
) -> Step:
    """Activate the clock.

    *prior_workout* / *prior_exercise* resume a workout already in
    progress: the captured start is back-dated so the first tick shows
    the known elapsed value rather than zero.
    """
    if state.is_active:
        return Step(state, [])

    workout_start = state.workout_start_time or seconds_before(now, prior_workout)
    exercise_start = state.exercise_start_time or seconds_before(now, prior_exercise)
    new = replace(
        state,
        is_active=True,
        is_paused=False,
        workout_start_time=workout_start,
        exercise_start_time=exercise_start,
    )
    new = _recompute(new, now)
    return Step(new, [KeepAwake(WORKOUT_WAKE_TAG, True)])


def tick(state: SessionClockState, now: datetime) -> Step:
    if not state.is_running:
        return Step(state, [])
    return Step(_recompute(state, now), [])


def pause(state: SessionClockState, now: datetime) -> Step:
    if not state.is_running:
        return Step(state, [])
    frozen = _recompute(state, now)
    return Step(
        replace(frozen, is_paused=True, paused_at=now),
        [KeepAwake(WORKOUT_WAKE_TAG, False)],
    )


def resume(state: SessionClockState, now: datetime) -> Step:
    if not (state.is_active and state.is_paused):
        return Step(state, [])

    workout_pause = paused_seconds(state.paused_at, now)
    # An exercise that began mid-pause only owes the part after its start.
    exercise_pause_from = state.paused_at
    if (
        exercise_pause_from is not None
        and state.exercise_start_time is not None
        and state.exercise_start_time > exercise_pause_from
    ):
        exercise_pause_from = state.exercise_start_time
    exercise_pause = paused_seconds(exercise_pause_from, now)

    new = replace(
        state,
        is_paused=False,
        paused_at=None,
        workout_paused_time=state.workout_paused_time + workout_pause,
        exercise_paused_time=state.exercise_paused_time + exercise_pause,
    )
    return Step(_recompute(new, now), [KeepAwake(WORKOUT_WAKE_TAG, True)])


def toggle_pause(state: SessionClockState, now: datetime) -> Step:
    if state.is_paused:
        return resume(state, now)
    return pause(state, now)


def advance_exercise(state: SessionClockState, now: datetime) -> Step:
    """Restart the exercise timer at zero; the workout timer is untouched."""
    return Step(
        replace(
            state,
            exercise_start_time=now,
            exercise_paused_time=0,
            exercise_timer=0,
        ),
        [],
    )


def reset(state: SessionClockState) -> Step:
    """Clear both timers (workout abandoned)."""
    effects = [KeepAwake(WORKOUT_WAKE_TAG, False)] if state.is_running else []
    return Step(SessionClockState(), effects)


def workout_duration(state: SessionClockState, now: datetime) -> int:
    """Total workout seconds for analytics, excluding paused time."""
    if state.workout_start_time is None:
        return 0
    if state.is_paused:
        return state.workout_timer
    return elapsed_seconds(state.workout_start_time, now, state.workout_paused_time)


def _recompute(state: SessionClockState, now: datetime) -> SessionClockState:
    return replace(
        state,
        workout_timer=elapsed_seconds(
            state.workout_start_time, now, state.workout_paused_time
        ),
        exercise_timer=elapsed_seconds(
            state.exercise_start_time, now, state.exercise_paused_time
        ),
    )
