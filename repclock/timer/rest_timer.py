"""Rest-period countdown between sets.

The countdown is ``target_duration - elapsed`` where elapsed comes from
the captured start instant and the accumulated pause time.  Reaching
zero deactivates the timer, so repeated ticks at zero are no-ops and
``complete`` is emitted exactly once, including when the zero was
crossed while the host was suspended.

Cancel semantics
----------------
``cancel`` returns to inactive at the full target (the canonical
"dismiss").  ``cancel_to_zero`` is the explicit force-zero variant for
callers that need a spent timer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from .clock import elapsed_seconds, format_time
from .state import (
    Event,
    Haptic,
    HapticStyle,
    KeepAwake,
    Notify,
    REST_WAKE_TAG,
    Step,
    TimerEvent,
    TimerState,
    pause_timer,
    resume_timer,
)

REST_COMPLETE_TITLE = "Rest Complete!"
REST_COMPLETE_BODY = "Time for your next set."
REST_COMPLETE_SOUND = "chime"


@dataclass(frozen=True)
class RestTimerState:
    target_duration: int = 0
    countdown: int = 0
    timer: TimerState = field(default_factory=TimerState)

    @property
    def is_active(self) -> bool:
        return self.timer.is_active

    @property
    def is_paused(self) -> bool:
        return self.timer.is_paused


def start(state: RestTimerState, target_duration: int, now: datetime) -> Step:
    """Begin counting down from *target_duration* seconds.

    A target of zero or less means "no rest configured": no-op.
    """
    if target_duration <= 0:
        return Step(state, [])
    new = RestTimerState(
        target_duration=target_duration,
        countdown=target_duration,
        timer=TimerState(is_active=True, start_time=now),
    )
    return Step(new, [KeepAwake(REST_WAKE_TAG, True), Event(TimerEvent.START)])


def tick(state: RestTimerState, now: datetime) -> Step:
    timer = state.timer
    if not timer.is_running:
        return Step(state, [])

    elapsed = elapsed_seconds(timer.start_time, now, timer.total_paused_time)
    remaining = max(0, state.target_duration - elapsed)

    if remaining > 0:
        return Step(
            replace(state, countdown=remaining, timer=replace(timer, current_time=elapsed)),
            [],
        )

    done = replace(
        state,
        countdown=0,
        timer=replace(
            timer,
            current_time=state.target_duration,
            is_active=False,
            is_paused=False,
            start_time=None,
            paused_at=None,
            is_completed=True,
        ),
    )
    return Step(done, [
        Haptic(HapticStyle.SUCCESS),
        Notify(REST_COMPLETE_TITLE, REST_COMPLETE_BODY, REST_COMPLETE_SOUND),
        KeepAwake(REST_WAKE_TAG, False),
        Event(TimerEvent.COMPLETE),
    ])


def pause(state: RestTimerState, now: datetime) -> Step:
    if not state.timer.is_running:
        return Step(state, [])
    # bring the countdown up to date before freezing it
    caught_up = tick(state, now)
    if not caught_up.state.timer.is_active:
        return caught_up
    state = caught_up.state
    return Step(
        replace(state, timer=pause_timer(state.timer, now)),
        caught_up.effects + [KeepAwake(REST_WAKE_TAG, False), Event(TimerEvent.PAUSE)],
    )


def resume(state: RestTimerState, now: datetime) -> Step:
    timer = state.timer
    if not (timer.is_active and timer.is_paused and timer.paused_at is not None):
        return Step(state, [])
    return Step(
        replace(state, timer=resume_timer(timer, now)),
        [KeepAwake(REST_WAKE_TAG, True), Event(TimerEvent.RESUME)],
    )


def start_pause(state: RestTimerState, target_duration: int, now: datetime) -> Step:
    """The single start / pause / resume control."""
    if state.is_active:
        if state.is_paused:
            return resume(state, now)
        return pause(state, now)
    return start(state, target_duration, now)


def reset(state: RestTimerState) -> Step:
    """Back to the full target, inactive, timestamps cleared."""
    effects = [KeepAwake(REST_WAKE_TAG, False)] if state.timer.is_running else []
    effects.append(Event(TimerEvent.RESET))
    return Step(
        RestTimerState(
            target_duration=state.target_duration,
            countdown=state.target_duration,
        ),
        effects,
    )


def restart(state: RestTimerState, target_duration: int, now: datetime) -> Step:
    """Reset and immediately start again."""
    cleared = reset(replace(state, target_duration=target_duration))
    started = start(cleared.state, target_duration, now)
    return Step(started.state, cleared.effects + started.effects)


def cancel(state: RestTimerState) -> Step:
    """Dismiss: inactive, countdown back at the full target."""
    effects = [KeepAwake(REST_WAKE_TAG, False)] if state.timer.is_running else []
    return Step(
        RestTimerState(
            target_duration=state.target_duration,
            countdown=state.target_duration,
        ),
        effects,
    )


def cancel_to_zero(state: RestTimerState) -> Step:
    """Dismiss with the countdown forced to zero."""
    effects = [KeepAwake(REST_WAKE_TAG, False)] if state.timer.is_running else []
    return Step(
        RestTimerState(target_duration=state.target_duration, countdown=0),
        effects,
    )


def format_countdown(state: RestTimerState) -> str:
    return format_time(state.countdown, pad_minutes=False)
