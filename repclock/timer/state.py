"""Timer state shape and the side effects timers ask their host to perform.

Timers never call platform services themselves.  A transition returns a
:class:`Step`: the new state plus a list of effect values.  The host
hands the effects to :class:`~repclock.feedback.dispatcher.FeedbackDispatcher`
and routes :class:`Event` values to whoever cares (the round controller,
the UI).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Union

from .clock import paused_seconds


# ── enums ─────────────────────────────────────────────────────────────────


class HapticStyle(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SUCCESS = "success"


class TimerEvent(Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"
    COMPLETE = "complete"
    COMPLETE_ROUND = "completeRound"


# ── wake-lock tags ────────────────────────────────────────────────────────

WORKOUT_WAKE_TAG = "workout-timer"
REST_WAKE_TAG = "rest-timer"
CIRCUIT_WAKE_TAG = "circuit-timer"


# ── side effects ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Haptic:
    style: HapticStyle


@dataclass(frozen=True)
class Notify:
    """Immediate local notification: no banner scheduling, no trigger."""

    title: str
    body: str
    sound: str = "default"


@dataclass(frozen=True)
class KeepAwake:
    tag: str
    active: bool


@dataclass(frozen=True)
class Event:
    kind: TimerEvent
    round_number: int | None = None


SideEffect = Union[Haptic, Notify, KeepAwake, Event]


class Step(NamedTuple):
    """Result of one transition: ``(new_state, effects)``."""

    state: object
    effects: list


# ── shared timer state ────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerState:
    """Elapsed-time bookkeeping shared by the rest and circuit timers.

    ``start_time`` and ``total_paused_time`` are the source of truth;
    ``current_time`` is always re-derivable from them.
    """

    current_time: int = 0
    is_active: bool = False
    is_paused: bool = False
    start_time: datetime | None = None
    paused_at: datetime | None = None
    total_paused_time: float = 0
    current_interval: int | None = None
    is_work_phase: bool | None = None

    # one-shot guards
    is_completed: bool = False
    last_processed_minute: int = 0
    warning_fired: bool = False
    time_cap_fired: bool = False

    @property
    def is_running(self) -> bool:
        return self.is_active and not self.is_paused


def pause_timer(state: TimerState, now: datetime) -> TimerState:
    """Freeze *state*; ``current_time`` keeps its last computed value."""
    return replace(state, is_paused=True, paused_at=now)


def resume_timer(state: TimerState, now: datetime) -> TimerState:
    """Fold the pause that started at ``paused_at`` into the total."""
    return replace(
        state,
        is_paused=False,
        paused_at=None,
        total_paused_time=state.total_paused_time + paused_seconds(state.paused_at, now),
    )


def events_in(effects: list, kind: TimerEvent | None = None) -> list[Event]:
    """The :class:`Event` values in *effects*, optionally of one kind."""
    return [
        e for e in effects
        if isinstance(e, Event) and (kind is None or e.kind == kind)
    ]

