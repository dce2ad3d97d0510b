"""Format-aware timer for circuit blocks.

Every format shares :class:`~repclock.timer.state.TimerState` and the same
raw value: seconds elapsed since the block timer started, minus pauses.
What differs is how that value is *displayed*, which transitions it
triggers, and when the block counts as finished.

Formats
-------
Tabata    fixed 8 intervals of work + rest (20 s / 10 s by default);
          the display counts down the current phase.
EMOM      a new minute every 60 s; the display counts down to the next
          minute; ``rounds`` minutes complete the block.
ForTime   counts down to the time cap if there is one (cap reached is a
          warning, never a completion), otherwise counts up.
Amrap     counts down to the time cap if there is one and completes when
          it is reached, otherwise counts up.
Circuit   counts up; completion is always explicit.

Each operation below is a single function that dispatches over the
closed set of kinds, so auditing a format means reading one branch per
function.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Union

from .clock import elapsed_seconds
from .state import (
    CIRCUIT_WAKE_TAG,
    Event,
    Haptic,
    HapticStyle,
    KeepAwake,
    Notify,
    Step,
    TimerEvent,
    TimerState,
    pause_timer,
    resume_timer,
)


# ── block types ───────────────────────────────────────────────────────────


class BlockType(Enum):
    AMRAP = "amrap"
    EMOM = "emom"
    TABATA = "tabata"
    FOR_TIME = "for_time"
    CIRCUIT = "circuit"

    @classmethod
    def parse(cls, value: "BlockType | str | None") -> "BlockType":
        """Map a raw block-type string to a member (unknown -> CIRCUIT)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.CIRCUIT


# ── constants ─────────────────────────────────────────────────────────────

TABATA_WORK_SECONDS = 20
TABATA_REST_SECONDS = 10
TABATA_INTERVALS = 8
WARNING_THRESHOLD = 60  # seconds left when the one-minute warning fires


# ── timer kinds ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Tabata:
    work_interval: int = TABATA_WORK_SECONDS
    rest_interval: int = TABATA_REST_SECONDS
    intervals: int = TABATA_INTERVALS

    @property
    def cycle(self) -> int:
        return self.work_interval + self.rest_interval


@dataclass(frozen=True)
class Emom:
    rounds: int | None = None


@dataclass(frozen=True)
class ForTime:
    time_cap_minutes: int | None = None

    @property
    def cap_seconds(self) -> int | None:
        return self.time_cap_minutes * 60 if self.time_cap_minutes else None


@dataclass(frozen=True)
class Amrap:
    time_cap_minutes: int | None = None

    @property
    def cap_seconds(self) -> int | None:
        return self.time_cap_minutes * 60 if self.time_cap_minutes else None


@dataclass(frozen=True)
class Circuit:
    pass


BlockTimerKind = Union[Tabata, Emom, ForTime, Amrap, Circuit]


def timer_kind_for(
    block_type: BlockType | str | None,
    *,
    time_cap_minutes: int | None = None,
    rounds: int | None = None,
    work_interval: int = TABATA_WORK_SECONDS,
    rest_interval: int = TABATA_REST_SECONDS,
) -> BlockTimerKind:
    """Build the timer kind for a block."""
    kind = BlockType.parse(block_type)
    if kind is BlockType.TABATA:
        return Tabata(work_interval=work_interval, rest_interval=rest_interval)
    if kind is BlockType.EMOM:
        return Emom(rounds=rounds)
    if kind is BlockType.FOR_TIME:
        return ForTime(time_cap_minutes=time_cap_minutes)
    if kind is BlockType.AMRAP:
        return Amrap(time_cap_minutes=time_cap_minutes)
    return Circuit()


def _unknown(kind: object) -> TypeError:
    return TypeError(f"unknown circuit timer kind: {kind!r}")


# ══════════════════════════════════════════════════════════════════════════
#  DISPLAY
# ══════════════════════════════════════════════════════════════════════════


def display_time(kind: BlockTimerKind, state: TimerState) -> int:
    """Seconds to show on the dial for *state*."""
    elapsed = state.current_time
    if isinstance(kind, Tabata):
        if state.is_completed:
            return 0
        in_cycle = elapsed % kind.cycle
        if in_cycle < kind.work_interval:
            return kind.work_interval - in_cycle
        return kind.cycle - in_cycle
    if isinstance(kind, Emom):
        if state.is_completed:
            return 0
        return 60 - elapsed % 60
    if isinstance(kind, (ForTime, Amrap)):
        cap = kind.cap_seconds
        if cap is None:
            return elapsed
        return max(0, cap - elapsed)
    if isinstance(kind, Circuit):
        return elapsed
    raise _unknown(kind)


def timer_label(kind: BlockTimerKind, state: TimerState) -> str:
    if isinstance(kind, Tabata):
        return "REST" if state.is_work_phase is False else "WORK"
    if isinstance(kind, Emom):
        return "Next Minute"
    if isinstance(kind, (ForTime, Amrap)):
        return "Time Remaining" if kind.cap_seconds else "Time Elapsed"
    if isinstance(kind, Circuit):
        return "Time Elapsed"
    raise _unknown(kind)


def interval_label(kind: BlockTimerKind, state: TimerState) -> str | None:
    """``Round 3/8``, ``Minute 2/10`` and so on; ``None`` before start."""
    interval = state.current_interval
    if interval is None:
        return None
    if isinstance(kind, Tabata):
        return f"Round {interval}/{kind.intervals}"
    if isinstance(kind, Emom):
        return f"Minute {interval}/{kind.rounds}" if kind.rounds else f"Minute {interval}"
    if isinstance(kind, (ForTime, Amrap, Circuit)):
        return f"Interval {interval}"
    raise _unknown(kind)


def auto_advances_rounds(kind: BlockTimerKind) -> bool:
    """True when the clock itself closes rounds (Tabata, EMOM)."""
    if isinstance(kind, (Tabata, Emom)):
        return True
    if isinstance(kind, (ForTime, Amrap, Circuit)):
        return False
    raise _unknown(kind)


# ══════════════════════════════════════════════════════════════════════════
#  TICK
# ══════════════════════════════════════════════════════════════════════════


def tick(kind: BlockTimerKind, state: TimerState, now: datetime) -> Step:
    """Recompute elapsed time from timestamps, then apply format rules.

    Safe to call at any cadence: a second call at the same instant finds
    no transition left to report.
    """
    if not state.is_running or state.is_completed:
        return Step(state, [])

    elapsed = elapsed_seconds(state.start_time, now, state.total_paused_time)
    state = replace(state, current_time=elapsed)

    if isinstance(kind, Tabata):
        return _tick_tabata(kind, state)
    if isinstance(kind, Emom):
        return _tick_emom(kind, state, now)
    if isinstance(kind, ForTime):
        return _tick_for_time(kind, state)
    if isinstance(kind, Amrap):
        return _tick_amrap(kind, state)
    if isinstance(kind, Circuit):
        return Step(state, [])
    raise _unknown(kind)


def _finish(state: TimerState, current_time: int, **changes) -> TimerState:
    return replace(
        state,
        current_time=current_time,
        is_active=False,
        is_paused=False,
        paused_at=None,
        is_completed=True,
        **changes,
    )


def _completion_effects(title: str, body: str) -> list:
    return [
        Haptic(HapticStyle.SUCCESS),
        Notify(title, body, "chime"),
        KeepAwake(CIRCUIT_WAKE_TAG, False),
        Event(TimerEvent.COMPLETE),
    ]


def _rounds_closed(first: int, last: int) -> list:
    return [Event(TimerEvent.COMPLETE_ROUND, n) for n in range(first, last + 1)]


def _tick_tabata(kind: Tabata, state: TimerState) -> Step:
    elapsed = state.current_time
    interval = elapsed // kind.cycle + 1
    is_work = elapsed % kind.cycle < kind.work_interval
    previous = state.current_interval or 1

    effects = _rounds_closed(previous, min(interval, kind.intervals + 1) - 1)

    if interval > kind.intervals:
        done = _finish(
            state,
            kind.intervals * kind.cycle,
            current_interval=kind.intervals,
            is_work_phase=False,
        )
        effects += _completion_effects(
            "Tabata Complete!",
            f"{kind.intervals} rounds finished - great work!",
        )
        return Step(done, effects)

    if interval != state.current_interval or is_work != state.is_work_phase:
        # haptic only, no sound: work gets the stronger pulse
        effects.append(Haptic(HapticStyle.MEDIUM if is_work else HapticStyle.LIGHT))
        state = replace(state, current_interval=interval, is_work_phase=is_work)

    return Step(state, effects)


def _tick_emom(kind: Emom, state: TimerState, now: datetime) -> Step:
    elapsed = state.current_time
    minute = elapsed // 60 + 1
    previous = state.current_interval or 1

    if kind.rounds and minute > kind.rounds:
        effects = _rounds_closed(previous, kind.rounds)
        done = _finish(state, kind.rounds * 60, current_interval=kind.rounds)
        effects += _completion_effects(
            "EMOM Complete!",
            f"{kind.rounds} minutes finished - great work!",
        )
        return Step(done, effects)

    if minute == state.current_interval:
        return Step(state, [])

    if minute <= previous:
        return Step(replace(state, current_interval=minute), [])

    # Minute rollover.  The raw baseline snaps to the minute boundary and
    # the start is re-anchored on it with a clean pause total, so a late
    # tick does not shorten the new minute.
    effects = _rounds_closed(previous, minute - 1)
    baseline = (minute - 1) * 60
    state = replace(
        state,
        current_time=baseline,
        current_interval=minute,
        start_time=now - timedelta(seconds=baseline),
        total_paused_time=0,
    )
    if state.last_processed_minute != minute:
        state = replace(state, last_processed_minute=minute)
        effects += [
            Haptic(HapticStyle.MEDIUM),
            Notify(f"Minute {minute}", "New minute started!", "tri-tone"),
        ]
    return Step(state, effects)


def _one_minute_warning(state: TimerState, cap: int, body: str) -> Step:
    remaining = cap - state.current_time
    if (
        state.warning_fired
        or state.current_time <= 0
        or cap <= WARNING_THRESHOLD
        or not 0 < remaining <= WARNING_THRESHOLD
    ):
        return Step(state, [])
    return Step(
        replace(state, warning_fired=True),
        [Haptic(HapticStyle.HEAVY), Notify("1 Minute Remaining!", body, "submarine")],
    )


def _tick_for_time(kind: ForTime, state: TimerState) -> Step:
    cap = kind.cap_seconds
    if cap is None:
        return Step(state, [])

    state, effects = _one_minute_warning(state, cap, "Time cap approaching - keep pushing!")

    if state.current_time >= cap and not state.time_cap_fired:
        # warn only: a For Time block is finished by the athlete, not the clock
        state = replace(state, time_cap_fired=True)
        effects = effects + [
            Haptic(HapticStyle.HEAVY),
            Notify("Time Cap Reached!", "Finish your current round when possible", "tri-tone"),
        ]
    return Step(state, effects)


def _tick_amrap(kind: Amrap, state: TimerState) -> Step:
    cap = kind.cap_seconds
    if cap is None:
        return Step(state, [])

    if state.current_time >= cap:
        return Step(
            _finish(state, cap),
            _completion_effects("Time Cap Reached!", "AMRAP complete - great work!"),
        )

    return _one_minute_warning(state, cap, "Keep pushing!")


# ══════════════════════════════════════════════════════════════════════════
#  CONTROLS
# ══════════════════════════════════════════════════════════════════════════


def start(kind: BlockTimerKind, state: TimerState, now: datetime) -> Step:
    if state.is_active or state.is_completed:
        return Step(state, [])

    new = replace(
        state,
        is_active=True,
        is_paused=False,
        paused_at=None,
        start_time=state.start_time or now,
    )
    if state.current_interval is None:
        if isinstance(kind, Tabata):
            new = replace(new, current_interval=1, is_work_phase=True)
        elif isinstance(kind, Emom):
            new = replace(new, current_interval=1, last_processed_minute=1)
    return Step(new, [KeepAwake(CIRCUIT_WAKE_TAG, True), Event(TimerEvent.START)])


def pause(kind: BlockTimerKind, state: TimerState, now: datetime) -> Step:
    if not state.is_running:
        return Step(state, [])
    caught_up = tick(kind, state, now)
    if not caught_up.state.is_active:
        return caught_up
    return Step(
        pause_timer(caught_up.state, now),
        caught_up.effects + [KeepAwake(CIRCUIT_WAKE_TAG, False), Event(TimerEvent.PAUSE)],
    )


def resume(kind: BlockTimerKind, state: TimerState, now: datetime) -> Step:
    if not (state.is_active and state.is_paused):
        return Step(state, [])
    return Step(
        resume_timer(state, now),
        [KeepAwake(CIRCUIT_WAKE_TAG, True), Event(TimerEvent.RESUME)],
    )


def start_pause(kind: BlockTimerKind, state: TimerState, now: datetime) -> Step:
    """The single start / pause / resume button."""
    if state.is_completed:
        return Step(state, [])
    if not state.is_active:
        return start(kind, state, now)
    if state.is_paused:
        return resume(kind, state, now)
    return pause(kind, state, now)


def stop(state: TimerState) -> Step:
    """Deactivate without clearing progress (the circuit was finished by hand)."""
    if not state.is_active:
        return Step(state, [])
    effects = [KeepAwake(CIRCUIT_WAKE_TAG, False)] if state.is_running else []
    return Step(replace(state, is_active=False, is_paused=False, paused_at=None), effects)


def reset(state: TimerState, *, confirmed: bool = False) -> Step:
    """Zero the timer.  Destructive, so the caller must pass ``confirmed``."""
    if not confirmed:
        return Step(state, [])
    effects = [KeepAwake(CIRCUIT_WAKE_TAG, False)] if state.is_running else []
    effects.append(Event(TimerEvent.RESET))
    return Step(TimerState(), effects)
