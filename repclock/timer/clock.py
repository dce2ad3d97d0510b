"""Wall-clock arithmetic shared by every timer.

Nothing here keeps state.  Every displayed value in the engine is derived
from a captured start instant, the current instant, and the seconds spent
paused, so a host that stops delivering ticks (app suspended, laptop
asleep) never causes drift: the next tick simply recomputes.
"""

from __future__ import annotations

from datetime import datetime, timedelta

_ONE_SECOND = timedelta(seconds=1)


def elapsed_seconds(
    start_time: datetime | None,
    now: datetime,
    total_paused_time: float = 0,
) -> int:
    """Whole seconds since *start_time*, minus time spent paused.

    *total_paused_time* keeps its fractional part and the result is
    floored once, after the subtraction, so pausing and resuming never
    moves the value by a second.

    Clamped to zero so a clock that moved backwards (or a start instant
    captured slightly in the future) never yields a negative value.
    """
    if start_time is None:
        return 0
    active = now - start_time - timedelta(seconds=total_paused_time)
    return max(0, active // _ONE_SECOND)


def paused_seconds(paused_at: datetime | None, now: datetime) -> float:
    """Seconds between *paused_at* and *now*, fractions kept (0 when not paused)."""
    if paused_at is None:
        return 0
    return max(0.0, (now - paused_at).total_seconds())


def seconds_before(now: datetime, seconds: int) -> datetime:
    """The instant *seconds* before *now*; used to back-date a start."""
    return now - timedelta(seconds=seconds)


def format_time(seconds: int, *, pad_minutes: bool = True) -> str:
    """``MM:SS`` (or ``M:SS`` with ``pad_minutes=False``)."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    if pad_minutes:
        return f"{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"
