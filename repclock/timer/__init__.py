"""Timer package.

The Qt host lives in :mod:`repclock.timer.engine` and is imported from
there directly.
"""

from .circuit_timer import BlockTimerKind, BlockType, timer_kind_for
from .clock import elapsed_seconds, format_time
from .rest_timer import RestTimerState
from .resync import AppState, ResyncHandler
from .session_clock import SessionClockState
from .state import (
    Event,
    Haptic,
    HapticStyle,
    KeepAwake,
    Notify,
    Step,
    TimerEvent,
    TimerState,
)

__all__ = [
    "BlockTimerKind",
    "BlockType",
    "timer_kind_for",
    "elapsed_seconds",
    "format_time",
    "RestTimerState",
    "AppState",
    "ResyncHandler",
    "SessionClockState",
    "Event",
    "Haptic",
    "HapticStyle",
    "KeepAwake",
    "Notify",
    "Step",
    "TimerEvent",
    "TimerState",
]
