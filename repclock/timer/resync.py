"""Foreground resynchronisation.

Hosts stop delivering ticks while the app is in the background.  Because
every timer derives its value from timestamps, catching up is just one
extra tick at the moment the app becomes active again; that tick also
fires whatever completion or rollover was crossed in the meantime,
exactly once, since each timer's one-shot guards live in its state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class AppState(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


TickFn = Callable[[datetime], list]


class ResyncHandler:
    """Re-ticks registered timers when the host returns to the foreground.

    Usage::

        resync = ResyncHandler()
        resync.register("rest", engine._tick_rest)
        effects = resync.on_app_state_change(AppState.ACTIVE, now)
    """

    def __init__(self, initial: AppState = AppState.ACTIVE) -> None:
        self._app_state = initial
        self._targets: dict[str, TickFn] = {}
        self._last_resync: datetime | None = None

    @property
    def app_state(self) -> AppState:
        return self._app_state

    @property
    def last_resync(self) -> datetime | None:
        return self._last_resync

    def register(self, name: str, tick_fn: TickFn) -> None:
        self._targets[name] = tick_fn

    def unregister(self, name: str) -> None:
        self._targets.pop(name, None)

    def on_app_state_change(self, next_state: AppState, now: datetime) -> list:
        """Record the transition; resync when coming back to the foreground."""
        previous = self._app_state
        self._app_state = next_state
        if previous is not AppState.ACTIVE and next_state is AppState.ACTIVE:
            return self.resync(now)
        if next_state is not AppState.ACTIVE:
            logger.debug("app left foreground (%s); timers continue via timestamps",
                         next_state.value)
        return []

    def resync(self, now: datetime) -> list:
        """Tick every registered timer once at *now*."""
        logger.debug("resyncing %d timer(s) at %s", len(self._targets), now)
        self._last_resync = now
        effects: list = []
        for tick_fn in list(self._targets.values()):
            effects.extend(tick_fn(now))
        return effects
