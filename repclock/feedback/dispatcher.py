"""Delivers timer side effects to platform collaborators.

Haptics, notifications and wake locks are fire-and-forget.  A collaborator
that raises is logged and skipped; it never aborts a timer transition and
never reaches the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from ..settings import Settings
from ..timer.state import Event, Haptic, HapticStyle, KeepAwake, Notify

logger = logging.getLogger(__name__)


# ── collaborator ports ────────────────────────────────────────────────────


class HapticsPort(Protocol):
    def impact(self, style: HapticStyle) -> None:
        ...


class NotifierPort(Protocol):
    def notify(self, title: str, body: str, sound: str) -> None:
        ...


class KeepAwakePort(Protocol):
    def activate(self, tag: str) -> None:
        ...

    def deactivate(self, tag: str) -> None:
        ...


# ── dispatcher ────────────────────────────────────────────────────────────


class FeedbackDispatcher:
    """Routes :class:`Haptic`, :class:`Notify` and :class:`KeepAwake` effects.

    :class:`Event` values are ignored here; the host routes those.
    """

    def __init__(
        self,
        *,
        haptics: HapticsPort | None = None,
        notifier: NotifierPort | None = None,
        keep_awake: KeepAwakePort | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._haptics = haptics
        self._notifier = notifier
        self._keep_awake = keep_awake
        self._settings = settings or Settings()
        self._held_tags: set[str] = set()

    @property
    def held_wake_tags(self) -> frozenset[str]:
        return frozenset(self._held_tags)

    @property
    def settings(self) -> Settings:
        return self._settings

    @settings.setter
    def settings(self, value: Settings) -> None:
        self._settings = value

    def dispatch(self, effects: Iterable) -> None:
        for effect in effects:
            if isinstance(effect, Haptic):
                self._haptic(effect)
            elif isinstance(effect, Notify):
                self._notify(effect)
            elif isinstance(effect, KeepAwake):
                self._wake(effect)
            elif isinstance(effect, Event):
                continue
            else:
                logger.warning("unknown side effect ignored: %r", effect)

    def release_all(self) -> None:
        """Drop every wake lock still held (component teardown)."""
        for tag in sorted(self._held_tags):
            self._wake(KeepAwake(tag, False))

    # ── internal ──────────────────────────────────────────────────────

    def _haptic(self, effect: Haptic) -> None:
        if self._haptics is None or not self._settings.haptics_enabled:
            return
        try:
            self._haptics.impact(effect.style)
        except Exception:
            logger.warning("haptic feedback failed (%s)", effect.style.value, exc_info=True)

    def _notify(self, effect: Notify) -> None:
        if self._notifier is None or not self._settings.notifications_enabled:
            return
        try:
            self._notifier.notify(effect.title, effect.body, effect.sound)
        except Exception:
            logger.warning("notification failed: %s", effect.title, exc_info=True)

    def _wake(self, effect: KeepAwake) -> None:
        if effect.active:
            if not self._settings.keep_screen_awake or effect.tag in self._held_tags:
                return
            self._held_tags.add(effect.tag)
        else:
            if effect.tag not in self._held_tags:
                return
            self._held_tags.discard(effect.tag)

        if self._keep_awake is None:
            return
        try:
            if effect.active:
                self._keep_awake.activate(effect.tag)
            else:
                self._keep_awake.deactivate(effect.tag)
        except Exception:
            logger.warning("keep-awake %s failed for %s",
                           "activate" if effect.active else "deactivate",
                           effect.tag, exc_info=True)
