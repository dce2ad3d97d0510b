"""Qt implementations of the feedback ports.

A desktop has no haptic engine and no notification sound catalog, so:

- :class:`SoundHaptics` plays a short synthesized tap per haptic style.
- :class:`TrayNotifier` shows a tray balloon and plays the named sound.
- :class:`WakeLockRegistry` tracks which timers want the display kept on
  and emits ``held_changed`` when the first tag is taken or the last one
  is released, so the window can toggle its idle inhibition.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

from ..audio.sounds import HAPTIC_SOUNDS, SoundManager
from ..timer.state import HapticStyle


class SoundHaptics:
    def __init__(self, sounds: SoundManager) -> None:
        self._sounds = sounds

    def impact(self, style: HapticStyle) -> None:
        self._sounds.play(HAPTIC_SOUNDS[style])


class TrayNotifier:
    """Notification port backed by ``QSystemTrayIcon.showMessage``.

    Without a tray (or when the platform has none) only the sound plays.
    """

    def __init__(
        self,
        sounds: SoundManager | None = None,
        tray_icon: QSystemTrayIcon | None = None,
    ) -> None:
        self._sounds = sounds
        self._tray_icon = tray_icon

    def notify(self, title: str, body: str, sound: str) -> None:
        if self._tray_icon is not None and QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.showMessage(title, body)
        if self._sounds is not None:
            self._sounds.play(sound)


class WakeLockRegistry(QObject):
    held_changed = pyqtSignal(bool)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._tags: set[str] = set()

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    @property
    def is_held(self) -> bool:
        return bool(self._tags)

    def activate(self, tag: str) -> None:
        was_held = self.is_held
        self._tags.add(tag)
        if not was_held:
            self.held_changed.emit(True)

    def deactivate(self, tag: str) -> None:
        if tag not in self._tags:
            return
        self._tags.discard(tag)
        if not self._tags:
            self.held_changed.emit(False)
