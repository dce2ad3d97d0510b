"""Notification sounds and haptic cues, synthesized with numpy.

Timers ask for notifications with a *named* sound and for haptic pulses
with a named intensity.  On a desktop host neither exists natively, so
both are rendered as short WAV files (sine partials shaped by an ADSR
envelope), cached on disk, and played through ``QSoundEffect``.

Sound names
-----------
- ``chime``          completion: rest over, block finished
- ``tri-tone``       new EMOM minute, For Time cap reached
- ``submarine``      one minute remaining
- ``default``        anything else
- ``haptic_light``   rest phase begins (Tabata)
- ``haptic_medium``  work phase / new minute
- ``haptic_heavy``   warnings
- ``haptic_success`` completion pulse
"""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR
from ..timer.state import HapticStyle


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

NOTIFICATION_SOUNDS = ("chime", "tri-tone", "submarine", "default")
HAPTIC_SOUNDS: dict[HapticStyle, str] = {
    HapticStyle.LIGHT: "haptic_light",
    HapticStyle.MEDIUM: "haptic_medium",
    HapticStyle.HEAVY: "haptic_heavy",
    HapticStyle.SUCCESS: "haptic_success",
}
SOUND_NAMES = NOTIFICATION_SOUNDS + tuple(HAPTIC_SOUNDS.values())

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(n: int, attack: float, release: float, sustain: float = 0.6) -> np.ndarray:
    """Attack / sustain / release envelope; *attack* and *release* in seconds."""
    env = np.full(n, sustain, dtype=np.float64)
    a = min(int(SAMPLE_RATE * attack), n)
    r = min(int(SAMPLE_RATE * release), n - a)
    if a > 0:
        env[:a] = np.linspace(0.0, sustain, a)
    if r > 0:
        env[n - r:] = np.linspace(sustain, 0.0, r)
    return env


def _partial(freq: float, seconds: float, amp: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amp * np.sin(2 * np.pi * freq * t)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _note(freq: float, seconds: float, amp: float = 0.5, *,
          attack: float = 0.005, release: float = 0.05, overtone: float = 0.0) -> np.ndarray:
    tone = _partial(freq, seconds, amp)
    if overtone:
        tone = tone + _partial(freq * 2, seconds, amp * overtone)
    return tone * _envelope(len(tone), attack, release)


def _wav_bytes(samples: np.ndarray) -> bytes:
    """Mono 16-bit PCM WAV from float samples in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ── notification sounds ──────────────────────────────────────────────────


def _chime() -> bytes:
    """Rising major triad (C5 E5 G5) with a held top note."""
    parts = [
        _note(523.25, 0.12, overtone=0.2), _silence(0.02),
        _note(659.25, 0.12, overtone=0.2), _silence(0.02),
        _note(783.99, 0.40, release=0.25, overtone=0.2),
    ]
    return _wav_bytes(np.concatenate(parts))


def _tri_tone() -> bytes:
    """Three quick descending notes (E6 B5 G5)."""
    parts = []
    for freq in (1318.51, 987.77, 783.99):
        parts += [_note(freq, 0.09, 0.4), _silence(0.03)]
    return _wav_bytes(np.concatenate(parts))


def _submarine() -> bytes:
    """Low sonar ping (A3) with a long tail."""
    return _wav_bytes(_note(220.0, 0.7, 0.55, attack=0.01, release=0.5, overtone=0.15))


def _default() -> bytes:
    return _wav_bytes(np.concatenate([_note(880.0, 0.15, 0.35), _silence(0.05)]))


# ── haptic stand-ins ─────────────────────────────────────────────────────


def _tap(freq: float, amp: float, seconds: float = 0.025) -> Callable[[], bytes]:
    def gen() -> bytes:
        tap = _note(freq, seconds, amp, attack=0.001, release=seconds / 2)
        # trailing silence so QSoundEffect doesn't clip the tail
        return _wav_bytes(np.concatenate([tap, _silence(0.03)]))
    return gen


def _success_pulse() -> bytes:
    """Two taps, the second higher."""
    first = _note(600.0, 0.03, 0.35, attack=0.001, release=0.015)
    second = _note(900.0, 0.05, 0.35, attack=0.001, release=0.03)
    return _wav_bytes(np.concatenate([first, _silence(0.06), second, _silence(0.03)]))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "chime": _chime,
    "tri-tone": _tri_tone,
    "submarine": _submarine,
    "default": _default,
    "haptic_light": _tap(1400.0, 0.15),
    "haptic_medium": _tap(900.0, 0.30),
    "haptic_heavy": _tap(500.0, 0.50, seconds=0.04),
    "haptic_success": _success_pulse,
}


def generate(name: str) -> bytes:
    """WAV bytes for *name*; ``KeyError`` for unknown names."""
    return _GENERATORS[name]()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesizes, caches and plays the sounds above.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("chime")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0-1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name; unknown names fall back to ``default``."""
        if not self._enabled:
            return
        effect = self._effects.get(name) or self._effects.get("default")
        if effect is not None:
            effect.play()

    def has_sound(self, name: str) -> bool:
        return name in self._effects

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
