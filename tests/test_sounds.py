"""Tests for sound synthesis, the sound manager and the desktop ports."""

from __future__ import annotations

import io
import wave

import pytest

from repclock.audio.sounds import HAPTIC_SOUNDS, SOUND_NAMES, SoundManager, generate
from repclock.feedback.desktop import SoundHaptics, TrayNotifier, WakeLockRegistry
from repclock.timer.state import HapticStyle, REST_WAKE_TAG, WORKOUT_WAKE_TAG

from helpers import SignalCollector


class RecordingSounds:
    def __init__(self):
        self.played: list[str] = []

    def play(self, name):
        self.played.append(name)


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:

    @pytest.mark.parametrize("name", SOUND_NAMES)
    def test_generator_produces_wav(self, name):
        data = generate(name)
        assert isinstance(data, bytes)
        assert data[:4] == b"RIFF"

    @pytest.mark.parametrize("name", SOUND_NAMES)
    def test_wav_is_parseable(self, name):
        with wave.open(io.BytesIO(generate(name)), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0

    def test_haptic_taps_are_short(self):
        for name in HAPTIC_SOUNDS.values():
            with wave.open(io.BytesIO(generate(name)), "rb") as wf:
                assert wf.getnframes() / wf.getframerate() < 0.25

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            generate("airhorn")

    def test_every_haptic_style_has_a_sound(self):
        assert set(HAPTIC_SOUNDS) == set(HapticStyle)


@pytest.mark.usefixtures("qapp")
class TestSoundManager:

    def test_wav_files_generated(self, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            assert (tmp_path / f"{name}.wav").stat().st_size > 44

    def test_existing_files_are_kept(self, tmp_path):
        custom = tmp_path / "chime.wav"
        custom.write_bytes(generate("default"))
        SoundManager(parent=None, sounds_dir=tmp_path)
        assert custom.read_bytes() == generate("default")

    def test_all_sounds_loaded(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert all(mgr.has_sound(name) for name in SOUND_NAMES)

    def test_volume_clamps(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_volume(35)
        assert mgr.volume == 35
        mgr.set_volume(250)
        assert mgr.volume == 100
        mgr.set_volume(-1)
        assert mgr.volume == 0

    def test_play_unknown_and_disabled_no_crash(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.play("airhorn")
        mgr.set_enabled(False)
        assert mgr.enabled is False
        mgr.play("chime")


# ═══════════════════════════════════════════════════════════════════════
#  DESKTOP PORTS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundHaptics:

    def test_plays_tap_per_style(self):
        sounds = RecordingSounds()
        haptics = SoundHaptics(sounds)
        haptics.impact(HapticStyle.MEDIUM)
        haptics.impact(HapticStyle.SUCCESS)
        assert sounds.played == ["haptic_medium", "haptic_success"]


class TestTrayNotifier:

    def test_plays_named_sound_without_tray(self):
        sounds = RecordingSounds()
        TrayNotifier(sounds).notify("Minute 3", "New minute started!", "tri-tone")
        assert sounds.played == ["tri-tone"]

    def test_no_collaborators(self):
        TrayNotifier().notify("Rest Complete!", "Time for your next set.", "chime")


@pytest.mark.usefixtures("qapp")
class TestWakeLockRegistry:

    def test_held_changes_on_first_and_last_tag(self):
        registry = WakeLockRegistry()
        changes = SignalCollector()
        registry.held_changed.connect(changes.slot)

        registry.activate(REST_WAKE_TAG)
        registry.activate(WORKOUT_WAKE_TAG)
        assert registry.is_held
        assert registry.tags == {REST_WAKE_TAG, WORKOUT_WAKE_TAG}

        registry.deactivate(REST_WAKE_TAG)
        registry.deactivate(REST_WAKE_TAG)
        assert registry.is_held
        registry.deactivate(WORKOUT_WAKE_TAG)
        assert not registry.is_held
        assert changes.items == [True, False]
