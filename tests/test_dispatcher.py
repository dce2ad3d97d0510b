"""Tests for side-effect delivery."""

import logging

from repclock.feedback.dispatcher import FeedbackDispatcher
from repclock.settings import Settings
from repclock.timer.state import (
    Event, Haptic, HapticStyle, KeepAwake, Notify, REST_WAKE_TAG, TimerEvent,
    WORKOUT_WAKE_TAG,
)

from helpers import Exploding, RecordingHaptics, RecordingKeepAwake, RecordingNotifier


class TestDispatch:

    def test_routes_each_effect(self, dispatcher, haptics, notifier, keep_awake):
        dispatcher.dispatch([
            Haptic(HapticStyle.SUCCESS),
            Notify("Rest Complete!", "Time for your next set.", "chime"),
            KeepAwake(REST_WAKE_TAG, True),
            Event(TimerEvent.COMPLETE),
        ])
        assert haptics.styles == [HapticStyle.SUCCESS]
        assert notifier.sent == [("Rest Complete!", "Time for your next set.", "chime")]
        assert keep_awake.calls == [("activate", REST_WAKE_TAG)]

    def test_wake_lock_is_idempotent(self, dispatcher, keep_awake):
        dispatcher.dispatch([KeepAwake(REST_WAKE_TAG, True)] * 3)
        dispatcher.dispatch([KeepAwake(REST_WAKE_TAG, False)] * 2)
        assert keep_awake.calls == [
            ("activate", REST_WAKE_TAG),
            ("deactivate", REST_WAKE_TAG),
        ]
        assert dispatcher.held_wake_tags == frozenset()

    def test_release_all(self, dispatcher, keep_awake):
        dispatcher.dispatch([KeepAwake(REST_WAKE_TAG, True), KeepAwake(WORKOUT_WAKE_TAG, True)])
        dispatcher.release_all()
        assert dispatcher.held_wake_tags == frozenset()
        assert sorted(keep_awake.calls[2:]) == [
            ("deactivate", REST_WAKE_TAG),
            ("deactivate", WORKOUT_WAKE_TAG),
        ]

    def test_unknown_effect_ignored(self, dispatcher, caplog):
        with caplog.at_level(logging.WARNING):
            dispatcher.dispatch(["not an effect"])
        assert "unknown side effect" in caplog.text

    def test_no_collaborators(self):
        FeedbackDispatcher().dispatch([
            Haptic(HapticStyle.LIGHT), Notify("t", "b"), KeepAwake(REST_WAKE_TAG, True),
        ])


class TestFailures:

    def test_failures_are_logged_and_ignored(self, caplog):
        keep_awake = RecordingKeepAwake()
        dispatcher = FeedbackDispatcher(
            haptics=Exploding(), notifier=Exploding(), keep_awake=keep_awake,
        )
        with caplog.at_level(logging.WARNING, logger="repclock.feedback.dispatcher"):
            dispatcher.dispatch([
                Haptic(HapticStyle.HEAVY),
                Notify("1 Minute Remaining!", "Keep pushing!", "submarine"),
                KeepAwake(REST_WAKE_TAG, True),
            ])
        assert "haptic feedback failed" in caplog.text
        assert "notification failed" in caplog.text
        assert keep_awake.calls == [("activate", REST_WAKE_TAG)]

    def test_keep_awake_failure(self, caplog):
        dispatcher = FeedbackDispatcher(keep_awake=Exploding())
        with caplog.at_level(logging.WARNING, logger="repclock.feedback.dispatcher"):
            dispatcher.dispatch([KeepAwake(REST_WAKE_TAG, True)])
        assert "keep-awake activate failed" in caplog.text


class TestSettingsGates:

    def test_disabled_toggles(self):
        haptics, notifier, keep_awake = RecordingHaptics(), RecordingNotifier(), RecordingKeepAwake()
        dispatcher = FeedbackDispatcher(
            haptics=haptics,
            notifier=notifier,
            keep_awake=keep_awake,
            settings=Settings(
                haptics_enabled=False,
                notifications_enabled=False,
                keep_screen_awake=False,
            ),
        )
        dispatcher.dispatch([
            Haptic(HapticStyle.MEDIUM),
            Notify("Minute 2", "New minute started!", "tri-tone"),
            KeepAwake(REST_WAKE_TAG, True),
        ])
        assert haptics.styles == []
        assert notifier.sent == []
        assert keep_awake.calls == []

    def test_settings_swap(self, dispatcher, haptics):
        dispatcher.settings = Settings(haptics_enabled=False)
        dispatcher.dispatch([Haptic(HapticStyle.LIGHT)])
        assert haptics.styles == []
        assert dispatcher.settings.haptics_enabled is False
