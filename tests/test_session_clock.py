"""Tests for the workout / exercise session clock."""

from repclock.timer import session_clock
from repclock.timer.session_clock import SessionClockState
from repclock.timer.state import KeepAwake, WORKOUT_WAKE_TAG

from helpers import T0, at


def started(prior_workout=0, prior_exercise=0) -> SessionClockState:
    return session_clock.start(SessionClockState(), T0, prior_workout, prior_exercise).state


# ═══════════════════════════════════════════════════════════════════════════
#  START / TICK
# ═══════════════════════════════════════════════════════════════════════════


class TestStart:

    def test_captures_both_start_instants(self):
        state, effects = session_clock.start(SessionClockState(), T0)
        assert state.is_active and not state.is_paused
        assert state.workout_start_time == T0
        assert state.exercise_start_time == T0
        assert effects == [KeepAwake(WORKOUT_WAKE_TAG, True)]

    def test_back_dates_prior_elapsed(self):
        state = started(prior_workout=600, prior_exercise=45)
        assert state.workout_timer == 600
        assert state.exercise_timer == 45
        assert session_clock.tick(state, at(10)).state.workout_timer == 610

    def test_start_when_active_is_noop(self):
        state = started()
        step = session_clock.start(state, at(50))
        assert step.state is state
        assert step.effects == []


class TestTick:

    def test_recomputes_from_timestamps(self):
        state = session_clock.tick(started(), at(125)).state
        assert state.workout_timer == 125
        assert state.exercise_timer == 125

    def test_extra_ticks_change_nothing(self):
        once = session_clock.tick(started(), at(300)).state
        many = once
        for _ in range(5):
            many = session_clock.tick(many, at(300)).state
        assert many == once

    def test_long_gap_between_ticks(self):
        state = session_clock.tick(started(), at(5)).state
        state = session_clock.tick(state, at(3 * 3600)).state
        assert state.workout_timer == 3 * 3600

    def test_inactive_tick_is_noop(self):
        state = SessionClockState()
        assert session_clock.tick(state, at(10)).state is state


# ═══════════════════════════════════════════════════════════════════════════
#  PAUSE / RESUME
# ═══════════════════════════════════════════════════════════════════════════


class TestPauseResume:

    def test_pause_freezes_values(self):
        state, effects = session_clock.pause(started(), at(100))
        assert state.is_paused
        assert state.paused_at == at(100)
        assert effects == [KeepAwake(WORKOUT_WAKE_TAG, False)]
        assert session_clock.tick(state, at(500)).state.workout_timer == 100

    def test_pause_excluded_from_elapsed(self):
        paused = session_clock.pause(started(), at(100)).state
        resumed, effects = session_clock.resume(paused, at(400))
        assert resumed.workout_timer == 100
        assert resumed.exercise_timer == 100
        assert resumed.workout_paused_time == 300
        assert effects == [KeepAwake(WORKOUT_WAKE_TAG, True)]
        assert session_clock.tick(resumed, at(410)).state.workout_timer == 110

    def test_start_timestamps_never_shift(self):
        paused = session_clock.pause(started(), at(100)).state
        resumed = session_clock.resume(paused, at(400)).state
        assert resumed.workout_start_time == T0
        assert resumed.exercise_start_time == T0

    def test_pause_at_fractional_instants_keeps_whole_seconds(self):
        state = session_clock.tick(started(), at(10.7)).state
        assert state.workout_timer == 10
        paused = session_clock.pause(state, at(10.7)).state
        resumed = session_clock.resume(paused, at(15.2)).state
        assert resumed.workout_timer == 10
        assert resumed.exercise_timer == 10
        assert session_clock.tick(resumed, at(16.1)).state.workout_timer == 11

    def test_exercise_advanced_during_pause(self):
        paused = session_clock.pause(started(), at(100)).state
        advanced = session_clock.advance_exercise(paused, at(200)).state
        resumed = session_clock.resume(advanced, at(260)).state
        assert resumed.exercise_paused_time == 60
        assert session_clock.tick(resumed, at(270)).state.exercise_timer == 10
        assert session_clock.tick(resumed, at(270)).state.workout_timer == 110

    def test_toggle(self):
        state = started()
        state = session_clock.toggle_pause(state, at(10)).state
        assert state.is_paused
        state = session_clock.toggle_pause(state, at(20)).state
        assert not state.is_paused

    def test_resume_when_not_paused_is_noop(self):
        state = started()
        assert session_clock.resume(state, at(5)).state is state

    def test_pause_when_inactive_is_noop(self):
        state = SessionClockState()
        assert session_clock.pause(state, at(5)).effects == []


# ═══════════════════════════════════════════════════════════════════════════
#  EXERCISE / RESET / DURATION
# ═══════════════════════════════════════════════════════════════════════════


class TestAdvanceExercise:

    def test_resets_exercise_only(self):
        state = session_clock.tick(started(), at(90)).state
        state = session_clock.advance_exercise(state, at(90)).state
        assert state.exercise_timer == 0
        assert state.exercise_start_time == at(90)
        state = session_clock.tick(state, at(120)).state
        assert state.exercise_timer == 30
        assert state.workout_timer == 120


class TestReset:

    def test_clears_everything(self):
        state, effects = session_clock.reset(session_clock.tick(started(), at(60)).state)
        assert state == SessionClockState()
        assert effects == [KeepAwake(WORKOUT_WAKE_TAG, False)]

    def test_reset_idle_releases_nothing(self):
        assert session_clock.reset(SessionClockState()).effects == []


class TestWorkoutDuration:

    def test_not_started(self):
        assert session_clock.workout_duration(SessionClockState(), at(10)) == 0

    def test_running(self):
        assert session_clock.workout_duration(started(), at(1800)) == 1800

    def test_paused(self):
        paused = session_clock.pause(started(), at(600)).state
        assert session_clock.workout_duration(paused, at(900)) == 600
