"""Tests for the wall-clock helpers."""

from datetime import timedelta

import pytest

from repclock.timer.clock import elapsed_seconds, format_time, paused_seconds, seconds_before

from helpers import T0, at


class TestElapsedSeconds:

    def test_none_start_is_zero(self):
        assert elapsed_seconds(None, at(100)) == 0

    def test_whole_seconds(self):
        assert elapsed_seconds(T0, at(90)) == 90

    def test_fractional_seconds_floor(self):
        assert elapsed_seconds(T0, at(59.999)) == 59

    def test_subtracts_paused_time(self):
        assert elapsed_seconds(T0, at(90), 30) == 60

    def test_fractional_pause_floored_once(self):
        assert elapsed_seconds(T0, at(15.2), 4.5) == 10
        assert elapsed_seconds(T0, at(15.7), 4.5) == 11

    def test_clamped_at_zero(self):
        assert elapsed_seconds(T0, at(10), 30) == 0
        assert elapsed_seconds(at(5), T0) == 0

    @pytest.mark.parametrize("seconds,paused", [(0, 0), (1, 0), (3600, 120), (86400, 5)])
    def test_pure(self, seconds, paused):
        first = elapsed_seconds(T0, at(seconds), paused)
        assert first == elapsed_seconds(T0, at(seconds), paused)
        assert first == max(0, seconds - paused)


class TestPausedSeconds:

    def test_not_paused(self):
        assert paused_seconds(None, at(10)) == 0

    def test_spans_long_suspension(self):
        assert paused_seconds(T0, at(6 * 3600)) == 6 * 3600

    def test_keeps_fractions(self):
        assert paused_seconds(at(10.7), at(15.2)) == pytest.approx(4.5)


class TestSecondsBefore:

    def test_back_dates(self):
        assert seconds_before(at(100), 40) == at(60)
        assert seconds_before(T0, 0) == T0
        assert at(100) - seconds_before(at(100), 40) == timedelta(seconds=40)


class TestFormatTime:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"), (9, "00:09"), (65, "01:05"), (3599, "59:59"), (3600, "60:00"),
    ])
    def test_padded(self, seconds, expected):
        assert format_time(seconds) == expected

    def test_unpadded(self):
        assert format_time(90, pad_minutes=False) == "1:30"

    def test_negative_is_zero(self):
        assert format_time(-5) == "00:00"
