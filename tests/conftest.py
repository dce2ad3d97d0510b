"""Shared pytest fixtures for RepClock tests."""

import os
import sys
from datetime import datetime

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from repclock.database.db import configure_engine, init_db
from repclock.feedback.dispatcher import FeedbackDispatcher
from repclock.settings import Settings
from repclock.timer.engine import WorkoutTimerEngine

from helpers import FakeClock, RecordingHaptics, RecordingKeepAwake, RecordingNotifier, T0


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def clock():
    """Manually advanced wall clock starting at ``T0``."""
    return FakeClock(T0)


@pytest.fixture
def haptics():
    return RecordingHaptics()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def keep_awake():
    return RecordingKeepAwake()


@pytest.fixture
def dispatcher(haptics, notifier, keep_awake):
    return FeedbackDispatcher(
        haptics=haptics,
        notifier=notifier,
        keep_awake=keep_awake,
        settings=Settings(),
    )


@pytest.fixture
def engine(qapp, clock, dispatcher):
    """Engine on the fake clock, not listening to the real app state."""
    eng = WorkoutTimerEngine(
        parent=None,
        dispatcher=dispatcher,
        now=clock,
        track_app_state=False,
    )
    yield eng
    eng.shutdown()
