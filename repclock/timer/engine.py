"""Qt host for the workout timers.

The timer modules are pure functions over frozen state; this engine owns
the current states, drives them from one ``QTimer``, hands their side
effects to a :class:`~repclock.feedback.dispatcher.FeedbackDispatcher`,
and routes circuit events to the round controller.

Timers
------
session   workout + current-exercise count-up (linear workouts)
rest      countdown between sets
circuit   format-aware block timer plus its round controller

The ``QTimer`` runs only while at least one timer is running.  Ticks
never increment anything: each one recomputes from timestamps, so a
late or missed tick (or a suspended app) costs nothing.  When the
application returns to the foreground the :class:`ResyncHandler` ticks
every timer once.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from PyQt6.QtCore import QObject, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QGuiApplication

from ..circuit.models import CircuitBlock
from ..circuit.progression import CircuitLogSink, RoundProgressionController
from ..feedback.dispatcher import FeedbackDispatcher
from ..settings import Settings
from . import circuit_timer, rest_timer, session_clock
from .circuit_timer import BlockTimerKind
from .rest_timer import RestTimerState
from .resync import AppState, ResyncHandler
from .session_clock import SessionClockState
from .state import Step, TimerEvent, TimerState, events_in

logger = logging.getLogger(__name__)


_QT_APP_STATES: dict[Qt.ApplicationState, AppState] = {
    Qt.ApplicationState.ApplicationActive: AppState.ACTIVE,
    Qt.ApplicationState.ApplicationInactive: AppState.INACTIVE,
    Qt.ApplicationState.ApplicationHidden: AppState.BACKGROUND,
    Qt.ApplicationState.ApplicationSuspended: AppState.BACKGROUND,
}


class WorkoutTimerEngine(QObject):
    """Drives the session clock, rest timer and circuit timer.

    Signals
    -------
    workout_tick(workout_seconds: int, exercise_seconds: int)
        After every session-clock update.
    rest_tick(countdown: int)
        After every rest-timer update.
    rest_completed()
        Once when the rest countdown reaches zero.
    circuit_tick(display_seconds: int)
        After every circuit-timer update; the value is what the dial
        shows (countdown for capped formats, elapsed otherwise).
    circuit_event(event: TimerEvent)
        Every lifecycle event the circuit timer emits.
    round_completed(round_number: int)
        When the controller closes a round (by hand or by the clock).
    circuit_completed(metrics: CircuitMetrics)
        When the block is finished.
    """

    workout_tick = pyqtSignal(int, int)
    rest_tick = pyqtSignal(int)
    rest_completed = pyqtSignal()
    circuit_tick = pyqtSignal(int)
    circuit_event = pyqtSignal(object)
    round_completed = pyqtSignal(int)
    circuit_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        dispatcher: FeedbackDispatcher | None = None,
        log_sink: CircuitLogSink | None = None,
        now: Callable[[], datetime] = datetime.now,
        track_app_state: bool = True,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self._settings = settings or Settings()
        self._dispatcher = dispatcher or FeedbackDispatcher(settings=self._settings)
        self._log_sink = log_sink
        self._now = now

        # ── timer states ──────────────────────────────────────────────
        self._session = SessionClockState()
        self._rest = RestTimerState(
            target_duration=self._settings.default_rest_seconds,
            countdown=self._settings.default_rest_seconds,
        )
        self._circuit = TimerState()
        self._kind: BlockTimerKind | None = None
        self._controller: RoundProgressionController | None = None

        # ── foreground resync ─────────────────────────────────────────
        self._resync = ResyncHandler()
        self._resync.register("session", self._tick_session)
        self._resync.register("rest", self._tick_rest)
        self._resync.register("circuit", self._tick_circuit)

        self._app = QGuiApplication.instance() if track_app_state else None
        if self._app is not None:
            self._app.applicationStateChanged.connect(self._on_qt_app_state)

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(self._settings.tick_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def session_state(self) -> SessionClockState:
        return self._session

    @property
    def rest_state(self) -> RestTimerState:
        return self._rest

    @property
    def circuit_state(self) -> TimerState:
        return self._circuit

    @property
    def timer_kind(self) -> BlockTimerKind | None:
        return self._kind

    @property
    def controller(self) -> RoundProgressionController | None:
        return self._controller

    @property
    def dispatcher(self) -> FeedbackDispatcher:
        return self._dispatcher

    @property
    def resync_handler(self) -> ResyncHandler:
        return self._resync

    @property
    def is_ticking(self) -> bool:
        """True while the interval timer is scheduled."""
        return self._qt_timer.isActive()

    @property
    def circuit_display_time(self) -> int:
        if self._kind is None:
            return 0
        return circuit_timer.display_time(self._kind, self._circuit)

    # ══════════════════════════════════════════════════════════════════
    #  SESSION CLOCK
    # ══════════════════════════════════════════════════════════════════

    def start_workout(self, prior_workout: int = 0, prior_exercise: int = 0) -> None:
        self._apply_session(session_clock.start(
            self._session, self._now(), prior_workout, prior_exercise,
        ))

    def toggle_workout_pause(self) -> None:
        self._apply_session(session_clock.toggle_pause(self._session, self._now()))

    def pause_workout(self) -> None:
        self._apply_session(session_clock.pause(self._session, self._now()))

    def resume_workout(self) -> None:
        self._apply_session(session_clock.resume(self._session, self._now()))

    def next_exercise(self) -> None:
        self._apply_session(session_clock.advance_exercise(self._session, self._now()))

    def reset_workout(self) -> None:
        self._apply_session(session_clock.reset(self._session))

    def workout_duration(self) -> int:
        return session_clock.workout_duration(self._session, self._now())

    # ══════════════════════════════════════════════════════════════════
    #  REST TIMER
    # ══════════════════════════════════════════════════════════════════

    def start_rest(self, seconds: int | None = None) -> None:
        target = self._rest_target(seconds)
        self._apply_rest(rest_timer.start(self._rest, target, self._now()))

    def toggle_rest(self, seconds: int | None = None) -> None:
        target = self._rest_target(seconds)
        self._apply_rest(rest_timer.start_pause(self._rest, target, self._now()))

    def reset_rest(self) -> None:
        self._apply_rest(rest_timer.reset(self._rest))

    def restart_rest(self, seconds: int | None = None) -> None:
        target = self._rest_target(seconds)
        self._apply_rest(rest_timer.restart(self._rest, target, self._now()))

    def cancel_rest(self) -> None:
        self._apply_rest(rest_timer.cancel(self._rest))

    def cancel_rest_to_zero(self) -> None:
        self._apply_rest(rest_timer.cancel_to_zero(self._rest))

    def _rest_target(self, seconds: int | None) -> int:
        if seconds is not None:
            return seconds
        return self._rest.target_duration or self._settings.default_rest_seconds

    # ══════════════════════════════════════════════════════════════════
    #  CIRCUIT
    # ══════════════════════════════════════════════════════════════════

    def enter_block(self, block: CircuitBlock, *, allow_partial_rounds: bool = True) -> None:
        """Set up the timer and a fresh round controller for *block*.

        Whatever circuit was running before is stopped without logging.
        """
        if self._circuit.is_running:
            self._dispatcher.dispatch(circuit_timer.stop(self._circuit).effects)

        self._kind = circuit_timer.timer_kind_for(
            block.type,
            time_cap_minutes=block.time_cap_minutes,
            rounds=block.target_rounds,
            work_interval=self._settings.tabata_work_seconds,
            rest_interval=self._settings.tabata_rest_seconds,
        )
        self._controller = RoundProgressionController(
            block,
            allow_partial_rounds=allow_partial_rounds,
            log_sink=self._log_sink,
        )
        self._circuit = TimerState()
        logger.info("entered block %s (%s)", block.id, block.type.value)
        self._sync_qt_timer()
        self.circuit_tick.emit(self.circuit_display_time)

    def toggle_circuit(self) -> None:
        if self._kind is None:
            return
        self._apply_circuit(circuit_timer.start_pause(self._kind, self._circuit, self._now()))

    def reset_circuit(self, *, confirmed: bool = False) -> None:
        """Zero the circuit timer; ignored unless *confirmed*."""
        self._apply_circuit(circuit_timer.reset(self._circuit, confirmed=confirmed))

    def complete_round(self, notes: str = "") -> bool:
        """The athlete's "complete round" button."""
        if self._controller is None:
            return False
        now = self._now()
        self._tick_circuit(now)
        return self._route_controller(self._controller.complete_round(now, notes))

    def start_additional_round(self) -> bool:
        if self._controller is None:
            return False
        return self._controller.start_additional_round()

    def skip_round(self, reason: str = "") -> bool:
        if self._controller is None:
            return False
        return self._controller.skip_round(reason)

    def update_exercise_reps(self, exercise_id: int, reps: int) -> bool:
        if self._controller is None:
            return False
        return self._controller.update_exercise_reps(exercise_id, reps)

    def update_exercise_weight(self, exercise_id: int, weight: float) -> bool:
        if self._controller is None:
            return False
        return self._controller.update_exercise_weight(exercise_id, weight)

    def complete_circuit(self, notes: str = "") -> bool:
        """Finish the block by hand: stop the clock, then log the session."""
        if self._controller is None or not self._controller.can_complete_circuit:
            return False
        now = self._now()
        self._tick_circuit(now)
        if self._controller.session.is_completed:
            # the catch-up tick finished it already
            if notes:
                self._controller.session.notes = notes
            return True
        self._apply_circuit(circuit_timer.stop(self._circuit))
        return self._route_controller(self._controller.complete_circuit(now, notes))

    # ══════════════════════════════════════════════════════════════════
    #  APP STATE
    # ══════════════════════════════════════════════════════════════════

    def set_app_state(self, app_state: AppState) -> None:
        """Feed a foreground/background transition to the resync handler."""
        effects = self._resync.on_app_state_change(app_state, self._now())
        if effects:
            logger.debug("resync produced %d effect(s)", len(effects))

    def _on_qt_app_state(self, qt_state: Qt.ApplicationState) -> None:
        self.set_app_state(_QT_APP_STATES.get(qt_state, AppState.BACKGROUND))

    def shutdown(self) -> None:
        """Stop ticking and release every wake lock."""
        self._qt_timer.stop()
        if self._app is not None:
            try:
                self._app.applicationStateChanged.disconnect(self._on_qt_app_state)
            except TypeError:
                pass
            self._app = None
        self._dispatcher.release_all()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: tick
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        now = self._now()
        self._tick_session(now)
        self._tick_rest(now)
        self._tick_circuit(now)

    def _tick_session(self, now: datetime) -> list:
        if not self._session.is_running:
            return []
        return self._apply_session(session_clock.tick(self._session, now))

    def _tick_rest(self, now: datetime) -> list:
        if not self._rest.timer.is_running:
            return []
        return self._apply_rest(rest_timer.tick(self._rest, now))

    def _tick_circuit(self, now: datetime) -> list:
        if self._kind is None or not self._circuit.is_running:
            return []
        return self._apply_circuit(circuit_timer.tick(self._kind, self._circuit, now), now)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: applying steps
    # ══════════════════════════════════════════════════════════════════

    def _apply_session(self, step: Step) -> list:
        self._session = step.state
        self._dispatcher.dispatch(step.effects)
        self._sync_qt_timer()
        self.workout_tick.emit(self._session.workout_timer, self._session.exercise_timer)
        return step.effects

    def _apply_rest(self, step: Step) -> list:
        self._rest = step.state
        self._dispatcher.dispatch(step.effects)
        self._sync_qt_timer()
        self.rest_tick.emit(self._rest.countdown)
        if events_in(step.effects, TimerEvent.COMPLETE):
            logger.info("rest complete (%ss)", self._rest.target_duration)
            self.rest_completed.emit()
        return step.effects

    def _apply_circuit(self, step: Step, now: datetime | None = None) -> list:
        now = now or self._now()
        self._circuit = step.state
        if self._controller is not None:
            # round times are read from the timer, so hand it over first
            self._controller.update_timer(self._circuit, now)
        self._dispatcher.dispatch(step.effects)
        self._sync_qt_timer()
        self.circuit_tick.emit(self.circuit_display_time)

        for event in events_in(step.effects):
            self.circuit_event.emit(event.kind)
            if self._controller is None:
                continue
            if event.kind is TimerEvent.COMPLETE_ROUND:
                self._route_controller(
                    self._controller.complete_round(now, round_number=event.round_number)
                )
            elif event.kind is TimerEvent.COMPLETE:
                self._route_controller(
                    self._controller.complete_circuit(now, timer_finished=True)
                )
        return step.effects

    def _route_controller(self, effects: list) -> bool:
        """Deliver controller output; True when it did anything."""
        if not effects:
            return False
        self._dispatcher.dispatch(effects)
        for event in events_in(effects):
            if event.kind is TimerEvent.COMPLETE_ROUND:
                self.round_completed.emit(event.round_number)
            elif event.kind is TimerEvent.COMPLETE:
                self._circuit = replace(self._controller.session.timer, is_completed=True)
                self._sync_qt_timer()
                self.circuit_completed.emit(self._controller.metrics)
        return True

    def _sync_qt_timer(self) -> None:
        running = (
            self._session.is_running
            or self._rest.timer.is_running
            or self._circuit.is_running
        )
        if running and not self._qt_timer.isActive():
            self._qt_timer.start()
        elif not running and self._qt_timer.isActive():
            self._qt_timer.stop()
