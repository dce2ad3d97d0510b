"""Shared test helpers for RepClock."""

from datetime import datetime, timedelta

from repclock.circuit.models import BlockExercise, CircuitBlock
from repclock.timer.state import Event, Haptic, Notify, TimerEvent

T0 = datetime(2024, 3, 4, 7, 30, 0)


def at(seconds: float) -> datetime:
    """The instant *seconds* after ``T0``."""
    return T0 + timedelta(seconds=seconds)


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Callable ``now()`` that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


# ── recording collaborators ──────────────────────────────────────────────


class RecordingHaptics:
    def __init__(self):
        self.styles: list = []

    def impact(self, style):
        self.styles.append(style)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def notify(self, title, body, sound):
        self.sent.append((title, body, sound))

    @property
    def titles(self) -> list[str]:
        return [title for title, _, _ in self.sent]


class RecordingKeepAwake:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def activate(self, tag):
        self.calls.append(("activate", tag))

    def deactivate(self, tag):
        self.calls.append(("deactivate", tag))


class Exploding:
    """Collaborator whose every method raises."""

    def __getattr__(self, name):
        def boom(*args, **kwargs):
            raise RuntimeError(f"{name} unavailable")
        return boom


# ── effect helpers ───────────────────────────────────────────────────────


def kinds(effects) -> list[TimerEvent]:
    return [e.kind for e in effects if isinstance(e, Event)]


def haptic_styles(effects) -> list:
    return [e.style for e in effects if isinstance(e, Haptic)]


def notifications(effects) -> list[str]:
    return [e.title for e in effects if isinstance(e, Notify)]


# ── blocks ───────────────────────────────────────────────────────────────


def make_block(block_type="circuit", *, rounds=None, time_cap_minutes=None,
               block_id=7, n_exercises=2, reps=10) -> CircuitBlock:
    return CircuitBlock(
        id=block_id,
        block_type=block_type,
        name=f"{block_type} block",
        exercises=tuple(
            BlockExercise(id=100 + i, exercise_id=200 + i, reps=reps, weight=None)
            for i in range(n_exercises)
        ),
        rounds=rounds,
        time_cap_minutes=time_cap_minutes,
    )
