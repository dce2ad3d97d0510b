"""RepClock: workout timers and circuit round tracking."""

__version__ = "1.0.0"
