"""Side-effect delivery: haptics, notifications, keep-awake."""

from .dispatcher import FeedbackDispatcher, HapticsPort, KeepAwakePort, NotifierPort

__all__ = ["FeedbackDispatcher", "HapticsPort", "KeepAwakePort", "NotifierPort"]
