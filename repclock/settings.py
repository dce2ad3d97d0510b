"""Engine settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/RepClock/settings.json
(override the directory with ``REPCLOCK_HOME``).

Usage::

    settings = load_settings()
    settings.tabata_work_seconds = 30
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path(
    os.environ.get("REPCLOCK_HOME")
    or Path.home() / "Library" / "Application Support" / "RepClock"
)
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timing ────────────────────────────────────────────────────────
    tabata_work_seconds: int = 20
    tabata_rest_seconds: int = 10
    default_rest_seconds: int = 90
    tick_interval_ms: int = 1000

    # ── feedback ──────────────────────────────────────────────────────
    haptics_enabled: bool = True
    notifications_enabled: bool = True
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── power ─────────────────────────────────────────────────────────
    keep_screen_awake: bool = True


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning("could not read %s; using defaults", SETTINGS_PATH, exc_info=True)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
