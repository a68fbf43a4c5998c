"""Application settings with JSON persistence.

Settings live next to the history file:
    ~/Library/Application Support/TwinTimer/settings.json   (macOS)
    %APPDATA%/TwinTimer/settings.json                        (Windows)
    ~/.local/share/TwinTimer/settings.json                   (elsewhere)

Usage::

    settings = load_settings()
    settings.stopwatch_format = "mm:ss"
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)


def _default_data_dir() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "TwinTimer"
    if sys.platform == "win32" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"]) / "TwinTimer"
    return Path.home() / ".local" / "share" / "TwinTimer"


APP_DATA_DIR = _default_data_dir()
SETTINGS_PATH = APP_DATA_DIR / "settings.json"
HISTORY_PATH = APP_DATA_DIR / "history.db"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── display ───────────────────────────────────────────────────────
    stopwatch_format: str = "hh:mm:ss"
    countdown_format: str = "hh:mm:ss"
    countdown_input_mode: str = "hh:mm:ss"

    # ── countdown ─────────────────────────────────────────────────────
    countdown_target_seconds: int = 30

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── windows ───────────────────────────────────────────────────────
    mini_always_on_top: bool = True
    mini_x: int | None = None
    mini_y: int | None = None
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 460
    window_height: int = 760


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed settings file %s", path)
        return Settings()
    # Only use keys that exist in the dataclass, with values of the right type
    defaults = Settings()
    filtered = {}
    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        if not _matches_default(getattr(defaults, f.name), value):
            logger.warning(
                "Ignoring setting %s=%r in %s: wrong type", f.name, value, path,
            )
            continue
        filtered[f.name] = value
    return Settings(**filtered)


def _matches_default(default: object, value: object) -> bool:
    """True if *value* has the JSON type the field's default implies."""
    if isinstance(default, bool):
        return isinstance(value, bool)
    if default is None or isinstance(default, int):
        # Optional positions default to None but hold ints.
        if value is None:
            return default is None
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, type(default))


def save_settings(settings: Settings, path: Path = SETTINGS_PATH) -> bool:
    """Write settings to disk as JSON.  Returns False if the write failed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(asdict(settings), indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        logger.error("Could not save settings to %s: %s", path, exc)
        return False
    return True
