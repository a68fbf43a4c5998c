"""Tests for settings persistence."""

import json

from twintimer.controller import TimerController
from twintimer.history.store import HistoryStore
from twintimer.settings import Settings, load_settings, save_settings


def test_defaults():
    s = Settings()
    assert s.stopwatch_format == "hh:mm:ss"
    assert s.countdown_format == "hh:mm:ss"
    assert s.countdown_target_seconds == 30
    assert s.mini_always_on_top is True
    assert s.mini_x is None


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "nope.json") == Settings()


def test_round_trip(tmp_path):
    path = tmp_path / "cfg" / "settings.json"
    s = Settings(stopwatch_format="mm:ss", countdown_target_seconds=90, mini_x=12, mini_y=34)
    assert save_settings(s, path) is True
    assert load_settings(path) == s


def test_unknown_keys_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"countdown_format": "ss", "theme": "neon"}))
    s = load_settings(path)
    assert s.countdown_format == "ss"
    assert not hasattr(s, "theme")


def test_wrong_typed_values_dropped(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "countdown_target_seconds": "45",
        "window_width": "wide",
        "sound_enabled": 1,
        "mini_x": True,
        "stopwatch_format": 3,
        "window_height": None,
        "mini_y": 120,
        "countdown_format": "ss",
    }))
    s = load_settings(path)
    defaults = Settings()
    assert s.countdown_target_seconds == defaults.countdown_target_seconds
    assert s.window_width == defaults.window_width
    assert s.window_height == defaults.window_height
    assert s.sound_enabled is defaults.sound_enabled
    assert s.mini_x is None
    assert s.stopwatch_format == defaults.stopwatch_format
    assert s.mini_y == 120
    assert s.countdown_format == "ss"


def test_wrong_typed_target_does_not_break_controller(qapp, tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"countdown_target_seconds": "45"}))
    store = HistoryStore(tmp_path / "history.db")
    try:
        ctl = TimerController(store, load_settings(path))
        assert ctl.countdown.original_target.total_seconds() == 30
    finally:
        store.close()


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path) == Settings()


def test_non_object_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]")
    assert load_settings(path) == Settings()


def test_save_failure_returns_false(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    assert save_settings(Settings(), blocker / "settings.json") is False
