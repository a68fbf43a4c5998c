"""Tests for TimerController: recording, display updates, shutdown."""

from datetime import timedelta

import pytest

from twintimer.controller import TimerController, EXIT_REASON, MINI_EXIT_REASON
from twintimer.errors import ValidationError
from twintimer.history.models import TimerKind
from twintimer.history.store import HistoryStore
from twintimer.settings import Settings
from twintimer.timer.engine import TimerState

from helpers import SignalCollector, seconds, run_for


SW = TimerKind.STOPWATCH
CD = TimerKind.COUNTDOWN


# ═══════════════════════════════════════════════════════════════════════════
#  RECORDING
# ═══════════════════════════════════════════════════════════════════════════


class TestRecording:

    def test_stop_appends_record(self, controller, store, clock):
        controller.toggle(SW)
        clock.advance(4)
        controller.stop(SW)

        assert len(store) == 1
        record = store.records[0]
        assert record.kind is SW
        assert record.name == "Stopwatch1"
        assert record.duration == seconds(4)
        assert record.end_time - record.start_time == record.duration

    def test_default_names_per_kind(self, controller, store, clock):
        for kind in (SW, SW, CD):
            controller.toggle(kind)
            clock.advance(1)
            controller.stop(kind)
        assert [r.name for r in store.records] == [
            "Countdown1", "Stopwatch2", "Stopwatch1",
        ]

    def test_countdown_early_stop(self, controller, store, clock):
        controller.set_countdown_target(seconds(10))
        controller.toggle(CD)
        run_for(controller.countdown, clock, 3.0)
        controller.stop(CD)

        record = store.records[0]
        assert record.kind is CD
        assert record.duration == seconds(3)
        assert record.original_target == seconds(10)

    def test_countdown_expiry_recorded_once(self, controller, store, clock):
        expired = SignalCollector()
        controller.countdown_expired.connect(expired)

        controller.set_countdown_target(seconds(5))
        controller.toggle(CD)
        run_for(controller.countdown, clock, 6.0)

        assert len(store) == 1
        assert len(expired) == 1
        assert store.records[0].duration == seconds(5)
        assert controller.countdown.state == TimerState.IDLE

    def test_stop_when_idle_records_nothing(self, controller, store):
        assert controller.stop(SW) is None
        assert len(store) == 0

    def test_records_persisted(self, qapp, controller, history_path, clock):
        controller.toggle(SW)
        clock.advance(2)
        controller.stop(SW)

        reopened = HistoryStore(history_path)
        try:
            assert [r.name for r in reopened.load()] == ["Stopwatch1"]
        finally:
            reopened.close()


# ═══════════════════════════════════════════════════════════════════════════
#  DISPLAY
# ═══════════════════════════════════════════════════════════════════════════


class TestDisplay:

    def test_initial_text(self, controller):
        assert controller.display_text(SW) == "00:00:00"
        assert controller.display_text(CD) == "00:00:30"

    def test_tick_updates_display(self, controller, clock):
        c = SignalCollector()
        controller.display_changed.connect(c)
        controller.toggle(SW)
        clock.advance(65)
        controller.stopwatch._on_tick()
        assert c.last == (SW, "00:01:05", False)

    def test_format_change_reemits(self, controller):
        c = SignalCollector()
        controller.display_changed.connect(c)
        controller.set_display_format(CD, "ss")
        assert c.last == (CD, "30", False)
        assert controller.settings.countdown_format == "ss"

    def test_formats_are_independent(self, controller):
        controller.set_display_format(SW, "mm:ss")
        assert controller.display_text(SW) == "00:00"
        assert controller.display_text(CD) == "00:00:30"

    def test_warning_flag(self, controller, clock):
        c = SignalCollector()
        controller.display_changed.connect(c)
        controller.set_countdown_target(seconds(12))
        controller.toggle(CD)
        clock.advance(3)
        controller.countdown._on_tick()
        assert c.last == (CD, "00:00:09", True)
        assert controller.is_warning(CD)
        assert not controller.is_warning(SW)

    def test_near_expiry_forwarded(self, controller, clock):
        c = SignalCollector()
        controller.near_expiry.connect(c)
        controller.set_countdown_target(seconds(11))
        controller.toggle(CD)
        clock.advance(2)
        controller.countdown._on_tick()
        assert len(c) == 1

    def test_state_changed_carries_kind(self, controller):
        c = SignalCollector()
        controller.state_changed.connect(c)
        controller.toggle(CD)
        assert c.last == (CD, TimerState.RUNNING)


# ═══════════════════════════════════════════════════════════════════════════
#  COUNTDOWN INPUT
# ═══════════════════════════════════════════════════════════════════════════


class TestCountdownInput:

    def test_valid_input_applied(self, controller):
        target = controller.set_countdown_from_input("0", "1", "30", "hh:mm:ss")
        assert target == seconds(90)
        assert controller.countdown.original_target == seconds(90)
        assert controller.settings.countdown_target_seconds == 90

    def test_mode_defaults_to_settings(self, controller):
        controller.settings.countdown_input_mode = "ss"
        assert controller.set_countdown_from_input("9", "9", "45") == seconds(45)

    def test_invalid_input_leaves_engine(self, controller):
        with pytest.raises(ValidationError):
            controller.set_countdown_from_input("0", "0", "0")
        assert controller.countdown.original_target == seconds(30)
        assert controller.settings.countdown_target_seconds == 30

    def test_target_from_settings(self, qapp, store, clock):
        settings = Settings(countdown_target_seconds=90)
        ctl = TimerController(store, settings, clock=clock)
        assert ctl.countdown.original_target == seconds(90)


# ═══════════════════════════════════════════════════════════════════════════
#  SHUTDOWN
# ═══════════════════════════════════════════════════════════════════════════


class TestShutdown:

    def test_active_timers(self, controller):
        assert not controller.has_active_timers()
        controller.toggle(SW)
        assert controller.has_running_timers()
        controller.toggle(SW)
        assert not controller.has_running_timers()
        assert controller.has_active_timers()

    def test_running_and_paused_flushed(self, qapp, controller, store, history_path, clock):
        controller.toggle(SW)
        controller.set_countdown_target(seconds(60))
        controller.toggle(CD)
        clock.advance(5)
        controller.toggle(CD)  # pause countdown
        clock.advance(5)

        flushed = controller.shutdown()

        assert len(flushed) == 2
        assert not controller.has_active_timers()
        assert {r.name for r in store.records} == {EXIT_REASON}
        by_kind = {r.kind: r for r in store.records}
        assert by_kind[SW].duration == seconds(10)
        assert by_kind[CD].duration == seconds(5)

        reopened = HistoryStore(history_path)
        try:
            assert len(reopened.load()) == 2
        finally:
            reopened.close()

    def test_custom_reason(self, controller, store):
        controller.toggle(SW)
        controller.shutdown(MINI_EXIT_REASON)
        assert store.records[0].name == MINI_EXIT_REASON

    def test_idle_shutdown_records_nothing(self, controller, store):
        assert controller.shutdown() == []
        assert len(store) == 0


def test_reason_name_does_not_affect_numbering(controller, store, clock):
    controller.toggle(SW)
    controller.shutdown()
    controller.toggle(SW)
    clock.advance(1)
    controller.stop(SW)
    assert store.records[0].name == "Stopwatch1"
    assert controller.engine(SW) is controller.stopwatch
    assert controller.display_format(SW).value == "hh:mm:ss"
    assert isinstance(controller.countdown.remaining, timedelta)
