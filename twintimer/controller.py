"""Glue between the two timer engines, history and the UI.

The controller owns one ``StopwatchEngine``, one ``CountdownEngine``
and the ``HistoryStore``.  Windows talk to it instead of to the engines
so the main window and the mini window always agree on what is shown.

Signals
-------
display_changed(kind: TimerKind, text: str, warning: bool)
    Formatted value for *kind*, on every tick, transition and display
    format change.
state_changed(kind: TimerKind, state: TimerState)
countdown_expired(summary: SessionSummary)
near_expiry()
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from PyQt6.QtCore import QObject, pyqtSignal

from .history.models import TimerKind
from .history.store import HistoryStore
from .settings import Settings
from .timer.engine import (
    CountdownEngine, SessionSummary, StopwatchEngine,
    TICK_INTERVAL_MS, Clock,
)
from .timer.formatting import DisplayFormat, format_duration, parse_countdown_input

logger = logging.getLogger(__name__)

EXIT_REASON = "Auto-saved on exit"
MINI_EXIT_REASON = "Auto-saved on mini-mode exit"

_FORMAT_FIELDS: dict[TimerKind, str] = {
    TimerKind.STOPWATCH: "stopwatch_format",
    TimerKind.COUNTDOWN: "countdown_format",
}


class TimerController(QObject):
    """Drives both engines and records finished sessions."""

    display_changed = pyqtSignal(object, str, bool)
    state_changed = pyqtSignal(object, object)
    countdown_expired = pyqtSignal(object)
    near_expiry = pyqtSignal()

    def __init__(
        self,
        history: HistoryStore,
        settings: Settings | None = None,
        parent: QObject | None = None,
        *,
        clock: Clock = datetime.now,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._history = history
        self._settings = settings if settings is not None else Settings()

        target = timedelta(seconds=max(0, self._settings.countdown_target_seconds))
        self.stopwatch = StopwatchEngine(self, clock=clock, interval_ms=interval_ms)
        self.countdown = CountdownEngine(
            self, clock=clock, interval_ms=interval_ms, target=target,
        )
        self._engines = {
            TimerKind.STOPWATCH: self.stopwatch,
            TimerKind.COUNTDOWN: self.countdown,
        }

        for kind, engine in self._engines.items():
            engine.session_finished.connect(self._on_session_finished)
            engine.tick.connect(lambda _value, k=kind: self._push_display(k))
            engine.state_changed.connect(
                lambda state, k=kind: self.state_changed.emit(k, state)
            )
        self.countdown.expired.connect(self.countdown_expired.emit)
        self.countdown.near_expiry.connect(self.near_expiry.emit)

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def settings(self) -> Settings:
        return self._settings

    def engine(self, kind: TimerKind) -> StopwatchEngine | CountdownEngine:
        return self._engines[kind]

    def display_format(self, kind: TimerKind) -> DisplayFormat:
        return DisplayFormat.parse(getattr(self._settings, _FORMAT_FIELDS[kind]))

    def display_text(self, kind: TimerKind) -> str:
        return format_duration(self._engines[kind].value, self.display_format(kind))

    def is_warning(self, kind: TimerKind) -> bool:
        return kind is TimerKind.COUNTDOWN and self.countdown.is_warning

    def is_running(self, kind: TimerKind) -> bool:
        return self._engines[kind].is_running

    def is_paused(self, kind: TimerKind) -> bool:
        return self._engines[kind].is_paused

    def has_running_timers(self) -> bool:
        return any(e.is_running for e in self._engines.values())

    def has_active_timers(self) -> bool:
        """True if either engine is running or paused."""
        return any(not e.is_idle for e in self._engines.values())

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def toggle(self, kind: TimerKind) -> None:
        self._engines[kind].toggle()

    def stop(self, kind: TimerKind) -> SessionSummary | None:
        return self._engines[kind].stop()

    def set_display_format(
        self, kind: TimerKind, fmt: DisplayFormat | str,
    ) -> None:
        setattr(self._settings, _FORMAT_FIELDS[kind], DisplayFormat.parse(fmt).value)
        self._push_display(kind)

    def set_countdown_target(self, duration: timedelta) -> None:
        """Raises ``ValidationError`` when *duration* is not positive."""
        self.countdown.set_target(duration)
        self._settings.countdown_target_seconds = int(duration.total_seconds())

    def set_countdown_from_input(
        self,
        hours: str,
        minutes: str,
        seconds: str,
        mode: DisplayFormat | str | None = None,
    ) -> timedelta:
        """Parse the countdown input fields and apply them.

        Raises ``ValidationError`` without touching the engine when the
        input is rejected.
        """
        if mode is None:
            mode = self._settings.countdown_input_mode
        target = parse_countdown_input(hours, minutes, seconds, mode)
        self.set_countdown_target(target)
        return target

    def refresh(self) -> None:
        """Re-emit the display for both timers."""
        for kind in self._engines:
            self._push_display(kind)

    def shutdown(self, reason: str = EXIT_REASON) -> list[SessionSummary]:
        """Stop any active engine, record it under *reason*, then save.

        Returns the summaries of the interrupted sessions.
        """
        flushed: list[SessionSummary] = []
        for engine in self._engines.values():
            summary = engine.stop(name=reason)
            if summary is not None:
                flushed.append(summary)
        self._history.save()
        logger.info("Shutdown flushed %d active session(s)", len(flushed))
        return flushed

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_session_finished(self, summary: SessionSummary) -> None:
        self._history.add(
            summary.kind,
            summary.start_time,
            summary.end_time,
            summary.duration,
            original_target=summary.original_target,
            name=summary.name,
        )

    def _push_display(self, kind: TimerKind) -> None:
        self.display_changed.emit(
            kind, self.display_text(kind), self.is_warning(kind),
        )
