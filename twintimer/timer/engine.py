"""Stopwatch and countdown state machines for TwinTimer.

States
------
IDLE      Not running, nothing to remember.
RUNNING   Counting (up for the stopwatch, down for the countdown).
PAUSED    Frozen; the value at the moment of pausing is kept.

Transitions
-----------
IDLE → RUNNING       (start)
RUNNING → PAUSED     (pause)
PAUSED → RUNNING     (resume)
RUNNING | PAUSED → IDLE  (stop, or countdown reaching zero)

Every other trigger is a no-op.  Both engines recompute their value
from absolute wall-clock anchors on each tick instead of adding up
deltas, so a late or skipped tick never makes the display drift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..errors import ValidationError
from ..history.models import TimerKind
from .formatting import DEFAULT_COUNTDOWN

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 50
WARNING_THRESHOLD = timedelta(seconds=10)
ZERO = timedelta(0)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class SessionSummary:
    """What an engine reports when a run ends.

    The history store turns this into a ``TimerRecord``; an empty
    ``name`` means "generate one".
    """

    kind: TimerKind
    start_time: datetime
    end_time: datetime
    duration: timedelta
    original_target: timedelta = ZERO
    name: str = ""


# ── base ──────────────────────────────────────────────────────────────────


class _EngineBase(QObject):
    """Shared state handling and the periodic Qt tick.

    Signals
    -------
    tick(value: timedelta)
        Emitted on every tick while running and after each transition.
        Elapsed time for the stopwatch, remaining time for the countdown.
    state_changed(new_state: TimerState)
        Emitted on every state transition.
    session_finished(summary: SessionSummary)
        Emitted when a run ends, whether stopped or expired.
    """

    tick = pyqtSignal(object)
    state_changed = pyqtSignal(object)
    session_finished = pyqtSignal(object)

    kind: TimerKind

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock = datetime.now,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._clock = clock
        self._state: TimerState = TimerState.IDLE

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ── properties ────────────────────────────────────────────────────

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state == TimerState.PAUSED

    @property
    def is_idle(self) -> bool:
        return self._state == TimerState.IDLE

    @property
    def value(self) -> timedelta:
        """The number currently on display."""
        raise NotImplementedError

    # ── controls ──────────────────────────────────────────────────────

    def start(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def resume(self) -> None:
        raise NotImplementedError

    def stop(self, name: str = "") -> SessionSummary | None:
        raise NotImplementedError

    def toggle(self) -> None:
        """Start, pause or resume: the single play/pause button."""
        if self._state == TimerState.IDLE:
            self.start()
        elif self._state == TimerState.RUNNING:
            self.pause()
        else:
            self.resume()

    # ── internal ──────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        raise NotImplementedError

    def _set_state(self, new_state: TimerState) -> None:
        self._state = new_state
        self.state_changed.emit(new_state)


# ══════════════════════════════════════════════════════════════════════════
#  STOPWATCH
# ══════════════════════════════════════════════════════════════════════════


class StopwatchEngine(_EngineBase):
    """Counts up from zero across run/pause segments."""

    kind = TimerKind.STOPWATCH

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock = datetime.now,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent, clock=clock, interval_ms=interval_ms)
        # Shifted forward on resume so that now - anchor == elapsed.
        self._anchor_start: datetime | None = None
        self._elapsed: timedelta = ZERO

    @property
    def elapsed(self) -> timedelta:
        return self._elapsed

    @property
    def value(self) -> timedelta:
        return self._elapsed

    def start(self) -> None:
        if self._state != TimerState.IDLE:
            return
        self._anchor_start = self._clock()
        self._elapsed = ZERO
        logger.info("Stopwatch started")
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()
        self.tick.emit(self._elapsed)

    def pause(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        self._qt_timer.stop()
        self._elapsed = self._since_anchor(self._clock())
        self._set_state(TimerState.PAUSED)
        self.tick.emit(self._elapsed)

    def resume(self) -> None:
        if self._state != TimerState.PAUSED:
            return
        self._anchor_start = self._clock() - self._elapsed
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()

    def stop(self, name: str = "") -> SessionSummary | None:
        """End the run and report it.  Returns None when already idle."""
        if self._state == TimerState.IDLE:
            return None
        self._qt_timer.stop()
        now = self._clock()
        if self._state == TimerState.RUNNING:
            self._elapsed = self._since_anchor(now)

        summary = SessionSummary(
            kind=self.kind,
            start_time=self._anchor_start,
            end_time=now,
            duration=self._elapsed,
            name=name,
        )
        logger.info("Stopwatch stopped after %s", self._elapsed)
        self.session_finished.emit(summary)

        self._anchor_start = None
        self._elapsed = ZERO
        self._set_state(TimerState.IDLE)
        self.tick.emit(self._elapsed)
        return summary

    def _on_tick(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        self._elapsed = self._since_anchor(self._clock())
        self.tick.emit(self._elapsed)

    def _since_anchor(self, now: datetime) -> timedelta:
        return max(ZERO, now - self._anchor_start)


# ══════════════════════════════════════════════════════════════════════════
#  COUNTDOWN
# ══════════════════════════════════════════════════════════════════════════


class CountdownEngine(_EngineBase):
    """Counts down from a configured target to zero.

    Extra signals
    -------------
    near_expiry()
        Fires once per run when the remaining time first drops to
        ``WARNING_THRESHOLD`` or below.
    expired(summary: SessionSummary)
        Fires after the countdown reaches zero, once the engine is
        back in IDLE with the target restored.
    """

    near_expiry = pyqtSignal()
    expired = pyqtSignal(object)

    kind = TimerKind.COUNTDOWN

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Clock = datetime.now,
        interval_ms: int = TICK_INTERVAL_MS,
        target: timedelta = DEFAULT_COUNTDOWN,
    ) -> None:
        super().__init__(parent, clock=clock, interval_ms=interval_ms)
        if target <= ZERO:
            target = DEFAULT_COUNTDOWN
        self._original_target: timedelta = target
        self._remaining: timedelta = target
        self._anchor_end: datetime | None = None
        self._session_start: datetime | None = None
        self._warning_fired: bool = False

    # ── properties ────────────────────────────────────────────────────

    @property
    def remaining(self) -> timedelta:
        return self._remaining

    @property
    def value(self) -> timedelta:
        return self._remaining

    @property
    def original_target(self) -> timedelta:
        return self._original_target

    @property
    def is_warning(self) -> bool:
        """True when the display should flag the countdown as nearly done."""
        return ZERO < self._remaining <= WARNING_THRESHOLD

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current target."""
        if self._original_target <= ZERO:
            return 0.0
        done = (self._original_target - self._remaining) / self._original_target
        return max(0.0, min(1.0, done))

    # ── controls ──────────────────────────────────────────────────────

    def set_target(self, duration: timedelta) -> None:
        """Configure a new countdown length.

        Allowed in any state; it replaces both the target and the time
        left.  A running countdown continues from the new value.
        """
        if duration <= ZERO:
            raise ValidationError("Countdown must be longer than zero seconds")
        self._original_target = duration
        self._remaining = duration
        self._warning_fired = False
        if self._state == TimerState.RUNNING:
            self._anchor_end = self._clock() + duration
        logger.info("Countdown target set to %s", duration)
        self.tick.emit(self._remaining)

    def start(self) -> None:
        if self._state != TimerState.IDLE or self._remaining <= ZERO:
            return
        now = self._clock()
        self._session_start = now
        self._anchor_end = now + self._remaining
        self._warning_fired = False
        logger.info("Countdown started for %s", self._remaining)
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()
        self.tick.emit(self._remaining)

    def pause(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        self._qt_timer.stop()
        self._remaining = max(ZERO, self._anchor_end - self._clock())
        self._set_state(TimerState.PAUSED)
        self.tick.emit(self._remaining)

    def resume(self) -> None:
        if self._state != TimerState.PAUSED or self._remaining <= ZERO:
            return
        self._anchor_end = self._clock() + self._remaining
        self._set_state(TimerState.RUNNING)
        self._qt_timer.start()

    def stop(self, name: str = "") -> SessionSummary | None:
        """End the run early and report the time actually spent."""
        if self._state == TimerState.IDLE:
            return None
        self._qt_timer.stop()
        now = self._clock()
        if self._state == TimerState.RUNNING:
            self._remaining = max(ZERO, self._anchor_end - now)

        summary = SessionSummary(
            kind=self.kind,
            start_time=self._session_start,
            end_time=now,
            duration=self._original_target - self._remaining,
            original_target=self._original_target,
            name=name,
        )
        logger.info("Countdown stopped with %s left", self._remaining)
        self.session_finished.emit(summary)

        self._reset()
        return summary

    # ── internal ──────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        if self._state != TimerState.RUNNING:
            return
        now = self._clock()
        remaining = self._anchor_end - now
        if remaining <= ZERO:
            self._expire(now)
            return

        self._remaining = remaining
        if not self._warning_fired and self.is_warning:
            self._warning_fired = True
            self.near_expiry.emit()
        self.tick.emit(self._remaining)

    def _expire(self, now: datetime) -> None:
        # Overshoot from tick granularity still counts as the full target.
        self._qt_timer.stop()
        self._remaining = ZERO
        self.tick.emit(self._remaining)

        summary = SessionSummary(
            kind=self.kind,
            start_time=self._session_start,
            end_time=now,
            duration=self._original_target,
            original_target=self._original_target,
        )
        logger.info("Countdown of %s expired", self._original_target)
        self.session_finished.emit(summary)

        self._reset()
        self.expired.emit(summary)

    def _reset(self) -> None:
        self._remaining = self._original_target
        self._anchor_end = None
        self._session_start = None
        self._warning_fired = False
        self._set_state(TimerState.IDLE)
        self.tick.emit(self._remaining)
