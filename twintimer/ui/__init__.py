"""UI package."""

from .timer_panel import TimerPanel, StopwatchPanel, CountdownPanel
from .mini_window import MiniTimerWindow
from .history_panel import HistoryPanel

__all__ = [
    "TimerPanel",
    "StopwatchPanel",
    "CountdownPanel",
    "MiniTimerWindow",
    "HistoryPanel",
]
