"""Timer package."""

from .engine import (
    StopwatchEngine,
    CountdownEngine,
    SessionSummary,
    TimerState,
    TICK_INTERVAL_MS,
    WARNING_THRESHOLD,
)
from .formatting import (
    DisplayFormat,
    DEFAULT_COUNTDOWN,
    format_duration,
    parse_countdown_input,
)

__all__ = [
    "StopwatchEngine",
    "CountdownEngine",
    "SessionSummary",
    "TimerState",
    "TICK_INTERVAL_MS",
    "WARNING_THRESHOLD",
    "DisplayFormat",
    "DEFAULT_COUNTDOWN",
    "format_duration",
    "parse_countdown_input",
]
