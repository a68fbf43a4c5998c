"""History package."""

from .models import TimerKind, TimerRecord
from .store import HistoryStore, HISTORY_LIMIT, DISPLAY_LIMIT

__all__ = [
    "TimerKind",
    "TimerRecord",
    "HistoryStore",
    "HISTORY_LIMIT",
    "DISPLAY_LIMIT",
]
