"""Exception types shared across TwinTimer.

Every error here is recoverable: the UI reports it and carries on.
"""

from __future__ import annotations


class TwinTimerError(Exception):
    """Base class for all TwinTimer errors."""


class ValidationError(TwinTimerError, ValueError):
    """Countdown input was non-numeric, out of range, or not positive."""


class PersistenceError(TwinTimerError):
    """The history file could not be read or written."""


class RecordNotFoundError(TwinTimerError, KeyError):
    """A history record id no longer exists."""

    def __init__(self, record_id: str) -> None:
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"record {self.record_id} not found"
