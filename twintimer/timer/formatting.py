"""Duration formatting and countdown input parsing.

Display modes
-------------
``hh:mm:ss``  total hours (unbounded) : minutes : seconds
``mm:ss``     total minutes (unbounded) : seconds
``ss``        total seconds (unbounded)

Every field is zero-padded to at least two digits.  Fractions of a
second are truncated, never rounded, so a running display only flips
once the full second has elapsed.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from ..errors import ValidationError


class DisplayFormat(Enum):
    HMS = "hh:mm:ss"
    MS = "mm:ss"
    S = "ss"

    @classmethod
    def parse(cls, value: DisplayFormat | str | None) -> DisplayFormat:
        """Coerce *value* to a member, falling back to ``HMS``."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.HMS


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_COUNTDOWN = timedelta(seconds=30)
COMPONENT_MAX = 60  # inclusive; 60 minutes/seconds are accepted as-is


def _whole_seconds(duration: timedelta | float | int) -> int:
    if isinstance(duration, timedelta):
        total = duration.total_seconds()
    else:
        total = float(duration)
    return max(0, int(total))


def format_duration(
    duration: timedelta | float | int,
    mode: DisplayFormat | str = DisplayFormat.HMS,
) -> str:
    """Render *duration* for the given display mode.

    >>> format_duration(timedelta(seconds=3661))
    '01:01:01'
    >>> format_duration(125, "mm:ss")
    '02:05'
    """
    total = _whole_seconds(duration)
    fmt = DisplayFormat.parse(mode)

    if fmt is DisplayFormat.S:
        return f"{total:02d}"
    if fmt is DisplayFormat.MS:
        minutes, seconds = divmod(total, 60)
        return f"{minutes:02d}:{seconds:02d}"

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


# ── countdown input ───────────────────────────────────────────────────────


def _parse_component(text: str, label: str) -> int:
    try:
        value = int(str(text).strip())
    except ValueError:
        raise ValidationError(f"{label} must be a whole number") from None
    if value < 0 or value > COMPONENT_MAX:
        raise ValidationError(
            f"{label} must be between 0 and {COMPONENT_MAX}"
        )
    return value


def parse_countdown_input(
    hours: str,
    minutes: str,
    seconds: str,
    mode: DisplayFormat | str = DisplayFormat.HMS,
) -> timedelta:
    """Turn the countdown input fields into a target duration.

    Only the fields visible in *mode* are read: ``mm:ss`` ignores
    *hours*, ``ss`` ignores both *hours* and *minutes*.  An unrecognised
    mode string yields the 30 second default.

    Raises ``ValidationError`` for non-numeric text, a component outside
    0–60, or a total that is not positive.
    """
    if isinstance(mode, str) and mode not in {m.value for m in DisplayFormat}:
        return DEFAULT_COUNTDOWN

    fmt = DisplayFormat.parse(mode)
    h = m = s = 0
    if fmt is DisplayFormat.HMS:
        h = _parse_component(hours, "Hours")
    if fmt in (DisplayFormat.HMS, DisplayFormat.MS):
        m = _parse_component(minutes, "Minutes")
    s = _parse_component(seconds, "Seconds")

    target = timedelta(hours=h, minutes=m, seconds=s)
    if target <= timedelta(0):
        raise ValidationError("Countdown must be longer than zero seconds")
    return target


def split_duration(duration: timedelta) -> tuple[int, int, int]:
    """(hours, minutes, seconds) of *duration*, for pre-filling inputs."""
    hours, rest = divmod(_whole_seconds(duration), 3600)
    minutes, seconds = divmod(rest, 60)
    return hours, minutes, seconds
