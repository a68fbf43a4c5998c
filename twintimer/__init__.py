"""TwinTimer: a stopwatch and a countdown timer with session history."""

__version__ = "0.1.0"
