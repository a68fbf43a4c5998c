"""Shared test helpers for TwinTimer."""

from datetime import datetime, timedelta


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock the tests move by hand."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        self.now += timedelta(seconds=seconds, **kwargs)
        return self.now


def seconds(n: float) -> timedelta:
    return timedelta(seconds=n)


def run_for(engine, clock: FakeClock, total: float, step: float = 0.05) -> None:
    """Advance *clock* by *total* seconds, ticking *engine* every *step*."""
    steps = round(total / step)
    for _ in range(steps):
        clock.advance(step)
        engine._on_tick()
