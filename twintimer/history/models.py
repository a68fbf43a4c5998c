"""History record value object and its SQLAlchemy mapping."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Interval
from sqlalchemy.orm import DeclarativeBase


class TimerKind(Enum):
    STOPWATCH = "stopwatch"
    COUNTDOWN = "countdown"

    @property
    def label(self) -> str:
        """Human-facing prefix, also used for auto-generated names."""
        return _KIND_LABELS[self]


_KIND_LABELS: dict[TimerKind, str] = {
    TimerKind.STOPWATCH: "Stopwatch",
    TimerKind.COUNTDOWN: "Countdown",
}


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass
class TimerRecord:
    """One completed (or externally terminated) timing session.

    Everything except ``name`` is fixed once the record is stored.
    """

    kind: TimerKind
    start_time: datetime
    end_time: datetime
    duration: timedelta
    original_target: timedelta = timedelta(0)
    name: str = ""
    id: str = field(default_factory=new_record_id)

    def to_row(self, position: int) -> RecordRow:
        return RecordRow(
            id=self.id,
            position=position,
            kind=self.kind.value,
            start_time=self.start_time,
            end_time=self.end_time,
            duration=self.duration,
            original_target=self.original_target,
            name=self.name,
        )

    @classmethod
    def from_row(cls, row: RecordRow) -> TimerRecord:
        return cls(
            kind=TimerKind(row.kind),
            start_time=row.start_time,
            end_time=row.end_time,
            duration=row.duration,
            original_target=row.original_target or timedelta(0),
            name=row.name or "",
            id=row.id,
        )


# ── ORM ───────────────────────────────────────────────────────────────────


class Base(DeclarativeBase):
    pass


class RecordRow(Base):
    """Persisted form of a ``TimerRecord``.  ``position`` 0 is newest."""

    __tablename__ = "timer_records"

    id = Column(String(32), primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # stopwatch | countdown
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    duration = Column(Interval, nullable=False)
    original_target = Column(Interval, nullable=False, default=timedelta(0))
    name = Column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return (
            f"<RecordRow id={self.id} kind={self.kind} "
            f"position={self.position} name={self.name!r}>"
        )
