"""Persisted, newest-first list of timer records.

The in-memory list is authoritative.  Every mutation is followed by a
synchronous write of the whole list, so the file always reflects the
last known state (or the last state that could be written).

Signals
-------
changed()
    Emitted after any mutation of the in-memory list.
load_failed(message: str)
    The history file existed but could not be read.  The store starts
    empty and the broken file is moved aside.
save_failed(message: str)
    A write failed.  The in-memory list is kept as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal
from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError, RecordNotFoundError
from .db import (
    create_history_engine, create_session_factory, init_schema, session_scope,
)
from .models import RecordRow, TimerKind, TimerRecord

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 1000
DISPLAY_LIMIT = 50


def is_auto_name(name: str, kind: TimerKind) -> bool:
    """True for names like ``Stopwatch3`` that were generated, not typed."""
    prefix = kind.label
    return (
        name.startswith(prefix)
        and len(name) > len(prefix)
        and name[len(prefix)].isdigit()
    )


class HistoryStore(QObject):
    """Owns the record list and its SQLite file."""

    changed = pyqtSignal()
    load_failed = pyqtSignal(str)
    save_failed = pyqtSignal(str)

    def __init__(self, path: Path, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._path = Path(path)
        self._records: list[TimerRecord] = []
        self._engine = create_history_engine(self._path)
        self._factory = create_session_factory(self._engine)

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def path(self) -> Path:
        return self._path

    @property
    def records(self) -> list[TimerRecord]:
        """Newest-first copy of the full history."""
        return list(self._records)

    def recent(self, limit: int = DISPLAY_LIMIT) -> list[TimerRecord]:
        return self._records[:limit]

    def get(self, record_id: str) -> TimerRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def auto_name(self, kind: TimerKind) -> str:
        """Next sequential default name for *kind*, e.g. ``Countdown4``."""
        count = sum(
            1 for r in self._records
            if r.kind is kind and (not r.name or is_auto_name(r.name, kind))
        )
        return f"{kind.label}{count + 1}"

    # ══════════════════════════════════════════════════════════════════
    #  PERSISTENCE
    # ══════════════════════════════════════════════════════════════════

    def load(self) -> list[TimerRecord]:
        """Replace the in-memory list with the file's contents.

        A missing file is an empty history.  An unreadable one is too,
        after a warning.
        """
        if not self._path.exists():
            self._records = []
            self.changed.emit()
            return self.records

        try:
            self._records = self._read()
        except PersistenceError as exc:
            logger.warning("Could not load history from %s: %s", self._path, exc)
            self._records = []
            self._quarantine()
            self.load_failed.emit(str(exc))
        else:
            logger.info("Loaded %d history records", len(self._records))

        self.changed.emit()
        return self.records

    def save(self) -> bool:
        """Write the whole list.  Returns False (and signals) on failure."""
        try:
            self._write()
        except PersistenceError as exc:
            logger.error("Could not save history to %s: %s", self._path, exc)
            self.save_failed.emit(str(exc))
            return False
        return True

    def close(self) -> None:
        """Release the database connection pool."""
        self._engine.dispose()

    def _read(self) -> list[TimerRecord]:
        try:
            init_schema(self._engine)
            with session_scope(self._factory) as db:
                rows = db.query(RecordRow).order_by(RecordRow.position).all()
                return [TimerRecord.from_row(row) for row in rows]
        except (SQLAlchemyError, OSError, ValueError) as exc:
            raise PersistenceError(str(exc)) from exc

    def _write(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            init_schema(self._engine)
            with session_scope(self._factory) as db:
                db.query(RecordRow).delete()
                db.add_all(
                    record.to_row(position)
                    for position, record in enumerate(self._records)
                )
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(str(exc)) from exc

    def _quarantine(self) -> None:
        """Move an unreadable history file out of the way."""
        self._engine.dispose()
        target = self._path.with_name(self._path.name + ".corrupt")
        try:
            self._path.replace(target)
        except OSError as exc:
            logger.warning("Could not move %s aside: %s", self._path, exc)
        else:
            logger.warning("Moved unreadable history to %s", target)

    # ══════════════════════════════════════════════════════════════════
    #  MUTATIONS
    # ══════════════════════════════════════════════════════════════════

    def append(self, record: TimerRecord) -> TimerRecord:
        """Prepend *record*, drop anything past the cap, then save."""
        if any(r.id == record.id for r in self._records):
            raise ValueError(f"duplicate record id {record.id}")
        self._records.insert(0, record)
        del self._records[HISTORY_LIMIT:]
        self.changed.emit()
        self.save()
        return record

    def add(
        self,
        kind: TimerKind,
        start_time: datetime,
        end_time: datetime,
        duration: timedelta,
        original_target: timedelta = timedelta(0),
        name: str = "",
    ) -> TimerRecord:
        """Build a record (auto-naming it if *name* is blank) and append it."""
        record = TimerRecord(
            kind=kind,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            original_target=original_target,
            name=name or self.auto_name(kind),
        )
        logger.info(
            "History: %s %s lasted %s", kind.value, record.name, duration,
        )
        return self.append(record)

    def remove(self, record_id: str) -> TimerRecord:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                del self._records[index]
                self.changed.emit()
                self.save()
                return record
        raise RecordNotFoundError(record_id)

    def rename(self, record_id: str, new_name: str) -> TimerRecord:
        record = self.get(record_id)
        record.name = new_name.strip()
        self.changed.emit()
        self.save()
        return record

    def clear(self) -> None:
        self._records.clear()
        self.changed.emit()
        self.save()
