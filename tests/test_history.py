"""Tests for the history store: persistence, ordering, naming, editing."""

from datetime import datetime, timedelta

import pytest

from twintimer.errors import RecordNotFoundError
from twintimer.history.models import TimerKind, TimerRecord
from twintimer.history.store import (
    HistoryStore, HISTORY_LIMIT, DISPLAY_LIMIT, is_auto_name,
)

from helpers import SignalCollector, seconds


T0 = datetime(2024, 3, 1, 9, 0, 0)


def _record(kind=TimerKind.STOPWATCH, offset=0, duration=5, **kwargs):
    start = T0 + timedelta(minutes=offset)
    return TimerRecord(
        kind=kind,
        start_time=start,
        end_time=start + seconds(duration),
        duration=seconds(duration),
        **kwargs,
    )


def _add(store, kind=TimerKind.STOPWATCH, name="", duration=5, target=0):
    return store.add(
        kind,
        T0,
        T0 + seconds(duration),
        seconds(duration),
        original_target=seconds(target),
        name=name,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  LOAD / SAVE
# ═══════════════════════════════════════════════════════════════════════════


class TestPersistence:

    def test_missing_file_is_empty(self, store, history_path):
        assert store.load() == []
        assert not history_path.exists()

    def test_round_trip(self, qapp, store, history_path):
        sw = _record(name="Run", duration=12.345678)
        cd = _record(
            TimerKind.COUNTDOWN, offset=5, duration=90,
            original_target=seconds(120), name="Countdown1",
        )
        store.append(sw)
        store.append(cd)

        reopened = HistoryStore(history_path)
        try:
            loaded = reopened.load()
        finally:
            reopened.close()

        assert loaded == [cd, sw]

    def test_save_creates_parent_dir(self, store, history_path):
        assert not history_path.parent.exists()
        assert store.save() is True
        assert history_path.exists()

    def test_save_then_load_is_stable(self, qapp, store, history_path):
        for i in range(3):
            _add(store, duration=i + 1)
        before = store.records

        assert store.save() is True
        assert store.load() == before
        assert store.save() is True
        assert store.load() == before

    def test_corrupt_file_starts_empty(self, qapp, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_bytes(b"this is not a database" * 64)

        store = HistoryStore(history_path)
        failures = SignalCollector()
        store.load_failed.connect(failures)
        try:
            assert store.load() == []
            assert len(failures) == 1
            assert history_path.with_name("history.db.corrupt").exists()

            _add(store, name="fresh")
            assert store.save() is True
        finally:
            store.close()

        reopened = HistoryStore(history_path)
        try:
            assert [r.name for r in reopened.load()] == ["fresh"]
        finally:
            reopened.close()

    def test_save_failure_keeps_memory(self, qapp, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")
        store = HistoryStore(blocker / "history.db")
        failures = SignalCollector()
        store.save_failed.connect(failures)
        try:
            record = _add(store, name="kept")
            assert len(failures) == 1
            assert store.save() is False
            assert store.records == [record]
        finally:
            store.close()


# ═══════════════════════════════════════════════════════════════════════════
#  ORDER / CAP
# ═══════════════════════════════════════════════════════════════════════════


class TestOrdering:

    def test_newest_first(self, store):
        first = _add(store, name="a")
        second = _add(store, name="b")
        assert store.records == [second, first]

    def test_cap_drops_oldest(self, store, monkeypatch):
        monkeypatch.setattr(store, "save", lambda: True)
        for i in range(HISTORY_LIMIT + 5):
            store.append(_record(offset=i, name=f"r{i}"))
        monkeypatch.undo()

        assert len(store) == HISTORY_LIMIT
        assert store.records[0].name == f"r{HISTORY_LIMIT + 4}"
        assert store.records[-1].name == "r5"

        assert store.save() is True
        assert len(store.load()) == HISTORY_LIMIT

    def test_recent_limits_display(self, store, monkeypatch):
        monkeypatch.setattr(store, "save", lambda: True)
        for i in range(DISPLAY_LIMIT + 10):
            store.append(_record(offset=i))
        recent = store.recent()
        assert len(recent) == DISPLAY_LIMIT
        assert recent[0] is store.records[0]

    def test_duplicate_id_rejected(self, store):
        record = store.append(_record())
        with pytest.raises(ValueError):
            store.append(record)
        assert len(store) == 1

    def test_records_is_a_copy(self, store):
        _add(store)
        store.records.clear()
        assert len(store) == 1


# ═══════════════════════════════════════════════════════════════════════════
#  NAMING
# ═══════════════════════════════════════════════════════════════════════════


class TestAutoNaming:

    def test_sequence_per_kind(self, store):
        names = [
            _add(store, TimerKind.STOPWATCH).name,
            _add(store, TimerKind.STOPWATCH).name,
            _add(store, TimerKind.COUNTDOWN, target=10).name,
        ]
        assert names == ["Stopwatch1", "Stopwatch2", "Countdown1"]

    def test_custom_names_not_counted(self, store):
        _add(store, name="Morning run")
        assert _add(store).name == "Stopwatch1"

    def test_explicit_name_kept(self, store):
        record = _add(store, name="Auto-saved on exit")
        assert record.name == "Auto-saved on exit"

    @pytest.mark.parametrize("name,expected", [
        ("Stopwatch1", True),
        ("Stopwatch12", True),
        ("Stopwatch", False),
        ("Stopwatches", False),
        ("Countdown1", False),
    ])
    def test_is_auto_name(self, name, expected):
        assert is_auto_name(name, TimerKind.STOPWATCH) is expected


# ═══════════════════════════════════════════════════════════════════════════
#  EDITING
# ═══════════════════════════════════════════════════════════════════════════


class TestEditing:

    def test_rename_persists(self, qapp, store, history_path):
        record = _add(store)
        store.rename(record.id, "  Tempo  ")
        assert store.get(record.id).name == "Tempo"

        reopened = HistoryStore(history_path)
        try:
            assert reopened.load()[0].name == "Tempo"
        finally:
            reopened.close()

    def test_rename_leaves_other_fields(self, store):
        record = _add(store, duration=42)
        store.rename(record.id, "x")
        renamed = store.get(record.id)
        assert renamed.duration == seconds(42)
        assert renamed.start_time == T0

    def test_remove_persists(self, qapp, store, history_path):
        keep = _add(store, name="keep")
        drop = _add(store, name="drop")
        assert store.remove(drop.id) == drop
        assert store.records == [keep]

        reopened = HistoryStore(history_path)
        try:
            assert [r.id for r in reopened.load()] == [keep.id]
        finally:
            reopened.close()

    def test_unknown_id(self, store):
        with pytest.raises(RecordNotFoundError) as info:
            store.remove("nope")
        assert info.value.record_id == "nope"
        with pytest.raises(RecordNotFoundError):
            store.rename("nope", "x")
        with pytest.raises(KeyError):
            store.get("nope")

    def test_clear(self, qapp, store, history_path):
        _add(store)
        _add(store)
        store.clear()
        assert store.records == []

        reopened = HistoryStore(history_path)
        try:
            assert reopened.load() == []
        finally:
            reopened.close()

    def test_changed_signal(self, store):
        c = SignalCollector()
        store.changed.connect(c)
        record = _add(store)
        store.rename(record.id, "n")
        store.remove(record.id)
        store.clear()
        assert len(c) == 4
