"""Shared pytest fixtures for TwinTimer tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from twintimer.controller import TimerController
from twintimer.history.store import HistoryStore
from twintimer.settings import Settings
from twintimer.timer.engine import StopwatchEngine, CountdownEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def history_path(tmp_path):
    return tmp_path / "data" / "history.db"


@pytest.fixture
def store(history_path):
    """Empty HistoryStore backed by a temp file."""
    s = HistoryStore(history_path)
    yield s
    s.close()


@pytest.fixture
def stopwatch(qapp, clock):
    return StopwatchEngine(clock=clock)


@pytest.fixture
def countdown(qapp, clock):
    """Fresh CountdownEngine with the default 30 s target."""
    return CountdownEngine(clock=clock)


@pytest.fixture
def controller(qapp, store, clock):
    return TimerController(store, Settings(), clock=clock)
