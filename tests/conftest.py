"""Shared pytest fixtures for Focusly tests."""

import sys
import pytest

from PyQt6.QtWidgets import QApplication

from focusly.database.db import configure_engine, init_db
from focusly.settings import Settings, SettingsStore
from focusly.timer.engine import TimerManager

from helpers import (
    RecordingAchievements,
    RecordingJournal,
    RecordingNotifications,
    RecordingSounds,
    RecordingStatistics,
)


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def settings():
    """Short phases so tests can tick through them by hand."""
    return Settings(work_duration=5, break_duration=3, max_cycles=4)


@pytest.fixture
def store(qapp, settings, tmp_path):
    return SettingsStore(settings, path=tmp_path / "settings.json")


@pytest.fixture
def call_log():
    """Shared, ordered record of every collaborator call."""
    return []


@pytest.fixture
def sinks(call_log):
    return {
        "statistics": RecordingStatistics(call_log),
        "sounds": RecordingSounds(call_log),
        "notifications": RecordingNotifications(call_log),
        "journal": RecordingJournal(call_log),
        "achievements": RecordingAchievements(call_log),
    }


@pytest.fixture
def timer(qapp, settings, sinks):
    """TimerManager wired to recording collaborators."""
    mgr = TimerManager(settings, **sinks)
    yield mgr
    mgr._qt_timer.stop()


@pytest.fixture
def bare_timer(qapp, settings):
    """TimerManager with every collaborator left at its no-op default."""
    mgr = TimerManager(settings)
    yield mgr
    mgr._qt_timer.stop()
