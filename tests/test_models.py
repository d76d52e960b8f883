"""Tests for models module."""

import pytest
from pathlib import Path

from src.jobwatch.models import (
    BootstrapResult,
    ChangeEvent,
    EventKind,
    LogEvent,
    RedirectRequest,
    TailCursor,
)


class TestLogEvent:
    """Tests for LogEvent class."""

    def test_join_event(self):
        event = LogEvent(EventKind.JOIN, 10, "abc-123")
        
        assert event.kind == EventKind.JOIN
        assert event.position == 10
        assert event.job_id == "abc-123"

    def test_join_requires_job_id(self):
        with pytest.raises(ValueError):
            LogEvent(EventKind.JOIN, 0)

    def test_leave_rejects_job_id(self):
        with pytest.raises(ValueError):
            LogEvent(EventKind.LEAVE, 0, "abc")

    def test_event_is_frozen(self):
        event = LogEvent(EventKind.LEAVE, 0)
        
        with pytest.raises(Exception):
            event.position = 5


class TestTailCursor:
    """Tests for TailCursor class."""

    def test_default_cursor(self):
        cursor = TailCursor()
        
        assert cursor.tracked_file is None
        assert cursor.offset == 0

    def test_track_new_file_resets_offset(self):
        cursor = TailCursor(Path("/logs/a_Player.log"), 500)
        
        assert cursor.track(Path("/logs/b_Player.log")) is True
        assert cursor.tracked_file == Path("/logs/b_Player.log")
        assert cursor.offset == 0

    def test_track_same_file(self):
        cursor = TailCursor(Path("/logs/a_Player.log"), 500)
        
        assert cursor.track(Path("/logs/a_Player.log")) is False
        assert cursor.offset == 500

    def test_reset(self):
        cursor = TailCursor(Path("/logs/a_Player.log"), 500)
        cursor.reset()
        
        assert cursor.tracked_file is None
        assert cursor.offset == 0

    def test_advance_rejects_negative(self):
        cursor = TailCursor()
        
        with pytest.raises(ValueError):
            cursor.advance(-1)


class TestChangeEvent:
    """Tests for ChangeEvent class."""

    def test_write_events(self):
        assert ChangeEvent("created", Path("/logs/a")).is_write
        assert ChangeEvent("modified", Path("/logs/a")).is_write
        assert ChangeEvent("moved", Path("/logs/a")).is_write

    def test_non_write_events(self):
        assert not ChangeEvent("deleted", Path("/logs/a")).is_write
        assert not ChangeEvent("modified", Path("/logs"), is_directory=True).is_write


class TestBootstrapResult:
    """Tests for BootstrapResult class."""

    def test_to_cursor_without_log(self):
        cursor = BootstrapResult(log_file=None, job_id="global", offset=99).to_cursor()
        
        assert cursor.tracked_file is None
        assert cursor.offset == 0

    def test_to_cursor_with_log(self):
        cursor = BootstrapResult(Path("/logs/a_Player.log"), "global", 99).to_cursor()
        
        assert cursor.tracked_file == Path("/logs/a_Player.log")
        assert cursor.offset == 99


class TestRedirectRequest:
    """Tests for RedirectRequest class."""

    def test_has_timestamp(self):
        request = RedirectRequest(Path("/logs"))
        
        assert request.directory == Path("/logs")
        assert request.timestamp > 0
