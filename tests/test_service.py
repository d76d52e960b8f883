"""Tests for job watch service module."""

import time
from pathlib import Path

import pytest

from src.jobwatch.config import DEFAULT_JOB_ID, JobWatchConfig
from src.jobwatch.exceptions import EmptyPathError, HomeDirectoryError, PathNotDirectoryError
from src.jobwatch.service import JobWatchService


JOB_A = "aaaaaaaa-1111-2222-3333-444444444444"
JOB_B = "bbbbbbbb-1111-2222-3333-444444444444"
PLAYER_LOG = "0.600.0.6000000_20240101T000001Z_Player_00001_last.log"


def append(path, *lines):
    with open(path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(f"{line}\n")


def wait_for(predicate, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


@pytest.fixture
def config(logs_dir):
    return JobWatchConfig(logs_dir=logs_dir, event_timeout_ms=50, poll_interval_seconds=0.1)


class TestJobWatchService:
    """Tests for JobWatchService class."""

    def test_create_service(self, config, logs_dir):
        service = JobWatchService(config)
        
        assert service.get_watch_directory() == logs_dir
        assert service.get_current_job_id() == DEFAULT_JOB_ID
        assert service.is_running is False

    def test_default_directory(self, monkeypatch, tmp_path):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        
        service = JobWatchService(JobWatchConfig())
        
        expected = tmp_path / "AppData" / "Local" / "Roblox" / "logs"
        assert service.get_watch_directory() == expected
        assert service.get_default_watch_directory() == expected

    def test_unresolvable_home_is_fatal_at_startup(self, monkeypatch):
        def no_home(cls):
            raise RuntimeError("no home")
        
        monkeypatch.setattr(Path, "home", classmethod(no_home))
        
        with pytest.raises(HomeDirectoryError):
            JobWatchService(JobWatchConfig())

    @pytest.mark.parametrize("candidate", ["", "   "])
    def test_set_empty_directory(self, config, logs_dir, candidate):
        service = JobWatchService(config)
        
        with pytest.raises(EmptyPathError):
            service.set_watch_directory(candidate)
        
        assert service.get_watch_directory() == logs_dir

    def test_set_file_directory(self, config, logs_dir):
        file_path = logs_dir / "not_a_dir.txt"
        file_path.write_text("x")
        service = JobWatchService(config)
        
        with pytest.raises(PathNotDirectoryError):
            service.set_watch_directory(str(file_path))

    def test_set_directory_before_start(self, config, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        append(other / PLAYER_LOG, f"Joining game '{JOB_B}'")
        service = JobWatchService(config)
        
        assert service.set_watch_directory(f" {other} ") == other
        
        with service:
            service.start()
            assert wait_for(lambda: service.get_current_job_id() == JOB_B)

    def test_end_to_end(self, config, logs_dir, tmp_path):
        log = logs_dir / PLAYER_LOG
        append(log, f"Joining game '{JOB_A}'", "Disconnect from game", f"Joining game '{JOB_B}'")
        service = JobWatchService(config)
        changes = service.subscribe()
        listened = []
        service.add_listener(listened.append)
        
        with service:
            service.start()
            assert changes.get(timeout=5.0) == JOB_B
            assert service.get_current_job_id() == JOB_B
            
            append(log, "leaveGameInternal")
            assert changes.get(timeout=5.0) == DEFAULT_JOB_ID
            assert service.get_current_job_id() == DEFAULT_JOB_ID
            
            other = tmp_path / "other"
            other.mkdir()
            append(other / PLAYER_LOG, f"Joining game '{JOB_A}'")
            service.set_watch_directory(str(other))
            
            assert changes.get(timeout=5.0) == JOB_A
            assert service.get_watch_directory() == other
        
        assert service.is_running is False
        assert wait_for(lambda: listened == [JOB_B, DEFAULT_JOB_ID, JOB_A])

    def test_unsubscribe(self, config):
        service = JobWatchService(config)
        q = service.subscribe()
        
        assert service.unsubscribe(q) is True
        assert service.unsubscribe(q) is False

    def test_remove_listener(self, config):
        service = JobWatchService(config)
        received = []
        service.add_listener(received.append)
        
        assert service.remove_listener(received.append) is True

    def test_missing_directory_retries_until_created(self, tmp_path):
        logs_dir = tmp_path / "later"
        config = JobWatchConfig(logs_dir=logs_dir, event_timeout_ms=50, setup_retry_seconds=0.05)
        service = JobWatchService(config)
        
        with service:
            service.start()
            time.sleep(0.2)
            assert service.get_current_job_id() == DEFAULT_JOB_ID
            
            logs_dir.mkdir()
            append(logs_dir / PLAYER_LOG, f"Joining game '{JOB_A}'")
            
            assert wait_for(lambda: service.get_current_job_id() == JOB_A)
