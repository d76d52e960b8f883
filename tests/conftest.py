"""Shared fixtures for job watcher tests."""

import queue
from pathlib import Path
from typing import List, Optional

import pytest

from src.jobwatch.exceptions import WatchUnavailableError
from src.jobwatch.fs_watcher import ChangeSource, Subscription
from src.jobwatch.models import ChangeEvent


class FakeSubscription(Subscription):
    """Subscription fed by tests through push()."""

    def __init__(self, directory: Path):
        self.directory = directory
        self.events: "queue.Queue[ChangeEvent]" = queue.Queue()
        self.alive = True
        self.closed = False

    def push(self, event_type: str, path: Path) -> None:
        self.events.put(ChangeEvent(event_type=event_type, path=path))

    def get(self, timeout: float) -> Optional[ChangeEvent]:
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def is_alive(self) -> bool:
        return self.alive and not self.closed

    def close(self) -> None:
        self.closed = True


class FakeChangeSource(ChangeSource):
    """Change source that records subscriptions and can fail on demand."""

    def __init__(self):
        self.subscriptions: List[FakeSubscription] = []
        self.failures_remaining = 0

    def subscribe(self, directory: Path) -> Subscription:
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise WatchUnavailableError(f"Cannot watch {directory}")
        subscription = FakeSubscription(directory)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def latest(self) -> FakeSubscription:
        return self.subscriptions[-1]


@pytest.fixture
def change_source():
    return FakeChangeSource()


@pytest.fixture
def logs_dir(tmp_path):
    path = tmp_path / "logs"
    path.mkdir()
    return path
