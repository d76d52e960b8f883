"""Filesystem change subscriptions using the watchdog library."""

import logging
import queue
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from watchdog.events import (
    FileSystemEventHandler,
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .config import JobWatchConfig
from .exceptions import WatchUnavailableError
from .models import ChangeEvent

logger = logging.getLogger(__name__)


class Subscription(ABC):
    """A live stream of change events for one directory."""

    @abstractmethod
    def get(self, timeout: float) -> Optional[ChangeEvent]:
        """
        Wait for the next change event.

        Args:
            timeout: Maximum seconds to wait

        Returns:
            The event, or None on timeout
        """

    @abstractmethod
    def is_alive(self) -> bool:
        """False once the subscription can no longer deliver events."""

    @abstractmethod
    def close(self) -> None:
        """Release the subscription."""


class ChangeSource(ABC):
    """Capability to subscribe to change events in a directory."""

    @abstractmethod
    def subscribe(self, directory: Path) -> Subscription:
        """
        Subscribe to changes directly inside a directory (non-recursive).

        Raises:
            WatchUnavailableError: If the subscription cannot be created
        """


class ChangeEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog events to ChangeEvent."""

    def __init__(self, events: "queue.Queue[ChangeEvent]"):
        super().__init__()
        self.events = events

    def _emit(self, event_type: str, path: str, is_directory: bool):
        self.events.put(ChangeEvent(
            event_type=event_type,
            path=Path(path),
            is_directory=is_directory,
            timestamp=time.time(),
        ))

    def on_created(self, event):
        self._emit("created", event.src_path, isinstance(event, DirCreatedEvent))

    def on_deleted(self, event):
        self._emit("deleted", event.src_path, isinstance(event, DirDeletedEvent))

    def on_modified(self, event):
        self._emit("modified", event.src_path, isinstance(event, DirModifiedEvent))

    def on_moved(self, event):
        self._emit("moved", event.dest_path, isinstance(event, DirMovedEvent))


class WatchdogSubscription(Subscription):
    """Subscription backed by a running watchdog observer."""

    def __init__(self, observer, events: "queue.Queue[ChangeEvent]", directory: Path):
        self.observer = observer
        self.events = events
        self.directory = directory
        self._closed = False

    def get(self, timeout: float) -> Optional[ChangeEvent]:
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def is_alive(self) -> bool:
        return not self._closed and self.observer.is_alive()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.observer.stop()
        self.observer.join(timeout=5.0)
        logger.debug(f"Stopped watching {self.directory}")


class WatchdogChangeSource(ChangeSource):
    """
    Change source using watchdog's native observer, or its polling
    observer when ``config.use_polling`` is set.
    """

    def __init__(self, config: Optional[JobWatchConfig] = None):
        self.config = config or JobWatchConfig()

    def _create_observer(self):
        if self.config.use_polling:
            return PollingObserver(timeout=self.config.poll_interval_seconds)
        return Observer(timeout=self.config.poll_interval_seconds)

    def subscribe(self, directory: Path) -> Subscription:
        if not directory.is_dir():
            raise WatchUnavailableError(f"Not a directory: {directory}")

        events: "queue.Queue[ChangeEvent]" = queue.Queue()
        handler = ChangeEventHandler(events)

        try:
            observer = self._create_observer()
            observer.schedule(handler, str(directory), recursive=False)
            observer.start()
        except (OSError, RuntimeError) as e:
            raise WatchUnavailableError(f"Cannot watch {directory}: {e}") from e

        logger.debug(f"Watching {directory} with {type(observer).__name__}")
        return WatchdogSubscription(observer, events, directory)
