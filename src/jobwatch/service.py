"""Host-facing facade over the directory controller and watch loop."""

import logging
import queue
from pathlib import Path
from typing import Callable, Optional

from .channels import SessionBroadcaster
from .config import JobWatchConfig, default_logs_path
from .directory import DirectoryController
from .fs_watcher import ChangeSource
from .process import LogWatcher

logger = logging.getLogger(__name__)


class JobWatchService:
    """
    Entry point for applications embedding the job watcher.

    Exposes the logs directory getters and setters, the current job id,
    and a push channel of job id changes.
    """

    def __init__(
        self,
        config: Optional[JobWatchConfig] = None,
        change_source: Optional[ChangeSource] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Watcher configuration
            change_source: Filesystem change backend (watchdog by default)

        Raises:
            HomeDirectoryError: If no logs directory is configured and the
                home directory cannot be resolved
        """
        self.config = config or JobWatchConfig()
        self._directories = DirectoryController(self.config.resolve_logs_dir())
        self._broadcaster = SessionBroadcaster(self.config.subscriber_queue_size)
        self._watcher = LogWatcher(
            self._directories,
            self.config,
            change_source=change_source,
            broadcaster=self._broadcaster,
        )

    def get_watch_directory(self) -> Path:
        return self._directories.get_current()

    def set_watch_directory(self, candidate: str) -> Path:
        """
        Point the watcher at a different logs directory.

        Raises:
            EmptyPathError: If the candidate is blank
            PathNotDirectoryError: If the candidate is not a directory
        """
        return self._directories.set_current(candidate)

    @staticmethod
    def get_default_watch_directory() -> Path:
        return default_logs_path()

    def get_current_job_id(self) -> str:
        """Current job id; the default job id means not in a game."""
        return self._watcher.job_id

    def subscribe(self, maxsize: Optional[int] = None) -> queue.Queue:
        """Get a queue that receives every job id change."""
        return self._broadcaster.subscribe(maxsize)

    def unsubscribe(self, q: queue.Queue) -> bool:
        return self._broadcaster.unsubscribe(q)

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """Register a callback for job id changes (called on its own thread)."""
        self._broadcaster.add_listener(listener)

    def remove_listener(self, listener: Callable[[str], None]) -> bool:
        return self._broadcaster.remove_listener(listener)

    @property
    def watcher(self) -> LogWatcher:
        return self._watcher

    @property
    def is_running(self) -> bool:
        return self._watcher.is_running

    def start(self) -> None:
        """Start watching in the background."""
        logger.info(f"Starting job watcher on {self.get_watch_directory()}")
        self._watcher.start_async()

    def stop(self) -> None:
        self._watcher.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
