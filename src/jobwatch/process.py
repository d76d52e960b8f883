"""The watch loop that tails player logs and tracks the current job id."""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Optional

from .channels import RedirectChannel, SessionBroadcaster
from .config import JobWatchConfig
from .directory import DirectoryController
from .exceptions import WatchUnavailableError, WatcherAlreadyRunningError
from .extractor import EventExtractor
from .fs_watcher import ChangeSource, Subscription, WatchdogChangeSource
from .models import ChangeEvent, TailCursor
from .scanner import BootstrapScanner
from .tailer import LogTailer

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """States of the watch loop."""
    STOPPED = "stopped"
    SETUP = "setup"
    WATCHING = "watching"


class LogWatcher:
    """
    Long-running watch loop for a logs directory.

    Each cycle subscribes to the current directory, bootstraps the job id
    from the newest player log, then tails it until a redirect arrives,
    the subscription breaks, or the watcher is stopped. A single worker
    thread owns the tail cursor and is the only writer of the job id.
    """

    def __init__(
        self,
        directories: DirectoryController,
        config: Optional[JobWatchConfig] = None,
        change_source: Optional[ChangeSource] = None,
        broadcaster: Optional[SessionBroadcaster] = None,
    ):
        """
        Initialize the watch loop.

        Args:
            directories: Owner of the logs directory and redirect channel
            config: Watcher configuration
            change_source: Filesystem change backend (watchdog by default)
            broadcaster: Where job id changes are published
        """
        self.config = config or JobWatchConfig()
        self.directories = directories
        self.change_source = change_source or WatchdogChangeSource(self.config)
        self.broadcaster = broadcaster or SessionBroadcaster(self.config.subscriber_queue_size)

        self.extractor = EventExtractor(self.config.default_job_id)
        self.scanner = BootstrapScanner(self.config, self.extractor)
        self.tailer = LogTailer(self.extractor)

        self._job_id = self.config.default_job_id
        self._cursor = TailCursor()
        self._directory: Optional[Path] = None
        self._subscription: Optional[Subscription] = None
        self._state = LoopState.STOPPED

        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def redirects(self) -> RedirectChannel:
        return self.directories.redirects

    @property
    def job_id(self) -> str:
        """Snapshot of the current job id."""
        return self._job_id

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def directory(self) -> Optional[Path]:
        """Directory of the active watch cycle."""
        return self._directory

    @property
    def cursor(self) -> TailCursor:
        return TailCursor(self._cursor.tracked_file, self._cursor.offset)

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """
        Run the watch loop, blocking until stop() is called.

        Raises:
            WatcherAlreadyRunningError: If already running
        """
        self.start_async()
        try:
            while not self._stop_event.is_set():
                self._stop_event.wait(timeout=0.5)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def start_async(self) -> None:
        """
        Start the watch loop on a background thread.

        Raises:
            WatcherAlreadyRunningError: If already running
        """
        with self._lock:
            if self._running:
                raise WatcherAlreadyRunningError("Watch loop is already running")
            self._running = True
            self._stop_event.clear()

        self.redirects.open()
        self._thread = threading.Thread(target=self._run, name="JobWatchLoop", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the watch loop and wait for the worker to exit."""
        with self._lock:
            if not self._running:
                return
            self._running = False

        self._stop_event.set()
        self.redirects.close()

        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._thread = None

    def _run(self) -> None:
        logger.debug("Watch loop started")
        while not self._stop_event.is_set():
            try:
                if self._setup():
                    self._watch()
            except Exception:
                logger.exception("Watch cycle failed, rebuilding")
                self._stop_event.wait(timeout=self.config.setup_retry_seconds)
            finally:
                self._teardown()
        self._state = LoopState.STOPPED
        logger.debug("Watch loop stopped")

    def _setup(self) -> bool:
        """
        Subscribe to the current directory and bootstrap the job id.

        Returns:
            True if the loop can start watching
        """
        self._state = LoopState.SETUP
        # The controller already holds the newest directory
        self.redirects.take_latest()
        directory = self.directories.get_current()

        try:
            subscription = self.change_source.subscribe(directory)
        except WatchUnavailableError as e:
            logger.warning(f"{e}; retrying in {self.config.setup_retry_seconds}s")
            # A redirect or shutdown ends the wait early
            self.redirects.wait(timeout=self.config.setup_retry_seconds)
            return False

        self._subscription = subscription
        self._directory = directory

        result = self.scanner.scan(directory)
        self._cursor = result.to_cursor()
        self._publish(result.job_id)

        self._state = LoopState.WATCHING
        logger.info(f"Watching {directory} (job id {self._job_id})")
        return True

    def _teardown(self) -> None:
        if self._subscription is not None:
            try:
                self._subscription.close()
            except Exception as e:
                logger.warning(f"Error closing subscription for {self._directory}: {e}")
            self._subscription = None
        self._cursor = TailCursor()

    def _watch(self) -> None:
        while not self._stop_event.is_set():
            if not self._watch_once():
                return

    def _watch_once(self) -> bool:
        """
        Run one iteration of the watching state.

        Redirects are checked before any pending change event.

        Returns:
            False if the cycle must be rebuilt
        """
        request = self.redirects.take_latest()
        if request is not None and request.directory != self._directory:
            logger.info(f"Redirected to {request.directory}")
            return False

        if not self._subscription.is_alive():
            logger.warning(f"Lost filesystem watch on {self._directory}, rebuilding")
            return False

        event = self._subscription.get(timeout=self.config.event_timeout_seconds)
        if event is None:
            self._poll_tracked()
        else:
            self._handle_change(event)
        return True

    def _handle_change(self, event: ChangeEvent) -> None:
        if not event.is_write:
            return
        if not self.config.is_player_log(event.path):
            return

        self.tailer.follow(self._cursor, event.path)
        self._poll_tracked()

    def _poll_tracked(self) -> None:
        if self._cursor.tracked_file is None:
            # Covers backends that missed the creation of the first log
            latest = self.scanner.latest_player_log(self._directory)
            if latest is None:
                return
            self.tailer.follow(self._cursor, latest)

        job_id = self.tailer.poll(self._cursor, self._job_id)
        if job_id is not None:
            self._publish(job_id)

    def _publish(self, job_id: str) -> None:
        if job_id == self._job_id:
            return
        self._job_id = job_id
        logger.info(f"Job id changed: {job_id}")
        self.broadcaster.publish(job_id)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
