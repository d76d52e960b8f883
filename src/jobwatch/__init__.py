"""
Job Watcher Package

A background watcher that follows game-client player logs and tracks
the job (game session) the user is currently connected to.

Features:
- Runtime-switchable logs directory
- Bootstrap from existing logs without full reads of large files
- Incremental tailing with rotation, truncation and partial-line handling
- Last-event-wins resolution of join/leave events
- Fire-and-forget change notifications to subscribers
"""

from .models import (
    EventKind,
    LogEvent,
    RedirectRequest,
    ChangeEvent,
    TailCursor,
    BootstrapResult,
)

from .config import JobWatchConfig, DEFAULT_JOB_ID, default_logs_path

from .exceptions import (
    JobWatchError,
    PathValidationError,
    EmptyPathError,
    PathNotDirectoryError,
    HomeDirectoryError,
    WatchUnavailableError,
    ChannelClosedError,
    WatcherAlreadyRunningError,
)

from .paths import validate_logs_path
from .channels import RedirectChannel, SessionBroadcaster
from .directory import DirectoryController
from .extractor import EventExtractor
from .scanner import BootstrapScanner, scan_directory_job_id
from .tailer import LogTailer
from .fs_watcher import ChangeSource, Subscription, WatchdogChangeSource
from .process import LogWatcher, LoopState
from .service import JobWatchService


__all__ = [
    # Models
    "EventKind",
    "LogEvent",
    "RedirectRequest",
    "ChangeEvent",
    "TailCursor",
    "BootstrapResult",
    # Config
    "JobWatchConfig",
    "DEFAULT_JOB_ID",
    "default_logs_path",
    # Exceptions
    "JobWatchError",
    "PathValidationError",
    "EmptyPathError",
    "PathNotDirectoryError",
    "HomeDirectoryError",
    "WatchUnavailableError",
    "ChannelClosedError",
    "WatcherAlreadyRunningError",
    # Components
    "validate_logs_path",
    "RedirectChannel",
    "SessionBroadcaster",
    "DirectoryController",
    "EventExtractor",
    "BootstrapScanner",
    "scan_directory_job_id",
    "LogTailer",
    "ChangeSource",
    "Subscription",
    "WatchdogChangeSource",
    # Main loop
    "LogWatcher",
    "LoopState",
    "JobWatchService",
]

__version__ = "0.1.0"
