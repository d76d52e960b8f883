"""Configuration for the job watcher package."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import HomeDirectoryError


DEFAULT_JOB_ID = "global"
PLAYER_LOG_MARKER = "_Player"


def default_logs_path() -> Path:
    """
    Compute the platform default logs directory under the user's home.

    Returns:
        ``<home>/AppData/Local/Roblox/logs``

    Raises:
        HomeDirectoryError: If the home directory cannot be resolved
    """
    try:
        home = Path.home()
    except (RuntimeError, KeyError, OSError) as e:
        raise HomeDirectoryError(f"Could not find home directory: {e}") from e
    return home / "AppData" / "Local" / "Roblox" / "logs"


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class JobWatchConfig:
    """
    Configuration options for the job watcher.

    Attributes:
        logs_dir: Directory to watch; None means the platform default
        initial_scan_window: Bytes read from the end of a log on the first bootstrap pass
        max_scan_window: Largest tail window tried before falling back to a full read
        poll_interval_seconds: Poll interval for the polling observer backend
        event_timeout_ms: How long the loop waits for a change event before re-polling
        setup_retry_seconds: Backoff between failed subscription attempts
        player_log_marker: Substring identifying player-process log files
        default_job_id: Job id reported when not connected to a game
        use_polling: Use watchdog's polling observer instead of the native backend
        subscriber_queue_size: Capacity of each subscriber's notification queue
    """
    logs_dir: Optional[Path] = None
    initial_scan_window: int = 256 * 1024
    max_scan_window: int = 8 * 1024 * 1024
    poll_interval_seconds: float = 1.0
    event_timeout_ms: int = 500
    setup_retry_seconds: float = 1.0
    player_log_marker: str = PLAYER_LOG_MARKER
    default_job_id: str = DEFAULT_JOB_ID
    use_polling: bool = False
    subscriber_queue_size: int = 64

    def __post_init__(self):
        if isinstance(self.logs_dir, str):
            self.logs_dir = Path(self.logs_dir)
        if self.initial_scan_window <= 0:
            raise ValueError("initial_scan_window must be positive")
        if self.max_scan_window < self.initial_scan_window:
            raise ValueError("max_scan_window must be >= initial_scan_window")

    @property
    def event_timeout_seconds(self) -> float:
        return self.event_timeout_ms / 1000.0

    def resolve_logs_dir(self) -> Path:
        """
        Get the configured logs directory, falling back to the platform default.

        Raises:
            HomeDirectoryError: If no directory is configured and the home
                directory cannot be resolved
        """
        if self.logs_dir is not None:
            return self.logs_dir
        return default_logs_path()

    def is_player_log(self, path: Path) -> bool:
        """Check if a path names a player-process log file (by file name only)."""
        return self.player_log_marker in Path(path).name

    @classmethod
    def from_env(cls, **overrides) -> "JobWatchConfig":
        """Build a config from JOBWATCH_* environment variables."""
        logs_dir = os.environ.get("JOBWATCH_LOGS_DIR")
        values = {
            "logs_dir": Path(logs_dir) if logs_dir and logs_dir.strip() else None,
            "initial_scan_window": _env_int("JOBWATCH_INITIAL_SCAN_WINDOW", cls.initial_scan_window),
            "max_scan_window": _env_int("JOBWATCH_MAX_SCAN_WINDOW", cls.max_scan_window),
            "poll_interval_seconds": _env_float("JOBWATCH_POLL_INTERVAL", cls.poll_interval_seconds),
            "event_timeout_ms": _env_int("JOBWATCH_EVENT_TIMEOUT_MS", cls.event_timeout_ms),
            "setup_retry_seconds": _env_float("JOBWATCH_SETUP_RETRY", cls.setup_retry_seconds),
            "player_log_marker": os.environ.get("JOBWATCH_PLAYER_MARKER") or PLAYER_LOG_MARKER,
            "use_polling": _env_bool("JOBWATCH_USE_POLLING", cls.use_polling),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
