"""Data models for the job watcher package."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
import time


class EventKind(Enum):
    """Kinds of session events found in a player log."""
    JOIN = "join"
    LEAVE = "leave"


@dataclass(frozen=True)
class LogEvent:
    """
    A session event matched in log text.

    Attributes:
        kind: JOIN or LEAVE
        position: Start offset of the match within the scanned text
        job_id: Joined job id (JOIN events only)
    """
    kind: EventKind
    position: int
    job_id: Optional[str] = None

    def __post_init__(self):
        if self.kind == EventKind.JOIN and not self.job_id:
            raise ValueError("JOIN events must carry a job_id")
        if self.kind == EventKind.LEAVE and self.job_id is not None:
            raise ValueError("LEAVE events carry no job_id")


@dataclass(frozen=True)
class RedirectRequest:
    """
    Request for the watch loop to move to a new logs directory.

    Attributes:
        directory: The validated directory to watch next
        timestamp: Unix timestamp when the request was made
    """
    directory: Path
    timestamp: float = field(default_factory=time.time)


@dataclass
class ChangeEvent:
    """
    Filesystem change reported by a change subscription.

    Attributes:
        event_type: Raw event type string (created, deleted, modified, moved)
        path: Path the event refers to (destination path for moves)
        is_directory: Whether this is a directory event
        timestamp: Unix timestamp when the event occurred
    """
    event_type: str
    path: Path
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def is_write(self) -> bool:
        """True for events that may have added content to a file."""
        return not self.is_directory and self.event_type in ("created", "modified", "moved")


@dataclass
class TailCursor:
    """
    Read position in the tracked player log.

    Attributes:
        tracked_file: Log currently being tailed, if any
        offset: Byte offset of the first unread byte
    """
    tracked_file: Optional[Path] = None
    offset: int = 0

    def track(self, path: Path) -> bool:
        """
        Adopt a file identity, resetting the offset on rotation.

        Args:
            path: The file that should be tailed

        Returns:
            True if the tracked file changed
        """
        if self.tracked_file == path:
            return False
        self.tracked_file = path
        self.offset = 0
        return True

    def reset(self) -> None:
        """Forget the tracked file."""
        self.tracked_file = None
        self.offset = 0

    def advance(self, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"offset must be non-negative: {offset}")
        self.offset = offset


@dataclass(frozen=True)
class BootstrapResult:
    """
    Outcome of a bootstrap scan over a logs directory.

    Attributes:
        log_file: Most recently modified player log, or None if there is none
        job_id: Job id implied by the log's history
        offset: Where tailing should continue (file length at scan time)
    """
    log_file: Optional[Path]
    job_id: str
    offset: int = 0

    def to_cursor(self) -> TailCursor:
        return TailCursor(tracked_file=self.log_file, offset=self.offset if self.log_file else 0)
