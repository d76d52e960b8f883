"""Join/leave event extraction and last-event-wins resolution."""

import re
from typing import Iterable, List, Optional

from .config import DEFAULT_JOB_ID
from .models import EventKind, LogEvent


JOIN_PATTERN = r"Joining game '([a-f0-9-]+)'"
LEAVE_PATTERN = r"Disconnect from game|leaveGameInternal|leaveUGCGameInternal"


class EventExtractor:
    """
    Finds session events in player log text.

    Patterns are compiled once per instance. All methods are pure
    functions of their arguments.
    """

    def __init__(
        self,
        default_job_id: str = DEFAULT_JOB_ID,
        join_pattern: str = JOIN_PATTERN,
        leave_pattern: str = LEAVE_PATTERN,
    ):
        self.default_job_id = default_job_id
        self._join_re = re.compile(join_pattern)
        self._leave_re = re.compile(leave_pattern)

    def find_events(self, text: str) -> List[LogEvent]:
        """
        Find every join and leave event in a text slice.

        Args:
            text: Text to scan

        Returns:
            Events ordered by start offset
        """
        events = [
            LogEvent(EventKind.JOIN, m.start(), m.group(1))
            for m in self._join_re.finditer(text)
        ]
        events.extend(
            LogEvent(EventKind.LEAVE, m.start())
            for m in self._leave_re.finditer(text)
        )
        events.sort(key=lambda e: e.position)
        return events

    def resolve_slice(self, text: str) -> Optional[str]:
        """
        Resolve the job id implied by a text slice.

        The last join and the last leave are compared by start offset. A
        leave wins only when it starts strictly after the join.

        Args:
            text: Text to scan

        Returns:
            The job id, the default job id after a leave, or None if the
            slice holds no events
        """
        last_join = None
        for m in self._join_re.finditer(text):
            last_join = m

        last_leave = None
        for m in self._leave_re.finditer(text):
            last_leave = m

        if last_join is None and last_leave is None:
            return None
        if last_leave is None:
            return last_join.group(1)
        if last_join is None:
            return self.default_job_id
        if last_leave.start() > last_join.start():
            return self.default_job_id
        return last_join.group(1)

    def classify_line(self, line: str) -> Optional[LogEvent]:
        """Return the last event on a line, or None."""
        events = self.find_events(line)
        return events[-1] if events else None

    def fold_lines(self, lines: Iterable[str], current: str) -> str:
        """
        Apply lines in file order to a current job id.

        Args:
            lines: Log lines in the order they were written
            current: Job id before the first line

        Returns:
            Job id after the last line
        """
        for line in lines:
            resolved = self.resolve_slice(line)
            if resolved is not None:
                current = resolved
        return current
