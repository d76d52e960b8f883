"""Startup resolution of the current job id from existing player logs."""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from .config import JobWatchConfig
from .extractor import EventExtractor
from .models import BootstrapResult

logger = logging.getLogger(__name__)


class BootstrapScanner:
    """
    Determines the job id implied by the newest player log.

    Reads a tail window of the log and doubles it until an event is
    found or the window cap is reached, then falls back to a full
    sequential read. The common case touches only the end of the file.
    """

    def __init__(
        self,
        config: Optional[JobWatchConfig] = None,
        extractor: Optional[EventExtractor] = None,
    ):
        self.config = config or JobWatchConfig()
        self.extractor = extractor or EventExtractor(self.config.default_job_id)

    def latest_player_log(self, directory: Path) -> Optional[Path]:
        """
        Find the most recently modified player log in a directory.

        Args:
            directory: Directory to search (non-recursive)

        Returns:
            Path of the newest matching file, or None
        """
        latest: Optional[Path] = None
        latest_mtime = 0.0

        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.debug(f"Cannot list logs directory {directory}: {e}")
            return None

        for entry in entries:
            if self.config.player_log_marker not in entry.name:
                continue
            try:
                if not entry.is_file():
                    continue
                mtime = entry.stat().st_mtime
            except OSError:
                continue
            if latest is None or mtime > latest_mtime:
                latest = Path(entry.path)
                latest_mtime = mtime

        return latest

    def resolve_file(self, path: Path) -> Tuple[str, int]:
        """
        Resolve the job id from a log file's history.

        Args:
            path: Player log to scan

        Returns:
            (job_id, resume_offset). resume_offset is the file size at scan
            time, less any unterminated trailing line so that tailing picks
            that line up once it is complete.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(path, "rb") as f:
            length = os.fstat(f.fileno()).st_size
            if length == 0:
                return self.config.default_job_id, 0

            job_id, resume_offset = self._resolve_tail_windows(f, length)
            if job_id is None:
                logger.debug(f"No session event in tail windows of {path}, reading whole file")
                job_id = self._resolve_sequential(f, length)

        return job_id, resume_offset

    def _resolve_tail_windows(self, f: BinaryIO, length: int) -> Tuple[Optional[str], int]:
        max_window = self.config.max_scan_window
        window = min(self.config.initial_scan_window, length)
        resume_offset = None

        while True:
            start = length - window
            f.seek(start)
            data = f.read(length - start)

            if resume_offset is None:
                newline = data.rfind(b"\n")
                if newline >= 0:
                    resume_offset = start + newline + 1
                elif start == 0:
                    resume_offset = 0
                else:
                    # Trailing line is longer than the window
                    resume_offset = length

            job_id = self.extractor.resolve_slice(data.decode("utf-8", errors="replace"))
            if job_id is not None:
                return job_id, resume_offset

            if start == 0 or window >= max_window:
                return None, resume_offset
            window = min(window * 2, max_window, length)

    def _resolve_sequential(self, f: BinaryIO, length: int) -> str:
        current = self.config.default_job_id
        remaining = length
        f.seek(0)

        while remaining > 0:
            line = f.readline(remaining)
            if not line:
                break
            remaining -= len(line)
            resolved = self.extractor.resolve_slice(line.decode("utf-8", errors="replace"))
            if resolved is not None:
                current = resolved

        return current

    def scan(self, directory: Path) -> BootstrapResult:
        """
        Establish the initial job id and tail position for a directory.

        Args:
            directory: Logs directory

        Returns:
            BootstrapResult; log_file is None when there is no player log
        """
        log_file = self.latest_player_log(directory)
        if log_file is None:
            logger.debug(f"No player log in {directory}")
            return BootstrapResult(log_file=None, job_id=self.config.default_job_id)

        try:
            job_id, offset = self.resolve_file(log_file)
        except OSError as e:
            logger.warning(f"Failed to scan {log_file}: {e}")
            return BootstrapResult(log_file=log_file, job_id=self.config.default_job_id, offset=0)

        logger.debug(f"Bootstrap scan of {log_file}: job_id={job_id}, offset={offset}")
        return BootstrapResult(log_file=log_file, job_id=job_id, offset=offset)


def scan_directory_job_id(directory: Path, config: Optional[JobWatchConfig] = None) -> str:
    """
    One-shot job id lookup for a logs directory.

    Args:
        directory: Logs directory
        config: Scanner configuration

    Returns:
        The resolved job id, or the default job id
    """
    return BootstrapScanner(config).scan(directory).job_id
