"""Incremental reading of newly appended player log lines."""

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional

from .extractor import EventExtractor
from .models import TailCursor

logger = logging.getLogger(__name__)


class LogTailer:
    """
    Reads complete lines appended to the tracked log since the cursor.

    Handles:
    - Rotation (a different file becomes the tracked one)
    - Truncation (file shorter than the cursor offset)
    - Partial writes (an unterminated last line is left for the next read)
    """

    def __init__(self, extractor: EventExtractor):
        self.extractor = extractor

    def follow(self, cursor: TailCursor, path: Path) -> bool:
        """
        Point the cursor at a file, resetting the offset on rotation.

        Returns:
            True if this was a rotation
        """
        rotated = cursor.track(path)
        if rotated:
            logger.info(f"Now tailing {path}")
        return rotated

    def iter_lines(self, cursor: TailCursor) -> Iterator[str]:
        """
        Stream complete lines between the cursor and the current end of file.

        Lines are read one at a time, bounded by the file length observed
        when the read starts, so a large file is never held in memory. An
        unterminated last line is left for the next read. The cursor
        advances once the iterator is exhausted.

        Args:
            cursor: Cursor of the tracked file

        Yields:
            New lines in file order

        Raises:
            OSError: If the file cannot be opened or read; the cursor is
                left unchanged
        """
        if cursor.tracked_file is None:
            return

        with open(cursor.tracked_file, "rb") as f:
            length = os.fstat(f.fileno()).st_size
            offset = cursor.offset
            if length < offset:
                logger.info(f"{cursor.tracked_file} shrank below offset {offset}, rereading from start")
                offset = 0

            f.seek(offset)
            remaining = length - offset
            while remaining > 0:
                raw = f.readline(remaining)
                if not raw.endswith(b"\n"):
                    break
                remaining -= len(raw)
                offset += len(raw)
                yield raw.decode("utf-8", errors="replace").rstrip("\r\n")

        cursor.advance(offset)

    def read_lines(self, cursor: TailCursor) -> List[str]:
        """Collect the new complete lines and advance the cursor past them."""
        return list(self.iter_lines(cursor))

    def poll(self, cursor: TailCursor, current: str) -> Optional[str]:
        """
        Read new lines and fold them into the current job id.

        Args:
            cursor: Cursor of the tracked file
            current: Job id before the new lines

        Returns:
            The resulting job id, or None if the read failed
        """
        try:
            return self.extractor.fold_lines(self.iter_lines(cursor), current)
        except OSError as e:
            logger.debug(f"Skipping read of {cursor.tracked_file}: {e}")
            return None
