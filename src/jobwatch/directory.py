"""Thread-safe ownership of the watched logs directory."""

import logging
import threading
from pathlib import Path
from typing import Optional

from .channels import RedirectChannel
from .exceptions import ChannelClosedError
from .models import RedirectRequest
from .paths import validate_logs_path

logger = logging.getLogger(__name__)


class DirectoryController:
    """
    Holds the current logs directory and announces changes to it.

    Every successful change is sent to the watch loop as a
    RedirectRequest over the redirect channel.
    """

    def __init__(self, initial: Path, redirects: Optional[RedirectChannel] = None):
        """
        Initialize the controller.

        Args:
            initial: Directory to watch first
            redirects: Channel the watch loop reads redirect requests from
        """
        self._current = Path(initial).resolve()
        self._lock = threading.Lock()
        self.redirects = redirects or RedirectChannel()

    def get_current(self) -> Path:
        """Return the directory currently being watched."""
        with self._lock:
            return Path(self._current)

    def set_current(self, candidate: str) -> Path:
        """
        Validate and switch to a new logs directory.

        Args:
            candidate: Raw path string from the caller

        Returns:
            The new directory

        Raises:
            EmptyPathError: If the candidate is blank
            PathNotDirectoryError: If the candidate is not a directory
        """
        next_path = validate_logs_path(candidate)

        with self._lock:
            self._current = next_path

        try:
            self.redirects.send(RedirectRequest(next_path))
        except ChannelClosedError:
            logger.debug(f"Watch loop has shut down, redirect to {next_path} not delivered")

        logger.info(f"Logs directory set to {next_path}")
        return next_path
