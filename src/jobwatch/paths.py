"""Validation of candidate logs directories."""

from pathlib import Path

from .exceptions import EmptyPathError, PathNotDirectoryError


def validate_logs_path(candidate: str) -> Path:
    """
    Validate a user-supplied logs directory.

    The candidate is trimmed, and an existing directory is returned as an
    absolute, resolved path so that different spellings compare equal.

    Args:
        candidate: Raw path string

    Returns:
        The resolved directory

    Raises:
        EmptyPathError: If the path is blank
        PathNotDirectoryError: If the path is not an existing directory
    """
    trimmed = (candidate or "").strip()
    if not trimmed:
        raise EmptyPathError("Path cannot be empty")

    path = Path(trimmed)
    try:
        is_dir = path.is_dir()
    except (OSError, ValueError):
        # Embedded NUL bytes, over-long names and similar
        is_dir = False

    if not is_dir:
        raise PathNotDirectoryError(f"Path must be an existing directory: {trimmed}")
    return path.resolve()
