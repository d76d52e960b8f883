"""Custom exceptions for the job watcher package."""


class JobWatchError(Exception):
    """Base exception for all job watcher errors."""
    pass


class PathValidationError(JobWatchError):
    """A candidate logs directory was rejected."""
    pass


class EmptyPathError(PathValidationError):
    """Candidate path is empty after trimming whitespace."""
    pass


class PathNotDirectoryError(PathValidationError):
    """Candidate path does not exist or is not a directory."""
    pass


class HomeDirectoryError(JobWatchError):
    """The user's home directory could not be resolved."""
    pass


class WatchUnavailableError(JobWatchError):
    """A filesystem change subscription could not be created."""
    pass


class ChannelClosedError(JobWatchError):
    """Message was sent on a channel whose receiver has shut down."""
    pass


class WatcherAlreadyRunningError(JobWatchError):
    """Watch loop is already running."""
    pass
