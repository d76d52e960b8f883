#!/usr/bin/env python3
"""
CLI for the job watcher.

Usage:
    python -m src.cli watch --logs-dir /path/to/logs
    python -m src.cli job-id --logs-dir /path/to/logs
    python -m src.cli default-path
    python -m src.cli check-path /path/to/logs
"""

import argparse
import logging
import queue
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env from project root
from dotenv import load_dotenv

_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()

from src.jobwatch import (
    HomeDirectoryError,
    JobWatchConfig,
    JobWatchService,
    PathValidationError,
    default_logs_path,
    scan_directory_job_id,
    validate_logs_path,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True


def _build_config(args) -> JobWatchConfig:
    return JobWatchConfig.from_env(
        logs_dir=Path(args.logs_dir) if getattr(args, "logs_dir", None) else None,
        use_polling=True if getattr(args, "polling", False) else None,
    )


def cmd_watch(args):
    """Run the job watcher until interrupted."""
    config = _build_config(args)

    try:
        service = JobWatchService(config)
    except HomeDirectoryError as e:
        logger.error(str(e))
        sys.exit(1)

    shutdown = GracefulShutdown()
    changes = service.subscribe()

    with service:
        service.start()
        logger.info(f"Logs directory: {service.get_watch_directory()}")
        logger.info("Press Ctrl+C to stop")

        while not shutdown.should_exit:
            try:
                job_id = changes.get(timeout=0.5)
            except queue.Empty:
                continue
            print(job_id, flush=True)

    logger.info("Job watcher stopped")


def cmd_job_id(args):
    """Print the job id implied by the newest player log."""
    config = _build_config(args)

    try:
        logs_dir = config.resolve_logs_dir()
    except HomeDirectoryError as e:
        logger.error(str(e))
        sys.exit(1)

    print(scan_directory_job_id(logs_dir, config))


def cmd_default_path(args):
    """Print the platform default logs directory."""
    try:
        print(default_logs_path())
    except HomeDirectoryError as e:
        logger.error(str(e))
        sys.exit(1)


def cmd_check_path(args):
    """Validate a candidate logs directory."""
    try:
        path = validate_logs_path(args.path)
    except PathValidationError as e:
        logger.error(str(e))
        sys.exit(2)
    print(path)


def main():
    parser = argparse.ArgumentParser(
        description="Track the game session id from player logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Follow the default logs directory and print job id changes
  python -m src.cli watch

  # Follow a custom directory with the polling backend
  python -m src.cli watch --logs-dir ./logs --polling

  # Print the current job id once
  python -m src.cli job-id --logs-dir ./logs
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Run the job watcher")
    watch_parser.add_argument("--logs-dir", default=None, help="Logs directory (or JOBWATCH_LOGS_DIR env)")
    watch_parser.add_argument("--polling", action="store_true", help="Use the polling filesystem observer")
    watch_parser.set_defaults(func=cmd_watch)

    # Job id command
    job_id_parser = subparsers.add_parser("job-id", help="Print the current job id")
    job_id_parser.add_argument("--logs-dir", default=None, help="Logs directory (or JOBWATCH_LOGS_DIR env)")
    job_id_parser.set_defaults(func=cmd_job_id)

    # Default path command
    default_parser = subparsers.add_parser("default-path", help="Print the default logs directory")
    default_parser.set_defaults(func=cmd_default_path)

    # Check path command
    check_parser = subparsers.add_parser("check-path", help="Validate a logs directory")
    check_parser.add_argument("path", help="Candidate directory")
    check_parser.set_defaults(func=cmd_check_path)

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
