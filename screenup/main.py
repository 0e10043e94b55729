#!/usr/bin/env python3
"""
Screen Upload - Main Application
Integrates all components for production use

Coordinates the file monitor and the upload manager, handles shutdown
signals and decides the process exit status.
"""

import logging
import signal
import sys
import threading
from typing import Optional

from screenup import __version__
from screenup.config_manager import Config, load_config
from screenup.errors import WatchSetupError
from screenup.file_monitor import FileMonitor
from screenup.file_relocator import FileDescriptor
from screenup.upload_manager import UploadManager

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
WAIT_INTERVAL_SECONDS = 1.0


class ScreenUploadSystem:
    """
    Main system coordinator for Screen Upload.

    Coordinates:
    - File monitoring (file_monitor)
    - Rename, SFTP upload, cleanup and notification (upload_manager)

    Architecture:
    1. File Monitor detects a matching new file -> upload queue
    2. Upload worker calls _on_file_ready() for one file at a time
    3. Upload Manager renames, uploads, cleans up and notifies
    4. Any upload error stops the monitor; run() returns EXIT_FAILURE

    Example:
        >>> system = ScreenUploadSystem(load_config())
        >>> exit_code = system.run()  # blocks until shutdown or failure

    Attributes:
        config (Config): Runtime configuration
        upload_manager (UploadManager): SFTP upload pipeline
        file_monitor (FileMonitor): Directory watch
        stats (dict): Runtime statistics (files detected/uploaded/failed)
    """

    def __init__(self, config: Config):
        """
        Initialize all components. Does not start monitoring.

        Args:
            config: Runtime configuration

        Raises:
            WatchSetupError: If the filter pattern is invalid
        """
        logger.info(f"Initializing Screen Upload v{__version__}...")

        self.config = config
        self.upload_manager = UploadManager(config)
        self.file_monitor = FileMonitor(config, self._on_file_ready)

        self.stats = {
            'files_detected': 0,
            'files_uploaded': 0,
            'files_failed': 0,
            'bytes_uploaded': 0,
        }
        self._shutdown = threading.Event()

    def start(self):
        """
        Start monitoring.

        Raises:
            WatchSetupError: If the watch directory cannot be monitored
        """
        self._shutdown.clear()
        self.file_monitor.start()
        logger.info(f"Watching {self.config.local_path} for new files")

    def stop(self):
        """Stop monitoring and log statistics. Safe to call multiple times."""
        self.file_monitor.stop()
        self._print_statistics()

    def request_shutdown(self):
        """Ask run() to return. Safe to call from a signal handler."""
        self._shutdown.set()

    def run(self) -> int:
        """
        Start, then block until shutdown is requested or an upload fails.

        Returns:
            int: EXIT_OK after a requested shutdown, EXIT_FAILURE after an
                upload error

        Raises:
            WatchSetupError: If monitoring cannot start
        """
        self.start()
        logger.info("Running... Press Ctrl+C to stop")

        try:
            while not self._shutdown.is_set():
                if self.file_monitor.wait(WAIT_INTERVAL_SECONDS):
                    break
        finally:
            self.stop()

        if self.file_monitor.failure is not None:
            logger.error(f"FATAL ERROR: {self.file_monitor.failure}")
            return EXIT_FAILURE
        return EXIT_OK

    def _on_file_ready(self, file: FileDescriptor) -> FileDescriptor:
        """
        Upload one detected file (runs in the upload worker thread).

        Raises:
            ScreenUploadError: Propagated from the upload pipeline
        """
        self.stats['files_detected'] += 1
        try:
            uploaded = self.upload_manager.upload(file)
        except Exception:
            self.stats['files_failed'] += 1
            raise

        self.stats['files_uploaded'] += 1
        self.stats['bytes_uploaded'] += uploaded.size
        return uploaded

    def _print_statistics(self):
        logger.info("=" * 50)
        logger.info("System Statistics")
        logger.info("=" * 50)
        logger.info(f"Files detected:     {self.stats['files_detected']}")
        logger.info(f"Files uploaded:     {self.stats['files_uploaded']}")
        logger.info(f"Files failed:       {self.stats['files_failed']}")
        logger.info(f"Data uploaded:      {self.stats['bytes_uploaded'] / (1024**2):.2f} MB")
        logger.info("=" * 50)

    def get_statistics(self) -> dict:
        """Public snapshot for tests/monitoring."""
        s = self.stats
        return {
            "detected": int(s.get("files_detected", 0)),
            "uploaded": int(s.get("files_uploaded", 0)),
            "failed": int(s.get("files_failed", 0)),
            "bytes_uploaded": int(s.get("bytes_uploaded", 0)),
        }


def report_config(config: Config) -> int:
    """
    Log the loaded configuration and its problems.

    Returns:
        int: EXIT_OK if no problems were found, EXIT_FAILURE otherwise
    """
    for name, value in config.describe().items():
        logger.info(f"  {name:<8} = {value!r}")

    problems = config.find_problems()
    for problem in problems:
        logger.warning(f"Configuration problem: {problem}")

    if problems:
        return EXIT_FAILURE
    logger.info("Configuration valid!")
    return EXIT_OK


def main(argv: Optional[list] = None):
    """
    Main entry point for Screen Upload.

    Configuration comes from the environment (USER, HOST, PORT, RPATH,
    RURL, LPATH, ARCHIVE, FILTER, SSH_AUTH_SOCK).

    Command-line arguments:
        --test-config: Report configuration and exit
        --log-level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    import argparse

    parser = argparse.ArgumentParser(description=f'Screen Upload v{__version__}')
    parser.add_argument(
        '--test-config',
        action='store_true',
        help='Report configuration and exit'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    config = load_config()

    if args.test_config:
        sys.exit(report_config(config))

    for problem in config.find_problems():
        logger.warning(f"Configuration problem: {problem}")

    try:
        system = ScreenUploadSystem(config)
    except WatchSetupError as e:
        logger.error(f"FATAL ERROR: {e}")
        sys.exit(EXIT_FAILURE)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}")
        system.request_shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        exit_code = system.run()
    except WatchSetupError as e:
        logger.error(f"FATAL ERROR: {e}")
        exit_code = EXIT_FAILURE

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
