#!/usr/bin/env python3
"""
File Monitor for Screen Upload
Watches the local directory and hands matching new files to the uploader

Uses watchdog to receive creation events for one directory (not
recursive). Files whose base name matches the configured filter are put
on a bounded queue; a single worker thread drains it, so at most one
upload runs at a time.
"""

import logging
import os
import queue
import re
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from screenup.config_manager import Config
from screenup.errors import WatchSetupError
from screenup.file_relocator import FileDescriptor

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100
QUEUE_PUT_TIMEOUT = 1.0  # seconds between retries while the queue is full
WORKER_POLL_SECONDS = 0.5


class FileMonitor:
    """
    Monitors a directory for newly created files matching a pattern.

    Architecture:
    - Watchdog Observer: Delivers creation events (observer thread)
    - Filter: Regex search on the created file's base name
    - Upload Queue: Bounded queue of matching files
    - Upload Worker: Single thread calling the callback per file

    The first exception raised by the callback stops the worker and is
    kept in `failure`; the caller decides what happens next.

    Example:
        >>> def on_file(file):
        ...     print(f"New file: {file.path}")
        >>> monitor = FileMonitor(config, on_file)
        >>> monitor.start()
        >>> # ... monitor runs in background ...
        >>> monitor.stop()

    Attributes:
        directory (Path): Directory being monitored
        pattern (re.Pattern): Compiled filter
        callback (Callable): Function called for each matching file
        failure (Exception): Error that stopped the worker, or None
    """

    def __init__(self,
                 config: Config,
                 callback: Callable[[FileDescriptor], object],
                 queue_size: int = DEFAULT_QUEUE_SIZE):
        """
        Initialize file monitor.

        Args:
            config: Runtime configuration (local_path and filter are used)
            callback: Function to call for each matching file
            queue_size: Maximum number of files waiting for upload

        Raises:
            WatchSetupError: If the filter pattern does not compile
        """
        self.local_path = config.local_path
        self.directory = Path(config.local_path)
        try:
            self.pattern = re.compile(config.filter)
        except re.error as e:
            raise WatchSetupError(f"invalid filter pattern {config.filter!r}: {e}") from e

        self.callback = callback
        self.queue: "queue.Queue[FileDescriptor]" = queue.Queue(maxsize=queue_size)
        self.failure: Optional[Exception] = None

        # Watchdog components
        self.observer = None  # created per start(); a watchdog Observer runs once
        self.handler = CreatedFileHandler(self._on_file_created)

        # Control flags
        self._running = False
        self._worker_thread = None
        self._stopped = threading.Event()

        logger.info(f"Initialized monitoring: {self.directory}")
        logger.info(f"Filter: {self.pattern.pattern}")

    @property
    def running(self) -> bool:
        return self._running

    def matches(self, file_path: str) -> bool:
        """True if the base name of file_path matches the filter."""
        return self.pattern.search(os.path.basename(file_path)) is not None

    def start(self):
        """
        Start the observer and the upload worker.

        Raises:
            WatchSetupError: If LPATH is empty, the directory is missing,
                or it cannot be watched

        Note:
            Safe to call multiple times - will not start if already running.
            Can be started again after stop(); each start uses a new Observer.
        """
        if self._running:
            logger.warning("Already running")
            return

        if not self.local_path:
            raise WatchSetupError("watch directory is not set (LPATH is empty)")

        if not self.directory.is_dir():
            raise WatchSetupError(f"watch directory does not exist: {self.directory}")

        try:
            self.observer = Observer()
            self.observer.schedule(self.handler, str(self.directory), recursive=False)
            self.observer.start()
        except OSError as e:
            raise WatchSetupError(f"cannot watch {self.directory}: {e}") from e

        self.failure = None
        self._running = True
        self._stopped.clear()
        self._worker_thread = threading.Thread(
            target=self._upload_worker, daemon=True, name="UploadWorker"
        )
        self._worker_thread.start()

        logger.info("Started monitoring")

    def stop(self):
        """
        Stop the observer and the upload worker.

        An upload already in progress is allowed to finish; files still
        waiting in the queue are dropped.

        Note:
            Safe to call multiple times
        """
        was_running = self._running
        self._running = False

        if self.observer is not None and self.observer.is_alive():
            self.observer.stop()
            self.observer.join()

        if self._worker_thread and self._worker_thread is not threading.current_thread():
            self._worker_thread.join()

        dropped = self._drain_queue()
        if dropped:
            logger.warning(f"Dropped {dropped} queued file(s) on shutdown")

        self._stopped.set()
        if was_running:
            logger.info("Stopped monitoring")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the monitor stops (shutdown or failure).

        Returns:
            bool: True if stopped, False if the timeout expired
        """
        return self._stopped.wait(timeout)

    def _on_file_created(self, file_path: str):
        """
        Called when watchdog reports a created file.

        Note:
            This runs in watchdog's event thread
        """
        name = os.path.basename(file_path)

        if not self.matches(file_path):
            logger.debug(f"Ignoring: {name}")
            return

        logger.info(f"Detected: {name}")
        descriptor = FileDescriptor.from_path(file_path)

        while self._running:
            try:
                self.queue.put(descriptor, timeout=QUEUE_PUT_TIMEOUT)
                return
            except queue.Full:
                logger.warning(f"Upload queue full, waiting: {name}")

        logger.debug(f"Monitor stopped, not queued: {name}")

    def _upload_worker(self):
        """
        Background thread that runs the callback for queued files, one at a time.

        Note:
            Runs in daemon thread, exits when the monitor stops or the
            callback raises
        """
        logger.debug("Upload worker started")

        while self._running:
            try:
                file = self.queue.get(timeout=WORKER_POLL_SECONDS)
            except queue.Empty:
                continue

            try:
                self.callback(file)
            except Exception as e:
                logger.error(f"Upload failed for {file.name}: {e}")
                logger.debug("Upload failure details", exc_info=True)
                self.failure = e
                self._running = False
                self._stopped.set()
            finally:
                self.queue.task_done()

        logger.debug("Upload worker stopped")

    def _drain_queue(self) -> int:
        dropped = 0
        while True:
            try:
                self.queue.get_nowait()
            except queue.Empty:
                return dropped
            self.queue.task_done()
            dropped += 1


class CreatedFileHandler(FileSystemEventHandler):
    """
    Watchdog event handler that forwards file creation events.

    Directory events and every other event type (modify, delete, move)
    are ignored.
    """

    def __init__(self, callback: Callable[[str], None]):
        """
        Initialize handler with callback.

        Args:
            callback: Function to call when a file is created (receives file path)
        """
        self.callback = callback

    def on_created(self, event):
        """
        Called when a file or directory is created.

        Args:
            event: FileSystemEvent with event details
        """
        if event.is_directory:
            return

        try:
            self.callback(os.fsdecode(event.src_path))
        except Exception as e:
            logger.error(f"Error handling created file {event.src_path}: {e}")


if __name__ == '__main__':
    import sys

    from screenup.config_manager import load_config

    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if len(sys.argv) < 2:
        logger.error("Usage: python -m screenup.file_monitor <directory>")
        sys.exit(1)

    def on_file_ready(file):
        logger.info(f"*** FILE READY: {file.path} ***")

    test_config = load_config({**os.environ, 'LPATH': sys.argv[1]})
    monitor = FileMonitor(test_config, on_file_ready)

    try:
        monitor.start()
        logger.info(f"Monitoring {sys.argv[1]}")
        logger.info("Create files to test. Press Ctrl+C to stop.")

        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping...")
        monitor.stop()
