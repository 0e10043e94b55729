#!/usr/bin/env python3
"""
Clipboard and desktop notification for Screen Upload
"""

import logging

import pyperclip
from plyer import notification

from screenup.errors import NotificationError
from screenup.file_relocator import FileDescriptor

logger = logging.getLogger(__name__)

APP_NAME = 'Screen Upload'
NOTIFICATION_TITLE = 'Screen Upload - Upload finished'
NOTIFICATION_MESSAGE = 'The URL is now in your clipboard.'
NOTIFICATION_TIMEOUT = 10  # seconds


def copy_to_clipboard(url: str) -> bool:
    """
    Put the URL on the system clipboard.

    Best effort: a missing clipboard backend is logged, not raised.

    Returns:
        bool: True if the clipboard was written
    """
    try:
        pyperclip.copy(url)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Could not copy URL to clipboard: {e}")
        return False

    logger.debug(f"Copied to clipboard: {url}")
    return True


def notify(file: FileDescriptor):
    """
    Raise a desktop notification carrying the file's URL.

    Raises:
        NotificationError: If the notification backend fails
    """
    try:
        notification.notify(
            title=NOTIFICATION_TITLE,
            message=f"{NOTIFICATION_MESSAGE}\n{file.url}",
            app_name=APP_NAME,
            timeout=NOTIFICATION_TIMEOUT,
        )
    except Exception as e:
        # plyer backends raise anything from NotImplementedError to dbus errors
        raise NotificationError(f"failed to push notification for {file.url}: {e}") from e

    logger.debug(f"Notification sent: {file.url}")
