#!/usr/bin/env python3
"""
Error types for Screen Upload

Inner components raise these; only the coordinator in main.py decides
whether an error terminates the process.
"""


class ScreenUploadError(Exception):
    """Base class for all pipeline errors."""
    pass


class AgentUnavailableError(ScreenUploadError):
    """
    Raised when no usable SSH agent is reachable.

    Covers an unset SSH_AUTH_SOCK, a socket that does not answer
    like an agent, and an agent that holds no keys.
    """
    pass


class ConnectionFailureError(ScreenUploadError):
    """Raised when the SSH connection or the SFTP session cannot be opened."""
    pass


class EmptyInputError(ScreenUploadError):
    """Raised when a hash is requested for an empty seed."""
    pass


class RenameError(ScreenUploadError):
    """Raised when a detected file cannot be moved to its hashed name."""
    pass


class TransferError(ScreenUploadError):
    """Raised when copying the file to the remote host fails."""
    pass


class DeletionError(ScreenUploadError):
    """Raised when the local copy cannot be removed after upload."""
    pass


class NotificationError(ScreenUploadError):
    """Raised when the desktop notification cannot be pushed."""
    pass


class WatchSetupError(ScreenUploadError):
    """
    Raised when the directory watch cannot be set up.

    Examples:
    - Filter pattern does not compile
    - Watch directory does not exist
    - Observer cannot be scheduled or started
    """
    pass
