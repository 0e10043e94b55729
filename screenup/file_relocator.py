#!/usr/bin/env python3
"""
File Relocator for Screen Upload
Renames detected files to hashed names and removes them after upload

A renamed file either stays in the watch directory under its new name
or moves into the archive directory when one is configured.
"""

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from screenup.config_manager import Config
from screenup.errors import EmptyInputError, DeletionError, RenameError
from screenup.naming import build_seed, generate_hash

logger = logging.getLogger(__name__)


@dataclass
class FileDescriptor:
    """
    A file moving through the upload pipeline.

    `path` always points at the file's current location. Each step that
    moves the file returns a new descriptor instead of reusing the old one.

    Attributes:
        path (Path): Current location on disk
        extension (str): Extension including the dot ('.png'), may be ''
        name (str): Base name
        url (str): Public URL, empty until the upload completes
        size (int): Bytes transferred, 0 until the transfer completes
    """

    path: Path
    extension: str
    name: str
    url: str = ''
    size: int = 0

    @classmethod
    def from_path(cls, file_path: Union[str, Path]) -> 'FileDescriptor':
        """Describe a freshly detected file."""
        path = Path(file_path)
        return cls(path=path, extension=path.suffix, name=path.name)


def rename(config: Config, file: FileDescriptor, now: Optional[float] = None) -> FileDescriptor:
    """
    Move a detected file to its hashed name.

    The destination is the archive directory if configured, otherwise
    the watch directory (an in-place rename).

    Args:
        config: Runtime configuration
        file: Descriptor of the detected file
        now: Timestamp used for the name (default: current time)

    Returns:
        FileDescriptor: New descriptor at the destination, URL empty

    Raises:
        RenameError: If the name cannot be generated or the move fails
    """
    try:
        digest = generate_hash(build_seed(file.name, now))
    except EmptyInputError as e:
        raise RenameError(f"error generating filename for {file.name}") from e

    new_name = f"{digest}{file.extension}"
    if config.archive_enabled:
        destination = Path(config.archive_path) / new_name
    else:
        destination = Path(config.local_path) / new_name

    try:
        os.rename(file.path, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise RenameError(f"failed to move {file.path} to {destination}: {e}") from e

        # Archive on another filesystem: copy then delete
        logger.debug(f"Cross-device move, copying: {file.path} -> {destination}")
        try:
            shutil.move(str(file.path), str(destination))
        except OSError as move_error:
            raise RenameError(
                f"failed to move {file.path} to {destination}: {move_error}"
            ) from move_error

    logger.info(f"Renamed: {file.name} -> {destination}")
    return FileDescriptor(path=destination, extension=file.extension, name=new_name)


def trash(file: FileDescriptor):
    """
    Delete the file at the descriptor's current path.

    Raises:
        DeletionError: If the file cannot be removed
    """
    try:
        file.path.unlink()
    except OSError as e:
        raise DeletionError(f"failed to delete {file.path}: {e}") from e

    logger.info(f"Deleted local copy: {file.path}")
