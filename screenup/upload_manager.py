#!/usr/bin/env python3
"""
Upload Manager for Screen Upload
Handles SFTP uploads authenticated through the local SSH agent

UploadManager.upload() is the pipeline entry point for one detected file:
agent -> connect -> rename -> transfer -> cleanup -> URL -> clipboard -> notify.
Every step raises a typed error from screenup.errors; nothing here
terminates the process or retries.
"""

import logging
import os
import posixpath
from contextlib import ExitStack

import paramiko

from screenup.config_manager import Config
from screenup.errors import (
    AgentUnavailableError,
    ConnectionFailureError,
    TransferError,
)
from screenup.file_relocator import FileDescriptor, rename, trash
from screenup.notifier import copy_to_clipboard, notify

logger = logging.getLogger(__name__)

AUTH_SOCK_ENV = 'SSH_AUTH_SOCK'


class UploadManager:
    """
    Uploads detected files to the remote host over SFTP.

    A fresh agent connection, SSH connection and SFTP session are opened
    for every file and closed once the transfer is done.

    Example:
        >>> uploader = UploadManager(load_config())
        >>> done = uploader.upload(FileDescriptor.from_path('/tmp/shots/a.png'))
        >>> print(done.url)

    Attributes:
        config (Config): Runtime configuration
    """

    def __init__(self, config: Config):
        """
        Initialize upload manager.

        Args:
            config: Runtime configuration
        """
        self.config = config
        logger.info(f"Initialized for {config.username}@{config.address}")
        logger.info(f"Remote path: {config.remote_path or '(login directory)'}")
        if config.archive_enabled:
            logger.info(f"Archiving uploads in: {config.archive_path}")
        else:
            logger.info("Archive disabled - local copies are deleted after upload")

    def upload(self, file: FileDescriptor) -> FileDescriptor:
        """
        Run the full pipeline for one detected file.

        Args:
            file: Descriptor of the detected file

        Returns:
            FileDescriptor: Descriptor of the uploaded file, URL set

        Raises:
            AgentUnavailableError: If no SSH agent key is available
            ConnectionFailureError: If the SSH connection or SFTP session fails
            RenameError: If the file cannot be renamed
            TransferError: If the copy to the remote host fails
            DeletionError: If the local copy cannot be removed
            NotificationError: If the desktop notification fails
        """
        logger.info(f"Uploading: {file.name}")

        with ExitStack() as stack:
            agent = self.get_agent()
            stack.callback(agent.close)

            client = self.connect(agent)
            stack.callback(client.close)

            sftp = self.open_session(client)
            stack.callback(sftp.close)

            uploaded = rename(self.config, file)
            self.transfer(sftp, uploaded)

        if not self.config.archive_enabled:
            trash(uploaded)

        uploaded.url = self.build_url(uploaded)
        copy_to_clipboard(uploaded.url)
        notify(uploaded)

        logger.info(f"Upload complete: {uploaded.url}")
        return uploaded

    def get_agent(self) -> paramiko.Agent:
        """
        Connect to the SSH agent named by SSH_AUTH_SOCK.

        Returns:
            paramiko.Agent: Agent holding at least one key

        Raises:
            AgentUnavailableError: If the socket is unset, unreachable,
                or the agent holds no keys
        """
        sock = os.environ.get(AUTH_SOCK_ENV)
        if not sock:
            raise AgentUnavailableError(f"failed to connect to {AUTH_SOCK_ENV}: variable not set")

        try:
            agent = paramiko.Agent()
        except paramiko.SSHException as e:
            raise AgentUnavailableError(f"failed to connect to {AUTH_SOCK_ENV} ({sock}): {e}") from e

        keys = agent.get_keys()
        if not keys:
            agent.close()
            raise AgentUnavailableError(
                f"failed to connect to {AUTH_SOCK_ENV} ({sock}): agent unreachable or holds no keys"
            )

        logger.debug(f"SSH agent offers {len(keys)} key(s)")
        return agent

    def connect(self, agent: paramiko.Agent) -> paramiko.SSHClient:
        """
        Open an SSH connection authenticated with the agent's keys.

        Keys are offered one connection attempt at a time, in the order
        the agent lists them; the first accepted key wins.

        Args:
            agent: Agent returned by get_agent()

        Raises:
            ConnectionFailureError: If the port is invalid, the host is
                unreachable, or no agent key is accepted
        """
        try:
            port = int(self.config.port)
        except ValueError as e:
            raise ConnectionFailureError(f"failed to dial {self.config.address}: invalid port") from e

        last_error = None
        for key in agent.get_keys():
            client = paramiko.SSHClient()
            client.load_system_host_keys()
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

            try:
                client.connect(
                    hostname=self.config.hostname,
                    port=port,
                    username=self.config.username,
                    pkey=key,
                    allow_agent=False,
                    look_for_keys=False,
                )
            except paramiko.AuthenticationException as e:
                client.close()
                logger.debug(f"Agent key rejected by {self.config.address}: {e}")
                last_error = e
                continue
            except (paramiko.SSHException, OSError) as e:
                client.close()
                raise ConnectionFailureError(f"failed to dial {self.config.address}: {e}") from e

            logger.debug(f"Connected to {self.config.address}")
            return client

        raise ConnectionFailureError(
            f"failed to dial {self.config.address}: no agent key accepted ({last_error})"
        ) from last_error

    def open_session(self, client: paramiko.SSHClient) -> paramiko.SFTPClient:
        """
        Open an SFTP session on an established connection.

        Raises:
            ConnectionFailureError: If the session cannot be created
        """
        try:
            return client.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            raise ConnectionFailureError(f"failed to create session: {e}") from e

    def remote_file_path(self, file: FileDescriptor) -> str:
        """Remote destination for a file: '{remote_path}/{name}'."""
        if not self.config.remote_path:
            return file.name
        return posixpath.join(self.config.remote_path, file.name)

    def transfer(self, sftp: paramiko.SFTPClient, file: FileDescriptor) -> str:
        """
        Copy a local file into the remote directory.

        Args:
            sftp: Open SFTP session
            file: Descriptor of the renamed local file

        Returns:
            str: Remote path the file was written to

        Raises:
            TransferError: If the local file cannot be read or the copy fails
        """
        remote = self.remote_file_path(file)

        try:
            file.size = file.path.stat().st_size
            sftp.put(str(file.path), remote)
        except (paramiko.SSHException, OSError) as e:
            raise TransferError(f"failed to copy {file.path} to {remote}: {e}") from e

        logger.info(f"Transferred: {file.name} -> {self.config.hostname}:{remote}")
        return remote

    def build_url(self, file: FileDescriptor) -> str:
        """Public URL of an uploaded file: '{remote_url}/{name}'."""
        return f"{self.config.remote_url}/{file.name}"
