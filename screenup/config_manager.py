#!/usr/bin/env python3
"""
Configuration Manager for Screen Upload
Builds the runtime configuration from environment variables

The configuration is read once at startup and never changes afterwards.
Loading never fails: suspicious values are reported by
Config.find_problems() so the caller can log them, and surface later as
connection or filesystem errors if they are really wrong.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = '22'
DEFAULT_FILTER = r'^Screen.Shot.[0-9-]*.\w*.[0-9.]*.png'

# Config field -> environment variable
ENV_VARS = {
    'username': 'USER',
    'hostname': 'HOST',
    'port': 'PORT',
    'remote_path': 'RPATH',
    'remote_url': 'RURL',
    'local_path': 'LPATH',
    'archive_path': 'ARCHIVE',
    'filter': 'FILTER',
}

# Fields that are accepted when empty but almost certainly wrong
REQUIRED_FIELDS = ('username', 'hostname', 'remote_url', 'local_path')


@dataclass(frozen=True)
class Config:
    """
    Immutable runtime configuration.

    Attributes:
        username (str): Login name on the remote host
        hostname (str): Remote SSH host
        port (str): Remote SSH port, kept as text like the environment value
        remote_path (str): Remote directory uploads are copied into
        remote_url (str): Public URL prefix of remote_path
        local_path (str): Directory watched for new files
        archive_path (str): Directory uploaded files are kept in ('' = delete)
        filter (str): Regex matched against created file names
    """

    username: str = ''
    hostname: str = ''
    port: str = DEFAULT_PORT
    remote_path: str = ''
    remote_url: str = ''
    local_path: str = ''
    archive_path: str = ''
    filter: str = DEFAULT_FILTER

    @property
    def archive_enabled(self) -> bool:
        """True if uploaded files are archived instead of deleted."""
        return bool(self.archive_path)

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"

    def find_problems(self) -> List[str]:
        """
        Describe suspicious configuration values.

        Nothing here is enforced. An empty hostname still loads and will
        fail when the connection is attempted.

        Returns:
            List of human-readable problems (empty if none found)
        """
        problems = []

        for field in REQUIRED_FIELDS:
            if not getattr(self, field):
                problems.append(f"{ENV_VARS[field]} is not set ({field} is empty)")

        if not self.port.isdigit():
            problems.append(f"PORT is not a number: {self.port!r}")

        try:
            re.compile(self.filter)
        except re.error as e:
            problems.append(f"FILTER is not a valid regular expression: {e}")

        if self.archive_enabled and not os.path.isdir(self.archive_path):
            problems.append(f"ARCHIVE directory does not exist: {self.archive_path}")

        return problems

    def describe(self) -> Dict[str, str]:
        """Settings keyed by environment variable name, for reports."""
        return {env: getattr(self, field) for field, env in ENV_VARS.items()}


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build configuration from environment variables.

    PORT and FILTER fall back to their defaults when unset or empty.
    Every other variable is taken as-is (missing = empty string).

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Config: Immutable configuration
    """
    if environ is None:
        environ = os.environ

    values = {field: environ.get(env, '') for field, env in ENV_VARS.items()}

    if not values['port']:
        values['port'] = DEFAULT_PORT
    if not values['filter']:
        values['filter'] = DEFAULT_FILTER

    config = Config(**values)
    logger.debug(f"Loaded configuration for {config.username}@{config.address}")
    return config
