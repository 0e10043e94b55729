# tests/integration/conftest.py
"""
Fixtures for integration tests (mocked SSH, clipboard and notifications)
These tests drive a real watchdog observer on a temporary directory
"""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest


@pytest.fixture
def remote(monkeypatch):
    """Mock SSH agent, client and SFTP session"""
    monkeypatch.setenv('SSH_AUTH_SOCK', '/tmp/ssh-agent.sock')

    with patch('paramiko.Agent') as mock_Agent, patch('paramiko.SSHClient') as mock_SSHClient:
        mock_Agent.return_value.get_keys.return_value = (Mock(),)
        client = mock_SSHClient.return_value
        yield SimpleNamespace(client=client, sftp=client.open_sftp.return_value)


@pytest.fixture
def desktop():
    """Capture clipboard writes and notifications"""
    clipboard = []

    with patch('pyperclip.copy', side_effect=clipboard.append), \
            patch('screenup.notifier.notification') as mock_notification:
        yield SimpleNamespace(clipboard=clipboard, notification=mock_notification.notify)
