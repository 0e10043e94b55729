# tests/conftest.py
"""
Common fixtures for all test types
These are shared across unit and integration tests
"""

import pytest
import tempfile
import sys
from pathlib import Path

# Add project root to Python path so 'screenup' can be imported
# This allows tests to run without installing the package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from screenup.config_manager import Config


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def watch_dir(temp_dir):
    """Directory watched for new screenshots"""
    path = temp_dir / 'shots'
    path.mkdir()
    return path


@pytest.fixture
def archive_dir(temp_dir):
    """Directory uploaded screenshots are archived in"""
    path = temp_dir / 'archive'
    path.mkdir()
    return path


@pytest.fixture
def make_config(watch_dir):
    """Factory for configs pointing at the temporary watch directory"""
    def _make(**overrides):
        values = {
            'username': 'alice',
            'hostname': 'files.example.com',
            'port': '22',
            'remote_path': '/srv/www/shots',
            'remote_url': 'https://files.example.com/shots',
            'local_path': str(watch_dir),
            'archive_path': '',
        }
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def screenshot(watch_dir):
    """A screenshot file sitting in the watch directory"""
    path = watch_dir / 'Screen Shot 2024-05-01 at 09.00.00.png'
    path.write_bytes(b'\x89PNG\r\n\x1a\n' + b'0' * 1024)
    return path
