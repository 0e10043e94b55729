#!/usr/bin/env python3
"""
End-to-end tests for Screen Upload
Real filesystem events, mocked remote host and desktop
"""

import re
import threading
import time

import pytest

from screenup.main import EXIT_FAILURE, EXIT_OK, ScreenUploadSystem

HASHED_PNG = re.compile(r'^[0-9a-f]{40}\.png$')

pytestmark = pytest.mark.slow


def wait_until(condition, timeout=10, interval=0.1):
    start = time.time()
    while time.time() - start < timeout:
        if condition():
            return True
        time.sleep(interval)
    return False


@pytest.fixture
def running_system(make_config):
    """Start a system in a background thread; yields a factory"""
    started = []

    def _start(**overrides):
        system = ScreenUploadSystem(make_config(**overrides))
        result = {}
        thread = threading.Thread(target=lambda: result.setdefault('exit', system.run()), daemon=True)
        thread.start()
        assert wait_until(lambda: system.file_monitor.running, timeout=5)
        started.append((system, thread))
        return system, thread, result

    yield _start

    for system, thread in started:
        system.request_shutdown()
        thread.join(timeout=5)


def test_screenshot_uploaded_and_deleted(running_system, watch_dir, remote, desktop):
    """Test the full pipeline without archive"""
    system, thread, result = running_system()

    (watch_dir / 'Screen Shot 2024-05-01 at 09.00.00.png').write_bytes(b'png-data')

    assert wait_until(lambda: desktop.notification.called, timeout=10)

    # Renamed to <40-hex>.png and transferred from the watch directory
    local, remote_path = remote.sftp.put.call_args.args
    name = local.rsplit('/', 1)[-1]
    assert HASHED_PNG.match(name)
    assert local == str(watch_dir / name)
    assert remote_path == f"/srv/www/shots/{name}"

    # Deleted locally
    assert list(watch_dir.iterdir()) == []

    # URL on clipboard and in the notification
    url = f"https://files.example.com/shots/{name}"
    assert desktop.clipboard == [url]
    assert url in desktop.notification.call_args.kwargs['message']

    assert system.get_statistics()['uploaded'] == 1


def test_screenshot_archived(running_system, watch_dir, archive_dir, remote, desktop):
    """Test the file persists in the archive directory"""
    running_system(archive_path=str(archive_dir))

    (watch_dir / 'Screen Shot 2024-05-01 at 09.00.00.png').write_bytes(b'png-data')

    assert wait_until(lambda: desktop.notification.called, timeout=10)

    archived = list(archive_dir.iterdir())
    assert len(archived) == 1
    assert HASHED_PNG.match(archived[0].name)
    assert archived[0].read_bytes() == b'png-data'
    assert list(watch_dir.iterdir()) == []
    remote.sftp.put.assert_called_once_with(str(archived[0]), f"/srv/www/shots/{archived[0].name}")


def test_non_matching_file_untouched(running_system, watch_dir, remote, desktop):
    """Test unrelated files trigger no pipeline calls"""
    system, thread, result = running_system()

    (watch_dir / '.DS_Store').write_bytes(b'')
    (watch_dir / 'notes.txt').write_text('hello')
    time.sleep(2)

    assert sorted(p.name for p in watch_dir.iterdir()) == ['.DS_Store', 'notes.txt']
    remote.client.connect.assert_not_called()
    remote.sftp.put.assert_not_called()
    assert desktop.clipboard == []
    desktop.notification.assert_not_called()
    assert system.get_statistics()['detected'] == 0


def test_shutdown_exits_cleanly(running_system, remote, desktop):
    system, thread, result = running_system()

    system.request_shutdown()
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert result['exit'] == EXIT_OK
    assert system.file_monitor.running is False


def test_upload_error_stops_system(running_system, watch_dir, remote, desktop):
    """Test a transfer failure ends run() with a failure status"""
    remote.sftp.put.side_effect = OSError('connection reset')
    system, thread, result = running_system()

    (watch_dir / 'Screen Shot 2024-05-01 at 09.00.00.png').write_bytes(b'png-data')
    thread.join(timeout=10)

    assert not thread.is_alive()
    assert result['exit'] == EXIT_FAILURE
    assert system.get_statistics()['failed'] == 1
    desktop.notification.assert_not_called()

    # Left renamed in place, no rollback
    remaining = list(watch_dir.iterdir())
    assert len(remaining) == 1
    assert HASHED_PNG.match(remaining[0].name)
