import asyncio
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Set environment variables for testing
_test_root = tempfile.mkdtemp(prefix="drive-scanner-tests-")
os.environ["DATA_DIR"] = os.path.join(_test_root, "data")
os.environ["LOG_DIR"] = os.path.join(_test_root, "logs")
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_USE_COLOR"] = "false"

from drive_scanner.drivelist import Drive, Mountpoint  # noqa: E402


@pytest.fixture
def make_drive():
    """Build a Drive with a few defaults."""
    def _make_drive(device, system=False, mountpoints=(), **kwargs):
        return Drive(
            device=device,
            system=system,
            mountpoints=[Mountpoint(path=path) for path in mountpoints],
            **kwargs
        )
    return _make_drive


@pytest.fixture
def wait_for():
    """Poll a condition from within the event loop."""
    async def _wait_for(predicate, timeout=2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met in time")
            await asyncio.sleep(0.005)
    return _wait_for
