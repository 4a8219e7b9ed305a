"""
pytest configuration for errlog tests.

Adds src directory to Python path for imports and restores process-wide
state (active reporter, config singleton, collector cache) around tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from errlog.config import reset_config  # noqa: E402
from errlog.reporting import collector as collector_module  # noqa: E402
from errlog.reporting.record import SystemInfo  # noqa: E402
from errlog.reporting.reporter import reset_reporter  # noqa: E402


@pytest.fixture(autouse=True)
def restore_global_state():
    """Every test starts with the default reporter and no cached state."""
    reset_reporter()
    reset_config()
    collector_module._collectors.clear()
    yield
    reset_reporter()
    reset_config()
    collector_module._collectors.clear()


@pytest.fixture
def system_info() -> SystemInfo:
    return SystemInfo(os_type="linux", os_version="Ubuntu 22.04", os_arch="amd64")


class RecordingReporter:
    """Reporter capturing every record it is handed."""

    name = "recording"

    def __init__(self, result: bool = True):
        self.records = []
        self.result = result

    def report(self, record) -> bool:
        self.records.append(record)
        return self.result


@pytest.fixture
def recording_reporter():
    from errlog.reporting.reporter import report_to

    reporter = RecordingReporter()
    report_to(reporter)
    return reporter
