"""
Pytest configuration and shared fixtures for the buildconnector test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the buildconnector project. Instead of a real Maven
installation the tests run a small Python script that behaves like one.
"""

import shutil
import sys
import tempfile
import textwrap
import threading
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from buildconnector.events import EventSink, FailureEvent, StartEvent, SuccessEvent  # noqa: E402
from buildconnector.models import ConnectorConfig  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


# Stand-in for the build tool. Arguments select the behavior:
#   fail     print a failure banner and exit 1
#   noisy    also write a line to stderr
#   big      print ~2 MB, more than any pipe buffer holds
#   bigerr   write ~1 MB to stderr before anything goes to stdout
#   sleep=N  sleep N seconds before finishing
FAKE_TOOL_SCRIPT = textwrap.dedent(
    """\
    import sys
    import time

    args = sys.argv[1:]
    for arg in args:
        if arg.startswith("sleep="):
            time.sleep(float(arg.split("=", 1)[1]))
    if "bigerr" in args:
        for i in range(10000):
            sys.stderr.write("[WARNING] stderr line %d %s\\n" % (i, "e" * 90))
        sys.stderr.flush()
    if "noisy" in args:
        sys.stderr.write("[WARNING] something odd\\n")
        sys.stderr.flush()
    if "big" in args:
        for i in range(20000):
            print("[INFO] line %d %s" % (i, "x" * 90))
    print("[INFO] Scanning for projects...")
    print("[INFO] goals: " + " ".join(a for a in args if not a.startswith("sleep=")))
    if "fail" in args:
        print("[ERROR] BUILD FAILURE")
        sys.exit(1)
    print("[INFO] BUILD SUCCESS")
    """
)

FAKE_TOOL_NAME = "fake_build_tool.py"

SAMPLE_POM = textwrap.dedent(
    """\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <modelVersion>4.0.0</modelVersion>
      <groupId>com.example</groupId>
      <artifactId>demo</artifactId>
      <version>1.0-SNAPSHOT</version>
    </project>
    """
)


@pytest.fixture
def fake_project(temp_dir):
    """A project directory holding the fake build tool script and a pom.xml."""
    project_dir = temp_dir / "project"
    project_dir.mkdir()
    (project_dir / FAKE_TOOL_NAME).write_text(FAKE_TOOL_SCRIPT, encoding="utf-8")
    (project_dir / "pom.xml").write_text(SAMPLE_POM, encoding="utf-8")
    return project_dir


@pytest.fixture
def log_dir(temp_dir):
    """An existing, empty log directory."""
    path = temp_dir / "log"
    path.mkdir()
    return path


@pytest.fixture
def tool_command():
    """Build a command template that runs the fake build tool with goals."""

    def _make(*goals: str) -> str:
        return " ".join((FAKE_TOOL_NAME,) + goals)

    return _make


@pytest.fixture
def connector_config(log_dir):
    """Connector settings that run the fake tool through the current interpreter."""
    return ConnectorConfig(
        executable=sys.executable,
        command=f"{FAKE_TOOL_NAME} clean compile",
        synchronous=True,
        use_log_file=False,
        log_dir=log_dir,
        drain_workers=4,
        shutdown_timeout=30.0,
    )


# ============================================================================
# Event Fixtures
# ============================================================================


class RecordingEventSink(EventSink):
    """Event sink that records every event it receives, in order."""

    def __init__(self):
        self.events: List[Any] = []
        self._lock = threading.Lock()
        self._terminal = threading.Condition(self._lock)
        self.threads: List[str] = []

    def _record(self, event) -> None:
        with self._lock:
            self.events.append(event)
            self.threads.append(threading.current_thread().name)
            self._terminal.notify_all()

    def raise_start(self, event: StartEvent) -> None:
        self._record(event)

    def raise_success(self, event: SuccessEvent) -> None:
        self._record(event)

    def raise_failure(self, event: FailureEvent) -> None:
        self._record(event)

    @property
    def terminal_events(self) -> List[Any]:
        with self._lock:
            return [e for e in self.events if not isinstance(e, StartEvent)]

    def events_for(self, job_id) -> List[Any]:
        with self._lock:
            return [e for e in self.events if e.job_id == job_id]

    def wait_for_terminal(self, count: int = 1, timeout: float = 30.0) -> bool:
        """Block until ``count`` terminal events have been recorded."""

        def _done():
            return sum(not isinstance(e, StartEvent) for e in self.events) >= count

        with self._lock:
            return self._terminal.wait_for(_done, timeout=timeout)


@pytest.fixture
def recording_sink():
    """Provide an event sink that records events."""
    return RecordingEventSink()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_connector_data():
    """Sample [connector] table for testing."""
    return {
        "executable": "mvn",
        "command": "clean compile",
        "synchronous": False,
        "use_log_file": True,
        "log_dir": "log",
        "log_prefix": "maven",
        "max_log_files": 5,
        "drain_workers": 4,
        "shutdown_timeout": 10.0,
    }


@pytest.fixture
def sample_project_entries():
    """Sample [[projects]] entries for testing."""
    return [
        {"name": "demo", "dir": "projects/demo", "kind": "build"},
        {"name": "demo-tests", "dir": "projects/demo", "kind": "TEST", "command": "test"},
    ]


@pytest.fixture
def config_files(temp_dir, sample_connector_data, sample_project_entries):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    config_data: Dict[str, Any] = {
        "connector": sample_connector_data,
        "projects": sample_project_entries,
    }
    with open(config_file, "w") as f:
        toml.dump(config_data, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from buildconnector.config import clear_config_cache, set_config_path

    clear_config_cache()
    # Always reset to original config path
    set_config_path(original_config_path)
