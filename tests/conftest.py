"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src and the test helpers to path so tests run without an editable install
_tests_path = Path(__file__).resolve().parent
for _path in (_tests_path.parent / "src", _tests_path):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from browser_runner.infrastructure.logging import configure_logging
from support import FakeToolkit, TTYStdin


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or browser")
    config.addinivalue_line("markers", "integration: tests using real sockets, files and in-process execution")
    config.addinivalue_line("markers", "contract: tests of port implementations against their interface")


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Route structlog through stdlib logging on stderr for the whole session."""
    configure_logging("WARNING")


@pytest.fixture
def fake_toolkit() -> FakeToolkit:
    return FakeToolkit()


@pytest.fixture
def tty_stdin() -> TTYStdin:
    return TTYStdin()


@pytest.fixture
def work_dir(tmp_path) -> Path:
    """Empty work directory for execution units."""
    path = tmp_path / "work"
    path.mkdir()
    return path
