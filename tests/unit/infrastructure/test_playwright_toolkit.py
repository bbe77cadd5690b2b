"""
Unit tests for the Playwright toolkit adapter.

Install steps are replaced with a recorded subprocess.run double.
"""

import subprocess

import pytest

from browser_runner.errors import ToolkitInstallError
from browser_runner.infrastructure.toolkit import playwright_toolkit
from browser_runner.infrastructure.toolkit.playwright_toolkit import PlaywrightToolkit


@pytest.mark.unit
class TestPlaywrightToolkit:

    def test_missing_module_is_not_installed(self):
        toolkit = PlaywrightToolkit(module_name="definitely_not_a_real_module_xyz")

        assert toolkit.is_installed() is False

    def test_installed_module_is_detected(self):
        toolkit = PlaywrightToolkit(module_name="json")

        assert toolkit.is_installed() is True

    def test_install_commands(self):
        toolkit = PlaywrightToolkit(browser="firefox", python_executable="/usr/bin/python3")

        assert toolkit.install_commands() == [
            ["/usr/bin/python3", "-m", "pip", "install", "playwright"],
            ["/usr/bin/python3", "-m", "playwright", "install", "firefox"],
        ]

    def test_install_runs_package_then_browser(self, monkeypatch, capsys):
        calls = []
        monkeypatch.setattr(
            playwright_toolkit.subprocess, "run",
            lambda cmd, check: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0),
        )
        toolkit = PlaywrightToolkit(python_executable="py")

        toolkit.install()

        assert calls == [
            ["py", "-m", "pip", "install", "playwright"],
            ["py", "-m", "playwright", "install", "chromium"],
        ]
        assert "Playwright installed successfully" in capsys.readouterr().err

    def test_failed_step_stops_install(self, monkeypatch):
        calls = []

        def failing_run(cmd, check):
            calls.append(cmd)
            raise subprocess.CalledProcessError(1, cmd)

        monkeypatch.setattr(playwright_toolkit.subprocess, "run", failing_run)
        toolkit = PlaywrightToolkit(python_executable="py")

        with pytest.raises(ToolkitInstallError) as exc_info:
            toolkit.install()

        assert len(calls) == 1
        assert exc_info.value.command == "py -m pip install playwright"
        assert "Please run manually" in exc_info.value.detail

    def test_missing_executable_is_install_error(self, monkeypatch):
        def missing(cmd, check):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(playwright_toolkit.subprocess, "run", missing)

        with pytest.raises(ToolkitInstallError):
            PlaywrightToolkit(python_executable="/nope/python").install()
