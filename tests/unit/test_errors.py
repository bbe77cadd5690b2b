"""
Unit tests for the error hierarchy.
"""

import json

import pytest

from browser_runner.errors import (
    BrowserRunnerError,
    ExecutionError,
    InputError,
    InvalidTransitionError,
    ToolkitInstallError,
)


@pytest.mark.unit
class TestBrowserRunnerError:

    def test_str_includes_detail(self):
        error = BrowserRunnerError("Something failed", detail="disk full")

        assert str(error) == "Error: Something failed\nDetail: disk full"

    def test_to_dict_drops_empty_fields(self):
        error = BrowserRunnerError("Something failed", run_id="abc123", hint=None)

        assert error.to_dict() == {"message": "Something failed", "run_id": "abc123"}

    def test_to_json(self):
        error = ToolkitInstallError("Failed to install Playwright", detail="exit 1", command="pip install playwright")

        assert json.loads(error.to_json()) == {
            "message": "Failed to install Playwright",
            "detail": "exit 1",
            "command": "pip install playwright",
        }
        assert error.command == "pip install playwright"

    @pytest.mark.parametrize("error_class, exit_code", [
        (BrowserRunnerError, 1),
        (InputError, 2),
        (ToolkitInstallError, 1),
        (ExecutionError, 1),
        (InvalidTransitionError, 1),
    ])
    def test_exit_codes(self, error_class, exit_code):
        error = error_class("boom")

        assert isinstance(error, BrowserRunnerError)
        assert error.exit_code == exit_code

    def test_execution_error_keeps_traceback_out_of_dict(self):
        error = ExecutionError("boom", traceback_text="Traceback ...", phase="executing")

        assert error.traceback_text == "Traceback ..."
        assert error.to_dict() == {"message": "boom", "phase": "executing"}
