"""
Playwright toolkit availability and installation.

Implements IToolkitPort. The install procedure installs the Python package
with pip and then fetches one browser binary through Playwright's own CLI.
"""

import importlib
import importlib.util
import subprocess
import sys
from typing import List, Optional, Sequence

from browser_runner.domain.ports import IToolkitPort
from browser_runner.errors import ToolkitInstallError
from browser_runner.infrastructure.logging.logging_config import get_logger


logger = get_logger(__name__)


class PlaywrightToolkit(IToolkitPort):
    """
    Checks for and installs Playwright for Python.

    Install output is streamed to the terminal; a failing step stops the
    procedure and is reported as ToolkitInstallError.
    """

    def __init__(
        self,
        module_name: str = "playwright",
        package_spec: str = "playwright",
        browser: str = "chromium",
        python_executable: Optional[str] = None,
    ):
        self.module_name = module_name
        self.package_spec = package_spec
        self.browser = browser
        self.python_executable = python_executable or sys.executable

    def is_installed(self) -> bool:
        try:
            return importlib.util.find_spec(self.module_name) is not None
        except (ImportError, ValueError):
            return False

    def install_commands(self) -> List[List[str]]:
        return [
            [self.python_executable, "-m", "pip", "install", self.package_spec],
            [self.python_executable, "-m", "playwright", "install", self.browser],
        ]

    def install(self) -> None:
        print("Playwright not found. Installing...", file=sys.stderr)
        for command in self.install_commands():
            self._run_step(command)
        importlib.invalidate_caches()
        print("Playwright installed successfully", file=sys.stderr)

    def _run_step(self, command: Sequence[str]) -> None:
        printable = " ".join(command)
        logger.info("Running install step", command=printable)
        try:
            subprocess.run(list(command), check=True)
        except (subprocess.CalledProcessError, OSError) as e:
            logger.error("Install step failed", command=printable, error=str(e))
            raise ToolkitInstallError(
                "Failed to install Playwright",
                detail=f"{e}. Please run manually: {self.python_executable} -m pip install {self.package_spec} "
                f"&& {self.python_executable} -m playwright install {self.browser}",
                command=printable,
            ) from e
