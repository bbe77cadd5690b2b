"""
In-process module runner.

Executes a written execution unit as ``__main__`` inside the current
interpreter. There is no isolation: the unit shares the process, its
environment and its working directory with the executor.
"""

import runpy
import time
from pathlib import Path

from browser_runner.domain.ports import IModuleRunnerPort
from browser_runner.infrastructure.logging.logging_config import get_logger


logger = get_logger(__name__)


class InProcessModuleRunner(IModuleRunnerPort):
    """
    Runs execution units with ``runpy`` so ``if __name__ == "__main__"``
    guards in self-contained scripts fire as they would from the shell.
    """

    def run(self, path: Path) -> None:
        """
        Execute the unit at path.

        Args:
            path: Execution unit file

        Raises:
            Exception: Whatever the unit raises, unchanged
            SystemExit: When the unit exits on its own
        """
        start_time = time.perf_counter()
        logger.info("Loading execution unit", path=str(path))

        runpy.run_path(str(path), run_name="__main__")

        duration = time.perf_counter() - start_time
        logger.info("Execution unit returned", path=str(path), duration_ms=round(duration * 1000, 2))
