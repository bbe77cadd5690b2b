"""
Temporary execution-unit storage.

Units are written as ``<prefix><epoch ms><suffix>`` in the work directory and
are never removed by the run that wrote them. The next invocation deletes
every leftover unit before writing its own, so a unit whose asynchronous work
outlives the executor's main routine is not unlinked mid-flight.
"""

import threading
import time
from pathlib import Path
from typing import List

from browser_runner.domain.ports import IWorkspacePort
from browser_runner.infrastructure.logging.logging_config import get_logger

logger = get_logger(__name__)

_last_stamp = 0
_stamp_lock = threading.Lock()


def _next_stamp() -> int:
    """Epoch milliseconds, strictly increasing within this process."""
    global _last_stamp
    with _stamp_lock:
        stamp = max(int(time.time() * 1000), _last_stamp + 1)
        _last_stamp = stamp
        return stamp


class TempWorkspace(IWorkspacePort):
    """
    Execution units on the local filesystem.

    Only one executor invocation per work directory is supported at a time:
    a concurrent run's ``cleanup_stale`` may delete a unit another run has
    just written.
    """

    def __init__(self, work_dir: Path, prefix: str = ".temp-execution-", suffix: str = ".py"):
        self.work_dir = Path(work_dir)
        self.prefix = prefix
        self.suffix = suffix

    def _is_unit(self, path: Path) -> bool:
        return path.name.startswith(self.prefix) and path.name.endswith(self.suffix)

    def list_units(self) -> List[Path]:
        if not self.work_dir.is_dir():
            return []
        return sorted(p for p in self.work_dir.iterdir() if p.is_file() and self._is_unit(p))

    def cleanup_stale(self) -> int:
        """
        Delete every unit left by previous runs.

        A file that cannot be removed (already gone, or still held by a
        running unit) is skipped; the pass never aborts.

        Returns:
            Number of files removed
        """
        removed = 0
        try:
            units = self.list_units()
        except OSError as e:
            logger.warning("Failed to list work directory", work_dir=str(self.work_dir), error=str(e))
            return 0

        for unit in units:
            try:
                unit.unlink()
                removed += 1
            except OSError as e:
                logger.debug("Skipping stale unit", path=str(unit), error=str(e))

        if removed:
            logger.info("Removed stale execution units", count=removed, work_dir=str(self.work_dir))
        return removed

    def allocate_path(self) -> Path:
        while True:
            path = self.work_dir / f"{self.prefix}{_next_stamp()}{self.suffix}"
            if not path.exists():
                return path

    def write_unit(self, path: Path, source: str) -> None:
        self.work_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        logger.debug("Wrote execution unit", path=str(path), size=len(source))
