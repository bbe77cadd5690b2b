"""
Workspace Port Interface

Defines the contract for the directory holding temporary execution units.
This is an output port - implemented by infrastructure layer.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List


class IWorkspacePort(ABC):
    """Port interface for temporary execution-unit files."""

    @abstractmethod
    def cleanup_stale(self) -> int:
        """
        Delete units left by previous runs.

        Returns:
            Number of files removed
        """
        pass

    @abstractmethod
    def allocate_path(self) -> Path:
        """
        Reserve a unique, time-stamped path for a new unit.

        Returns:
            Path that no earlier invocation has used
        """
        pass

    @abstractmethod
    def write_unit(self, path: Path, source: str) -> None:
        """Write normalized source to path."""
        pass

    @abstractmethod
    def list_units(self) -> List[Path]:
        """List unit files currently on disk."""
        pass
