"""
Module Runner Port Interface

Defines the contract for executing a written execution unit.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class IModuleRunnerPort(ABC):
    """Port interface for loading and executing a unit as a module."""

    @abstractmethod
    def run(self, path: Path) -> None:
        """
        Execute the module at path in the current process.

        Args:
            path: Unit file to execute

        Raises:
            Exception: Whatever the unit raises, unchanged
        """
        pass
