"""
Toolkit Port Interface

Defines the contract for checking and installing the automation toolkit.
This is an output port - implemented by infrastructure layer (Playwright).
"""

from abc import ABC, abstractmethod


class IToolkitPort(ABC):
    """
    Port interface for the browser-automation toolkit.

    Execution must never proceed against a missing toolkit, so callers
    check ``is_installed`` first and fall back to a single ``install``.
    """

    @abstractmethod
    def is_installed(self) -> bool:
        """
        Check if the toolkit module can be resolved.

        Returns:
            True if the toolkit is importable, False otherwise
        """
        pass

    @abstractmethod
    def install(self) -> None:
        """
        Install the toolkit and its browser binary.

        Raises:
            ToolkitInstallError: If any install step fails
        """
        pass
