"""
Toolkit Infrastructure

Playwright availability check and installer.
"""

from .playwright_toolkit import PlaywrightToolkit

__all__ = ["PlaywrightToolkit"]
