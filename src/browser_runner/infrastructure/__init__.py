"""
Infrastructure Layer

Provides technical implementations for external concerns.
"""

from .http import HttpProbeClient
from .isolation import InProcessModuleRunner
from .persistence import TempWorkspace
from .toolkit import PlaywrightToolkit

__all__ = ["HttpProbeClient", "InProcessModuleRunner", "TempWorkspace", "PlaywrightToolkit"]
