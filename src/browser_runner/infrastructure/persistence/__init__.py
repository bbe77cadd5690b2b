"""
Persistence Infrastructure

Temporary execution-unit files.
"""

from .temp_workspace import TempWorkspace

__all__ = ["TempWorkspace"]
