"""
Application Layer

Orchestrates domain objects to execute use cases.
"""

from .commands.resolve_source import resolve_source
from .services.executor_service import ExecutorService
from .services.detector_service import DetectorService

__all__ = ["resolve_source", "ExecutorService", "DetectorService"]
