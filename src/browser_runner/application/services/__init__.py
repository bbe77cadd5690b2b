"""
Application Services

Service classes for handling use cases.
"""

from .executor_service import ExecutorService
from .detector_service import DetectorService

__all__ = ["ExecutorService", "DetectorService"]
