"""
Browser Runner

Ad hoc Playwright script executor and local dev-server detection.
"""

__version__ = "1.0.0"

from .domain.entities import ScriptRun
from .domain.value_objects import (
    ExecutionUnit,
    ProbeResult,
    ResolvedSource,
    RunPhase,
    SourceOrigin,
)

__all__ = [
    "ScriptRun",
    "ExecutionUnit",
    "ProbeResult",
    "ResolvedSource",
    "RunPhase",
    "SourceOrigin",
]
