"""
Domain Layer

Value objects, the script-run entity and domain services for
dev-server detection and automation script execution.
"""

from .entities import ScriptRun
from .value_objects import (
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
