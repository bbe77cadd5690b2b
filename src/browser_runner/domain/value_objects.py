"""
Value Objects

Immutable value objects for dev-server probing and script execution.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any


class SourceOrigin(str, Enum):
    """Input channel an automation source was read from."""

    FILE = "file"
    INLINE = "inline"
    STDIN = "stdin"


class RunPhase(str, Enum):
    """Phase of a single executor invocation."""

    IDLE = "idle"
    RESOLVING_INPUT = "resolving_input"
    CHECKING_TOOLKIT = "checking_toolkit"
    INSTALLING = "installing"
    NORMALIZING = "normalizing"
    CLEANING_STALE = "cleaning_stale"
    WRITING = "writing"
    EXECUTING = "executing"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunPhase.SUCCESS, RunPhase.FAILED)


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of probing one candidate port.

    Attributes:
        port: TCP port on localhost
        reachable: True iff a HEAD request answered with a status below 500
        status_code: HTTP status of the answer, when there was one
    """

    port: int
    reachable: bool
    status_code: Optional[int] = None

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "port": self.port,
            "reachable": self.reachable,
            "status_code": self.status_code,
            "url": self.url,
        }


@dataclass(frozen=True)
class ResolvedSource:
    """Automation source text together with the channel it came from."""

    origin: SourceOrigin
    text: str
    path: Optional[Path] = None


@dataclass(frozen=True)
class ExecutionUnit:
    """
    One normalized, self-contained automation module and its backing file.

    Attributes:
        raw_source: Source as supplied by the caller
        normalized_source: Source after wrapping, identical to raw_source when
            no wrapping was needed
        temp_path: Unique time-stamped file the normalized source is written to
    """

    raw_source: str
    normalized_source: str
    temp_path: Path

    @property
    def was_wrapped(self) -> bool:
        return self.raw_source != self.normalized_source
