"""
Script Run Entity

Tracks one executor invocation through its phases.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List

from browser_runner.domain.value_objects import RunPhase, ExecutionUnit, ResolvedSource
from browser_runner.errors import InvalidTransitionError


_TRANSITIONS = {
    RunPhase.IDLE: {RunPhase.RESOLVING_INPUT},
    RunPhase.RESOLVING_INPUT: {RunPhase.CHECKING_TOOLKIT, RunPhase.FAILED},
    RunPhase.CHECKING_TOOLKIT: {RunPhase.INSTALLING, RunPhase.NORMALIZING, RunPhase.FAILED},
    RunPhase.INSTALLING: {RunPhase.NORMALIZING, RunPhase.FAILED},
    RunPhase.NORMALIZING: {RunPhase.CLEANING_STALE, RunPhase.FAILED},
    RunPhase.CLEANING_STALE: {RunPhase.WRITING, RunPhase.FAILED},
    RunPhase.WRITING: {RunPhase.EXECUTING, RunPhase.FAILED},
    RunPhase.EXECUTING: {RunPhase.SUCCESS, RunPhase.FAILED},
    RunPhase.SUCCESS: set(),
    RunPhase.FAILED: set(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScriptRun:
    """
    Represents a single invocation of the script executor.

    Phases only move forward and every failure is terminal; there is no
    retry loop, so a failed run is never resumed.
    """

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    phase: RunPhase = RunPhase.IDLE
    source: Optional[ResolvedSource] = None
    unit: Optional[ExecutionUnit] = None
    created_at: datetime = field(default_factory=_now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    history: List[RunPhase] = field(default_factory=list)

    def advance(self, phase: RunPhase) -> None:
        """Move to the next phase, rejecting transitions the state machine does not allow."""
        if phase not in _TRANSITIONS[self.phase]:
            raise InvalidTransitionError(
                f"Cannot move script run from {self.phase.value} to {phase.value}",
                run_id=self.run_id,
            )
        if self.phase == RunPhase.IDLE:
            self.started_at = _now()
        self.history.append(self.phase)
        self.phase = phase
        if phase.is_terminal:
            self.completed_at = _now()

    def mark_as_succeeded(self) -> None:
        self.advance(RunPhase.SUCCESS)

    def mark_as_failed(self, error: str) -> None:
        self.error_message = error
        self.advance(RunPhase.FAILED)

    @property
    def is_finished(self) -> bool:
        return self.phase.is_terminal

    @property
    def duration_ms(self) -> Optional[int]:
        """Calculate run duration in milliseconds."""
        if self.started_at and self.completed_at:
            delta = self.completed_at - self.started_at
            return int(delta.total_seconds() * 1000)
        return None
