"""Session and loop state models."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Agent role for a single session."""

    BUILDER = "builder"
    VERIFIER = "verifier"


class LoopOutcome(str, Enum):
    """Terminal outcome of the loop (PENDING while iterations remain)."""

    PENDING = "pending"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class SessionResult(BaseModel):
    """Outcome of one role's session, immutable once returned."""

    model_config = ConfigDict(frozen=True)

    role: Role
    iteration: int = Field(ge=1)
    transcript_path: Path
    result_text: str = ""
    builder_done: bool = False
    verifier_done: bool = False
    execution_faulted: bool = False
    result_subtype: Optional[str] = None
    report: Optional[str] = None

    @property
    def completion_signaled(self) -> bool:
        """True when the session emitted the marker for its own role.

        A session whose stream raised is never done, whatever text it
        produced before the fault.
        """
        if self.execution_faulted:
            return False
        if self.role == Role.BUILDER:
            return self.builder_done
        return self.verifier_done


class IterationRecord(BaseModel):
    """Sessions run during one loop iteration."""

    iteration: int = Field(ge=1)
    builder: SessionResult
    verifier: Optional[SessionResult] = None


class LoopState(BaseModel):
    """Cross-iteration state owned by the loop controller."""

    iteration: int = 0
    report: Optional[str] = None
    outcome: LoopOutcome = LoopOutcome.PENDING
    history: List[IterationRecord] = Field(default_factory=list)

    @property
    def builder_sessions(self) -> int:
        return len(self.history)

    @property
    def verifier_sessions(self) -> int:
        return sum(1 for record in self.history if record.verifier is not None)
