"""Data models for the Wiggum Loop harness."""

from wiggum_loop.models.command import CommandDecision
from wiggum_loop.models.session import (
    IterationRecord,
    LoopOutcome,
    LoopState,
    Role,
    SessionResult,
)

__all__ = [
    "CommandDecision",
    "IterationRecord",
    "LoopOutcome",
    "LoopState",
    "Role",
    "SessionResult",
]
