"""Command safety decision model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class CommandDecision(BaseModel):
    """Allow, or deny with a human-readable reason."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "CommandDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "CommandDecision":
        return cls(allowed=False, reason=reason)
