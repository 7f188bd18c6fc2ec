"""Tagged transcript events normalized from executor messages.

The executor yields SDK message objects. Each one is reduced to one of four
variants so the session runner and console never branch on SDK internals:

- ``init``: session initialization notice (model, permission mode, cwd)
- ``assistant``: ordered text / tool-use segments authored by the agent
- ``result``: terminal result notice (subtype, turns, error flag, result text)
- ``other``: anything else, kept verbatim alongside its type name
"""

from typing import Any, Dict, List, Literal, Optional, Union

from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ToolUseBlock,
)
from pydantic import BaseModel, Field


class TextSegment(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolUseSegment(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


Segment = Union[TextSegment, ToolUseSegment]


class InitEvent(BaseModel):
    kind: Literal["init"] = "init"
    model: Optional[str] = None
    permission_mode: Optional[str] = None
    cwd: Optional[str] = None


class AssistantEvent(BaseModel):
    kind: Literal["assistant"] = "assistant"
    segments: List[Segment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated text segments, in order."""
        return "".join(s.text for s in self.segments if isinstance(s, TextSegment))

    @property
    def tool_uses(self) -> List[ToolUseSegment]:
        return [s for s in self.segments if isinstance(s, ToolUseSegment)]


class ResultEvent(BaseModel):
    kind: Literal["result"] = "result"
    subtype: str
    num_turns: Optional[int] = None
    is_error: bool = False
    result: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.subtype == "success" and isinstance(self.result, str)


class OtherEvent(BaseModel):
    kind: Literal["other"] = "other"
    type_name: str
    # The untouched executor message
    raw: Any = None


TranscriptEvent = Union[InitEvent, AssistantEvent, ResultEvent, OtherEvent]


def normalize_message(message: Any) -> TranscriptEvent:
    """Reduce an SDK message to a tagged transcript event."""
    if isinstance(message, SystemMessage):
        if message.subtype == "init":
            data = message.data if isinstance(message.data, dict) else {}
            return InitEvent(
                model=data.get("model"),
                permission_mode=data.get("permissionMode"),
                cwd=data.get("cwd"),
            )
        return OtherEvent(type_name=f"system:{message.subtype}", raw=message)

    if isinstance(message, AssistantMessage):
        segments: List[Segment] = []
        content = message.content
        # Some transports deliver a bare string instead of content blocks
        if isinstance(content, str):
            segments.append(TextSegment(text=content))
            return AssistantEvent(segments=segments)
        for block in content or []:
            if isinstance(block, TextBlock):
                segments.append(TextSegment(text=block.text))
            elif isinstance(block, ToolUseBlock):
                tool_input = block.input if isinstance(block.input, dict) else {}
                segments.append(ToolUseSegment(name=block.name, input=tool_input))
        return AssistantEvent(segments=segments)

    if isinstance(message, ResultMessage):
        return ResultEvent(
            subtype=message.subtype,
            num_turns=message.num_turns,
            is_error=bool(message.is_error),
            result=message.result if isinstance(message.result, str) else None,
        )

    return OtherEvent(type_name=type(message).__name__, raw=message)
