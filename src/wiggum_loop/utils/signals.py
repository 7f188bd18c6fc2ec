"""Completion-marker, verifier-report and assistant-content extraction."""

from typing import List, Optional

from wiggum_loop.constants import BUILDER_DONE, REPORT_CLOSE, REPORT_OPEN, VERIFIER_DONE
from wiggum_loop.models.events import AssistantEvent, ToolUseSegment, TranscriptEvent


def builder_signaled(text: str) -> bool:
    """Return True when the builder completion marker appears anywhere in the text."""
    return BUILDER_DONE in (text or "").strip()


def verifier_signaled(text: str) -> bool:
    """Return True when the verifier completion marker appears anywhere in the text."""
    return VERIFIER_DONE in (text or "").strip()


def extract_report(text: str) -> Optional[str]:
    """Extract the verifier report wrapped in ``<verifier-report>`` tags.

    Uses the first opening tag and the first closing tag after it. Returns None
    when either tag is missing; callers fall back to the full session text.
    """
    if not text:
        return None
    start = text.find(REPORT_OPEN)
    if start == -1:
        return None
    body_start = start + len(REPORT_OPEN)
    end = text.find(REPORT_CLOSE, body_start)
    if end <= body_start:
        return None
    return text[body_start:end].strip()


def report_or_text(text: str) -> str:
    """Extracted report, or the full text when no delimited report is present."""
    report = extract_report(text)
    return report if report is not None else text


def extract_text(event: TranscriptEvent) -> str:
    """Concatenated text segments of an assistant event; empty for anything else."""
    if isinstance(event, AssistantEvent):
        return event.text
    return ""


def extract_tool_uses(event: TranscriptEvent) -> List[ToolUseSegment]:
    if isinstance(event, AssistantEvent):
        return event.tool_uses
    return []
