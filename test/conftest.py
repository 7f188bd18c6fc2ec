"""Shared fixtures: resolved configs and scripted executor streams."""

from pathlib import Path

import pytest
from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ToolUseBlock,
)

from wiggum_loop.config import LoopConfig


def make_config(root: Path, **overrides) -> LoopConfig:
    values = dict(
        repo_root=root,
        plan_dir=root / "harness" / "project",
        harness_dir=root / "harness",
        log_dir=root / "harness" / "logs",
        max_loops=3,
        cooldown_seconds=0,
    )
    values.update(overrides)
    return LoopConfig(**values)


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


def init_message():
    return SystemMessage(
        subtype="init",
        data={"model": "claude-test", "permissionMode": "bypassPermissions", "cwd": "/repo"},
    )


def assistant_message(*blocks):
    content = [TextBlock(text=b) if isinstance(b, str) else b for b in blocks]
    return AssistantMessage(content=content, model="claude-test")


def bash_use(command):
    return ToolUseBlock(id="toolu_1", name="Bash", input={"command": command})


def result_message(result="", subtype="success", is_error=False):
    return ResultMessage(
        subtype=subtype,
        duration_ms=10,
        duration_api_ms=8,
        is_error=is_error,
        num_turns=1,
        session_id="session-1",
        result=result,
    )


def scripted_query(*scripts):
    """Return a fake ``query`` that replays one message list per call.

    A script entry that is an exception instance is raised mid-stream. Every
    call is recorded in ``fake.calls`` as ``(prompt, options)``.
    """
    remaining = list(scripts)
    calls = []

    def fake(prompt, options):
        calls.append((prompt, options))
        messages = remaining.pop(0)

        async def stream():
            for message in messages:
                if isinstance(message, BaseException):
                    raise message
                yield message

        return stream()

    fake.calls = calls
    return fake
