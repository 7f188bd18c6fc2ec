"""Verifier PreToolUse hook wiring the command policy into the agent executor.

Hooks are evaluated by the Claude CLI before the permission mode, so they
apply even when sessions run with ``bypassPermissions``. Only ``Bash`` tool
calls are policed; every other tool call is allowed untouched.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from claude_agent_sdk import HookMatcher

from wiggum_loop.constants import POLICED_TOOL_NAME
from wiggum_loop.policies.command_policy import CommandPolicy

logger = logging.getLogger(__name__)

HookCallback = Callable[[Any, Any, Any], Awaitable[Dict[str, Any]]]

PRE_TOOL_USE = "PreToolUse"


def _field(input_data: Any, name: str) -> Any:
    if isinstance(input_data, dict):
        return input_data.get(name)
    return getattr(input_data, name, None)


def make_verifier_pre_tool_use_hook(policy: CommandPolicy) -> HookCallback:
    """Return an async PreToolUse hook that denies what ``policy`` rejects."""

    async def verifier_pre_tool_use(input_data, tool_use_id, context):
        if not input_data or _field(input_data, "hook_event_name") != PRE_TOOL_USE:
            return {}
        if _field(input_data, "tool_name") != POLICED_TOOL_NAME:
            return {}

        tool_input = _field(input_data, "tool_input")
        command = ""
        if isinstance(tool_input, dict):
            command = str(tool_input.get("command") or "")

        decision = policy.evaluate(command)
        if decision.allowed:
            return {}

        logger.info(f"Verifier command denied: {command.strip()[:120]!r} ({decision.reason})")
        return {
            "hookSpecificOutput": {
                "hookEventName": PRE_TOOL_USE,
                "permissionDecision": "deny",
                "permissionDecisionReason": decision.reason or "Blocked by verifier hook",
            }
        }

    return verifier_pre_tool_use


def build_verifier_hooks(policy: CommandPolicy) -> Dict[str, list]:
    """Hook configuration for verifier sessions (builder sessions get none)."""
    return {
        PRE_TOOL_USE: [
            HookMatcher(
                matcher=POLICED_TOOL_NAME,
                hooks=[make_verifier_pre_tool_use_hook(policy)],
            ),
        ],
    }
