from wiggum_loop.policies.command_policy import CommandPolicy, Rule
from wiggum_loop.policies.hooks import build_verifier_hooks, make_verifier_pre_tool_use_hook

__all__ = [
    "CommandPolicy",
    "Rule",
    "build_verifier_hooks",
    "make_verifier_pre_tool_use_hook",
]
