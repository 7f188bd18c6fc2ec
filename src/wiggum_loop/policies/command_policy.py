"""Command safety policy for verifier shell commands.

The verifier CAN read files, run tests and edit project status docs.
The verifier CANNOT:
  - Delete files (rm, rmdir, unlink, git clean)
  - Run mutating git commands (only status/diff/log/show are allowed)
  - Delete or move configured protected directories

Rules are plain functions evaluated in order; the first rule that returns a
deny reason wins, and a command no rule rejects is allowed. Callers can append
domain-specific rules through ``extra_rules``.
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence

from wiggum_loop.constants import READONLY_GIT_SUBCOMMANDS
from wiggum_loop.models.command import CommandDecision


# A rule returns a deny reason, or None to defer to the next rule
Rule = Callable[[str], Optional[str]]

DELETE_PRIMITIVES = ("rm", "rmdir", "unlink")
DELETE_PATTERNS = [(name, re.compile(rf"\b{name}\b")) for name in DELETE_PRIMITIVES]
GIT_CLEAN_PATTERN = re.compile(r"\bgit\s+clean\b")
# git as a command word (segment start, after whitespace, "(", "`", "$", a quote
# or a path separator), capturing the following subcommand token
GIT_INVOCATION_PATTERN = re.compile(
    r"(?:^|(?<=[\s(`$/'\"]))git(?=$|[\s)`'\"])(?:\s+([^\s)`'\";]+))?"
)
# Shell control operators that start a new command segment
SEGMENT_SPLIT_PATTERN = re.compile(r"&&|\|\||[;|\n]")
REMOVE_PATTERN = r"\brm\b"
MOVE_PATTERN = r"\b(?:mv|rename)\b"

MAX_REASON_COMMAND_CHARS = 200


def _attempted(command: str) -> str:
    return command.strip()[:MAX_REASON_COMMAND_CHARS]


def deny_delete_commands(command: str) -> Optional[str]:
    """Reject any rm/rmdir/unlink invocation anywhere in the command."""
    for name, pattern in DELETE_PATTERNS:
        if pattern.search(command):
            return (
                f"Blocked: {name} is not allowed in verifier mode "
                f"(attempted: {_attempted(command)})."
            )
    return None


def deny_git_clean(command: str) -> Optional[str]:
    """Reject git clean, which deletes untracked files."""
    if GIT_CLEAN_PATTERN.search(command):
        return "Blocked: git clean (deletes files) is not allowed in verifier mode."
    return None


def command_segments(command: str) -> List[str]:
    """Split a shell command line into its trimmed, non-empty segments."""
    return [s.strip() for s in SEGMENT_SPLIT_PATTERN.split(command) if s.strip()]


def deny_mutating_git(command: str) -> Optional[str]:
    """Reject git invocations whose subcommand is not read-only.

    ``git`` counts as a command word wherever it appears in a segment: at the
    start, after a prefix such as ``sudo`` or ``env``, inside ``(...)``,
    ``$(...)`` or backticks, or as the last component of a path. The
    subcommand is the next token; a missing subcommand is rejected as well.
    """
    allowed = "/".join(sorted(READONLY_GIT_SUBCOMMANDS))
    for segment in command_segments(command):
        for match in GIT_INVOCATION_PATTERN.finditer(segment):
            subcommand = match.group(1) or ""
            if subcommand in READONLY_GIT_SUBCOMMANDS:
                continue
            return (
                f"Blocked git command: git {subcommand or '(unknown)'}. "
                f"Only git {allowed} are allowed in verifier mode."
            )
    return None


def protected_path_rule(protected_paths: Iterable[str]) -> Rule:
    """Build a rule rejecting rm/mv/rename of any protected path, in either token order."""
    names = [p.strip().rstrip("/") for p in protected_paths if p and p.strip().rstrip("/")]
    checks = []
    for name in names:
        escaped = re.escape(name)
        remove = [
            re.compile(rf"{REMOVE_PATTERN}.*{escaped}", re.DOTALL),
            re.compile(rf"{escaped}.*{REMOVE_PATTERN}", re.DOTALL),
        ]
        move = [
            re.compile(rf"{MOVE_PATTERN}.*{escaped}", re.DOTALL),
            re.compile(rf"{escaped}.*{MOVE_PATTERN}", re.DOTALL),
        ]
        checks.append((name, remove, move))

    def deny_protected_paths(command: str) -> Optional[str]:
        for name, remove, move in checks:
            if any(p.search(command) for p in remove):
                return (
                    f"Blocked: Cannot delete {name}/ (protected data). "
                    "This directory must remain unchanged."
                )
            if any(p.search(command) for p in move):
                return f"Blocked: Cannot move files in {name}/ (protected data)."
        return None

    return deny_protected_paths


class CommandPolicy:
    """Ordered, first-deny-wins rule chain for verifier shell commands."""

    def __init__(
        self,
        protected_paths: Sequence[str] = (),
        extra_rules: Sequence[Rule] = (),
    ):
        self.protected_paths = tuple(protected_paths)
        self.rules: List[Rule] = [
            deny_delete_commands,
            deny_git_clean,
            deny_mutating_git,
            protected_path_rule(self.protected_paths),
            *extra_rules,
        ]

    def evaluate(self, command: str) -> CommandDecision:
        """Decide whether the verifier may run ``command``."""
        command = command or ""
        for rule in self.rules:
            reason = rule(command)
            if reason:
                return CommandDecision.deny(reason)
        return CommandDecision.allow()
