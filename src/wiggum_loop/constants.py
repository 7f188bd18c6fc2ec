"""Constants for the Wiggum Loop builder/verifier harness.

This module defines the protocol strings shared between the harness and the
agents it drives (completion markers, report delimiters), the default directory
layout, and the executor settings used for every session.

The harness runs fresh builder sessions until the builder claims completion,
then runs a restricted verifier session that either confirms the work or emits
a report that is fed into the next builder prompt.
"""

# =============================================================================
# Completion Protocol
# =============================================================================
# Agents print these markers on their own line to signal a state transition.
# Detection is plain substring containment on the trimmed session text.
BUILDER_DONE = "===WIGGUM_COMPLETE==="
VERIFIER_DONE = "===VERIFIER_COMPLETE==="

# Verifier failure reports are wrapped in these tags
REPORT_OPEN = "<verifier-report>"
REPORT_CLOSE = "</verifier-report>"

# =============================================================================
# Command Safety Policy
# =============================================================================
# Git subcommands the verifier is allowed to run (read-only)
READONLY_GIT_SUBCOMMANDS = frozenset({"status", "diff", "log", "show"})

# Only this tool is policed by the verifier pre-tool-use hook
POLICED_TOOL_NAME = "Bash"

# =============================================================================
# Directory Layout
# =============================================================================
# Relative defaults, resolved against the repo root (plan/harness) and the
# harness directory (logs)
DEFAULT_PLAN_DIR = "harness/project"
DEFAULT_HARNESS_DIR = "harness"
DEFAULT_LOG_DIR = "logs"

# The project status artifact that must exist in the plan directory
PLAN_FILE_NAME = "CLAUDE.md"

# Append-only summary of every run, one line per event
SUMMARY_LOG_NAME = "wiggum_master.log"

# Per-session transcript file names: <role>_<iteration>_<stamp>.jsonl
TRANSCRIPT_SUFFIX = ".jsonl"
ITERATION_PAD = 3
STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# =============================================================================
# Loop Limits
# =============================================================================
DEFAULT_MAX_LOOPS = 20
DEFAULT_COOLDOWN_SECONDS = 2

# =============================================================================
# Executor Settings
# =============================================================================
# Load user-scope settings (MCP servers, skills) and project CLAUDE.md files
SETTING_SOURCES = ["user", "project"]

# Full autonomy; the verifier hook still denies what the policy rejects
PERMISSION_MODE = "bypassPermissions"

# =============================================================================
# Sanity Check
# =============================================================================
SANITY_FILE = "/tmp/wiggum-sanity-test.txt"
SANITY_CONTENT = "wiggum-ok"
