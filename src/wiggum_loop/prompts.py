"""Builder and verifier prompts.

These prompts ARE the plan: everything the builder needs goes in the builder
prompt, everything the verifier needs goes in the verifier prompt. The default
templates are deliberately generic; point ``WIGGUM_BUILDER_PROMPT_FILE`` and
``WIGGUM_VERIFIER_PROMPT_FILE`` at task-specific templates to replace them.
Templates may use ``{builder_done}``, ``{verifier_done}``, ``{plan_file}`` and
``{max_loops}`` placeholders.
"""

from pathlib import Path
from typing import Optional, Protocol

from wiggum_loop.config import LoopConfig
from wiggum_loop.constants import (
    BUILDER_DONE,
    REPORT_CLOSE,
    REPORT_OPEN,
    SANITY_CONTENT,
    SANITY_FILE,
    VERIFIER_DONE,
)

RULE = "━" * 60

SANITY_BUILDER_PROMPT = f"""
You are running a SANITY CHECK for the Wiggum Loop harness.

Your ONLY task:
1. Create a file at {SANITY_FILE} containing exactly: {SANITY_CONTENT}
2. Read it back to confirm it exists and has the right content.

After confirming, output exactly on its own line:
{BUILDER_DONE}

Do this immediately. Do nothing else. No git, no project files, just create that one temp file and output the marker.
""".strip()

SANITY_VERIFIER_PROMPT = f"""
You are running a SANITY CHECK verification for the Wiggum Loop harness.

Your ONLY task:
1. Read the file {SANITY_FILE}
2. Verify its contents are exactly: {SANITY_CONTENT}

If the file exists and is correct, output exactly on its own line:
{VERIFIER_DONE}

If something is wrong, output:
{REPORT_OPEN}
Describe what is wrong.
{REPORT_CLOSE}

Do this immediately. Do nothing else.
""".strip()

DEFAULT_BUILDER_TEMPLATE = f"""
You are an autonomous builder agent working in a Wiggum Loop (builder-verifier pattern).
You have full tool access and {{max_loops}} iterations to complete this task.

{RULE}
# 1. THE TASK
{RULE}

Project plan: {{plan_file}}
Read the project plan first. It describes the problem, the deliverables, the
current status and the baselines you must not regress.

{RULE}
# 2. WORKFLOW
{RULE}

1. Read the project plan for current status.
2. Implement the next missing piece of work.
3. Run the verification commands listed in the plan.
4. Fix any failures.
5. Update the project plan with new metrics.

{RULE}
# 3. EXIT CHECKLIST
{RULE}

Before outputting the completion marker, every exit condition in the project
plan must be met and the plan must be updated with current metrics.

When ALL conditions are met, output EXACTLY on its own line:
{{builder_done}}
""".strip()

DEFAULT_VERIFIER_TEMPLATE = f"""
You are a VERIFIER agent in a Wiggum Loop (builder-verifier pattern).
Your job is to DISCONFIRM that the builder is done. Actively look for problems.

You have READ-ONLY Bash access (no rm, no mutating git, no file deletion).
You CAN run tests, read files, and edit the project plan ({{plan_file}}).

{RULE}
VERIFICATION CHECKLIST (check ALL in order)
{RULE}

1. Outputs exist: expected output files/artifacts are present
2. Tests pass: run the test commands from the project plan
3. Quality thresholds met
4. No regressions: compare against baselines in {{plan_file}}
5. Format correct: validate output schemas/formats
6. Spot check: manually inspect a sample of outputs

{RULE}
DECISION
{RULE}

If ALL checks pass, output EXACTLY on its own line:
{{verifier_done}}

If ANY check fails, output a structured report:
{REPORT_OPEN}
## Critical Issues (must fix)
1. [Issue description with specific details]

## Regressions
2. [What got worse, with measurements]

## Improvements Needed
3. [Quality issues below threshold]

## What's Working (do not break)
- [Things that are currently correct]
{REPORT_CLOSE}

IMPORTANT:
- Be SPECIFIC: include file paths, measurements, error messages
- PRIORITIZE: critical failures first, cosmetic issues last
- Include "What's Working" to prevent the builder from breaking passing tests
- Update {{plan_file}} with the current iteration status
""".strip()

REPORT_SECTION_HEADER = f"""
{RULE}
LATEST VERIFIER REPORT (MUST ADDRESS FULLY)
{RULE}
The verifier found the following issues on the previous iteration.
You MUST address every item below. Do not skip any.
""".strip()


def render_template(template: str, config: LoopConfig) -> str:
    """Substitute the known placeholders; other braces are left untouched."""
    replacements = {
        "{builder_done}": BUILDER_DONE,
        "{verifier_done}": VERIFIER_DONE,
        "{plan_file}": config.relative(config.plan_file),
        "{max_loops}": str(config.max_loops),
    }
    for placeholder, value in replacements.items():
        template = template.replace(placeholder, value)
    return template.strip()


def _template(path: Optional[Path], default: str) -> str:
    if path is None:
        return default
    return path.read_text(encoding="utf-8")


def base_builder_prompt(config: LoopConfig) -> str:
    return render_template(_template(config.builder_prompt_file, DEFAULT_BUILDER_TEMPLATE), config)


def build_builder_prompt(config: LoopConfig, verifier_report: Optional[str]) -> str:
    """Build the builder prompt, appending the latest verifier report verbatim."""
    prompt = base_builder_prompt(config)
    if verifier_report:
        prompt += f"\n\n{REPORT_SECTION_HEADER}\n\n{verifier_report}"
    return prompt


def base_verifier_prompt(config: LoopConfig) -> str:
    return render_template(
        _template(config.verifier_prompt_file, DEFAULT_VERIFIER_TEMPLATE), config
    )


class PromptSource(Protocol):
    """Supplies the prompts for one loop iteration."""

    def builder_prompt(self, verifier_report: Optional[str]) -> str: ...

    def verifier_prompt(self) -> str: ...


class TemplatePrompts:
    """Task prompts built from templates and the current verifier report."""

    def __init__(self, config: LoopConfig):
        self.config = config

    def builder_prompt(self, verifier_report: Optional[str]) -> str:
        return build_builder_prompt(self.config, verifier_report)

    def verifier_prompt(self) -> str:
        return base_verifier_prompt(self.config)


class SanityPrompts:
    """Fixed trivial prompts proving builder -> verifier -> exit works."""

    def builder_prompt(self, verifier_report: Optional[str]) -> str:
        return SANITY_BUILDER_PROMPT

    def verifier_prompt(self) -> str:
        return SANITY_VERIFIER_PROMPT
