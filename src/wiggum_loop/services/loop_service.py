"""Builder/verifier loop controller.

Runs fresh builder sessions with the same base prompt. When the builder prints
its completion marker a verifier session re-checks the work; if the verifier
prints its own marker the loop ends successfully. Otherwise the verifier's
report replaces the stored report and is appended to the next builder prompt.
Running out of iterations is a normal outcome, not an error.
"""

import asyncio
import logging
from typing import Awaitable, Callable

import click

from wiggum_loop.config import LoopConfig
from wiggum_loop.exceptions import StartupError
from wiggum_loop.models.session import (
    IterationRecord,
    LoopOutcome,
    LoopState,
    Role,
    SessionResult,
)
from wiggum_loop.prompts import PromptSource
from wiggum_loop.services.transcript_service import SummaryLog

logger = logging.getLogger(__name__)

SessionFn = Callable[[Role, str, int], Awaitable[SessionResult]]
SleepFn = Callable[[float], Awaitable[None]]


def check_startup(config: LoopConfig) -> None:
    """Validate startup preconditions and create the log directory.

    Normal mode requires the project plan artifact; sanity mode does not.
    """
    if not config.sanity_check and not config.plan_file.is_file():
        raise StartupError(
            f"Project plan not found at {config.plan_file}.\n"
            "Create a CLAUDE.md in your project plan directory or set WIGGUM_PLAN_DIR."
        )
    config.log_dir.mkdir(parents=True, exist_ok=True)


class WiggumLoop:
    """Owns the loop state and decides continue / terminate each iteration."""

    def __init__(
        self,
        config: LoopConfig,
        run_session: SessionFn,
        prompts: PromptSource,
        summary: SummaryLog,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.config = config
        self.run_session = run_session
        self.prompts = prompts
        self.summary = summary
        self.sleep = sleep
        self.state = LoopState()

    async def _cooldown(self, iteration: int) -> None:
        # No wait after the final allowed iteration
        if iteration < self.config.max_loops and self.config.cooldown_seconds > 0:
            await self.sleep(self.config.cooldown_seconds)

    async def run(self) -> LoopOutcome:
        state = self.state
        max_loops = self.config.max_loops
        self.summary.loop_start()
        logger.info(f"Loop start: max_loops={max_loops} cooldown={self.config.cooldown_seconds}s")

        for i in range(1, max_loops + 1):
            state.iteration = i
            self.summary.iteration(i, max_loops)
            logger.info(f"Loop {i}/{max_loops} (report carried: {state.report is not None})")

            # 1) Builder
            builder = await self.run_session(
                Role.BUILDER, self.prompts.builder_prompt(state.report), i
            )
            record = IterationRecord(iteration=i, builder=builder)
            state.history.append(record)
            self.summary.builder_result(
                builder.execution_faulted, builder.completion_signaled, builder.transcript_path
            )

            if not builder.completion_signaled:
                click.echo(
                    f"\n[loop {i}] Builder not complete; "
                    f"sleeping {self.config.cooldown_seconds:g}s before next iteration...\n"
                )
                await self._cooldown(i)
                continue

            # 2) Verifier (only when builder claims complete)
            verifier = await self.run_session(Role.VERIFIER, self.prompts.verifier_prompt(), i)
            record.verifier = verifier
            self.summary.verifier_result(
                verifier.execution_faulted, verifier.completion_signaled, verifier.transcript_path
            )

            if verifier.completion_signaled:
                state.outcome = LoopOutcome.SUCCESS
                self.summary.verified()
                logger.info(f"Verified complete at iteration {i}")
                return state.outcome

            # 3) More work remains: the new report replaces the old one
            state.report = (verifier.report or "").strip() or None
            if state.report:
                self.summary.report(state.report)
                click.echo("\n[loop] Verifier requires more work; report captured for next builder.\n")
            else:
                click.echo("\n[loop] Verifier requires more work but no report extracted; continuing.\n")

            await self._cooldown(i)

        state.outcome = LoopOutcome.EXHAUSTED
        self.summary.exhausted(max_loops)
        logger.warning(f"Hit maximum loops ({max_loops}) without verification")
        return state.outcome
