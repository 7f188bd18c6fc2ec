"""Session runner: one role's session against the agent executor."""

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, List, Optional

from claude_agent_sdk import ClaudeAgentOptions, query

from wiggum_loop.config import LoopConfig
from wiggum_loop.constants import PERMISSION_MODE, SETTING_SOURCES
from wiggum_loop.models.events import (
    AssistantEvent,
    ResultEvent,
    TranscriptEvent,
    normalize_message,
)
from wiggum_loop.models.session import Role, SessionResult
from wiggum_loop.policies.command_policy import CommandPolicy
from wiggum_loop.policies.hooks import build_verifier_hooks
from wiggum_loop.services.transcript_service import (
    TranscriptWriter,
    now_stamp,
    transcript_path_for,
)
from wiggum_loop.utils.console import print_event, print_session_header
from wiggum_loop.utils.signals import (
    builder_signaled,
    extract_text,
    report_or_text,
    verifier_signaled,
)

logger = logging.getLogger(__name__)

QueryFn = Callable[..., AsyncIterator[Any]]
EventPrinter = Callable[[Role, TranscriptEvent], None]


class SessionRunner:
    """Runs fresh executor sessions and folds their streams into results.

    Each session owns its transcript file for its whole duration. Faults raised
    while consuming the executor stream are recorded, never propagated, so the
    loop treats the session as "not done" and moves on.
    """

    def __init__(
        self,
        config: LoopConfig,
        policy: CommandPolicy,
        query_fn: Optional[QueryFn] = None,
        printer: Optional[EventPrinter] = print_event,
        announce: bool = True,
    ):
        self.config = config
        self.policy = policy
        self.query_fn = query_fn or query
        self.printer = printer
        self.announce = announce

    def build_options(self, role: Role) -> ClaudeAgentOptions:
        """Executor options; only the verifier gets the command policy hook."""
        options_kwargs = dict(
            cwd=str(self.config.repo_root),
            setting_sources=list(SETTING_SOURCES),
            permission_mode=PERMISSION_MODE,
        )
        if role == Role.VERIFIER:
            options_kwargs["hooks"] = build_verifier_hooks(self.policy)
        return ClaudeAgentOptions(**options_kwargs)

    async def run_session(self, role: Role, prompt: str, iteration: int) -> SessionResult:
        transcript_path = transcript_path_for(self.config.log_dir, role, iteration, now_stamp())
        options = self.build_options(role)

        if self.announce:
            print_session_header(role, iteration, self.config.relative(transcript_path))
        logger.info(f"Starting {role.value} session (iteration {iteration}): {transcript_path}")

        accumulated: List[str] = []
        final_result: Optional[str] = None
        result_subtype: Optional[str] = None
        faulted = False

        with TranscriptWriter(transcript_path, role, iteration) as transcript:
            try:
                async for message in self.query_fn(prompt=prompt, options=options):
                    await asyncio.to_thread(transcript.write_message, message)
                    event = normalize_message(message)
                    if self.printer is not None:
                        self.printer(role, event)

                    if isinstance(event, AssistantEvent):
                        accumulated.append(extract_text(event))
                    elif isinstance(event, ResultEvent):
                        result_subtype = event.subtype
                        if event.succeeded:
                            final_result = event.result
                        else:
                            logger.warning(
                                f"{role.value} session ended with result {event.subtype} "
                                f"(iteration {iteration})"
                            )
            except Exception as e:
                faulted = True
                logger.error(f"{role.value} session crashed (iteration {iteration}): {e}")
                await asyncio.to_thread(transcript.write_error, e)

        result_text = (final_result or "".join(accumulated)).strip()
        builder_done = builder_signaled(result_text)
        verifier_done = verifier_signaled(result_text)

        report = None
        if role == Role.VERIFIER and (faulted or not verifier_done):
            report = report_or_text(result_text)

        logger.info(
            f"Finished {role.value} session (iteration {iteration}): "
            f"faulted={faulted} builder_done={builder_done} verifier_done={verifier_done}"
        )
        return SessionResult(
            role=role,
            iteration=iteration,
            transcript_path=transcript_path,
            result_text=result_text,
            builder_done=builder_done,
            verifier_done=verifier_done,
            execution_faulted=faulted,
            result_subtype=result_subtype,
            report=report,
        )
