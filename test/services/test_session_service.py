"""Unit tests for the session runner."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

from conftest import (
    assistant_message,
    bash_use,
    init_message,
    result_message,
    scripted_query,
)

from wiggum_loop.constants import BUILDER_DONE, VERIFIER_DONE
from wiggum_loop.models.session import Role
from wiggum_loop.policies.command_policy import CommandPolicy
from wiggum_loop.services.session_service import SessionRunner


def _runner(config, query_fn, printer=None):
    return SessionRunner(
        config,
        CommandPolicy(["data/gold"]),
        query_fn=query_fn,
        printer=printer,
        announce=False,
    )


def _records(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestBuildOptions:
    def test_builder_has_no_hooks(self, config):
        options = _runner(config, scripted_query()).build_options(Role.BUILDER)
        assert not options.hooks
        assert options.cwd == str(config.repo_root)
        assert options.permission_mode == "bypassPermissions"
        assert options.setting_sources == ["user", "project"]

    def test_verifier_gets_bash_hook(self, config):
        options = _runner(config, scripted_query()).build_options(Role.VERIFIER)
        (matcher,) = options.hooks["PreToolUse"]
        assert matcher.matcher == "Bash"


class TestRunSession:
    def test_result_text_preferred_over_accumulated(self, config):
        query_fn = scripted_query(
            [
                init_message(),
                assistant_message("partial narration"),
                result_message(f"Finished.\n{BUILDER_DONE}\n"),
            ]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 1))

        assert result.result_text == f"Finished.\n{BUILDER_DONE}"
        assert result.builder_done
        assert not result.verifier_done
        assert not result.execution_faulted
        assert result.report is None

    def test_accumulated_text_used_without_result(self, config):
        query_fn = scripted_query(
            [assistant_message("part one, "), assistant_message(f"part two {BUILDER_DONE}")]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 1))

        assert result.result_text == f"part one, part two {BUILDER_DONE}"
        assert result.builder_done

    def test_prompt_and_options_forwarded(self, config):
        query_fn = scripted_query([result_message("ok")])
        asyncio.run(_runner(config, query_fn).run_session(Role.VERIFIER, "verify it", 2))

        prompt, options = query_fn.calls[0]
        assert prompt == "verify it"
        assert "PreToolUse" in options.hooks

    def test_transcript_records_every_message(self, config):
        query_fn = scripted_query(
            [init_message(), assistant_message("hi", bash_use("ls")), result_message("done")]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 7))

        path = result.transcript_path
        assert path.parent == config.log_dir
        assert path.name.startswith("builder_007_")
        assert path.suffix == ".jsonl"

        records = _records(path)
        assert len(records) == 3
        assert [r["msg"]["type"] for r in records] == [
            "SystemMessage",
            "AssistantMessage",
            "ResultMessage",
        ]
        assert all(r["kind"] == "builder" and r["iteration"] == 7 for r in records)
        assert all("ts" in r for r in records)

    def test_stream_fault_is_recorded_not_raised(self, config):
        query_fn = scripted_query(
            [assistant_message(f"{BUILDER_DONE}"), RuntimeError("transport closed")]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 1))

        assert result.execution_faulted
        # The marker was seen, but a crashed session never counts as done
        assert result.builder_done
        assert not result.completion_signaled

        records = _records(result.transcript_path)
        assert "transport closed" in records[-1]["error"]
        assert records[-1]["kind"] == "builder"

    def test_faulted_verifier_not_done_and_reports(self, config):
        query_fn = scripted_query(
            [assistant_message(f"looks fine {VERIFIER_DONE}"), ConnectionError("reset")]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.VERIFIER, "v", 1))

        assert result.execution_faulted
        assert not result.completion_signaled
        assert result.report == f"looks fine {VERIFIER_DONE}"

    def test_non_success_result_stays_marker_driven(self, config):
        query_fn = scripted_query(
            [
                assistant_message(f"done {BUILDER_DONE}"),
                result_message(None, subtype="error_max_turns", is_error=True),
            ]
        )
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 1))

        assert not result.execution_faulted
        assert result.result_subtype == "error_max_turns"
        assert result.result_text == f"done {BUILDER_DONE}"
        assert result.completion_signaled

    @patch("wiggum_loop.services.session_service.asyncio.to_thread", new_callable=AsyncMock)
    def test_transcript_writes_run_off_the_event_loop(self, mock_to_thread, config):
        async def run_inline(func, *args):
            return func(*args)

        mock_to_thread.side_effect = run_inline
        query_fn = scripted_query([init_message(), result_message("ok")])
        result = asyncio.run(_runner(config, query_fn).run_session(Role.BUILDER, "go", 1))

        assert mock_to_thread.await_count == 2
        assert all(c.args[0].__name__ == "write_message" for c in mock_to_thread.await_args_list)
        assert len(_records(result.transcript_path)) == 2

    def test_verifier_report_extracted(self, config):
        text = "Checked.\n<verifier-report>\n1. tests fail\n</verifier-report>"
        query_fn = scripted_query([result_message(text)])
        result = asyncio.run(_runner(config, query_fn).run_session(Role.VERIFIER, "v", 1))

        assert not result.verifier_done
        assert result.report == "1. tests fail"
        assert result.transcript_path.name.startswith("verifier_001_")

    def test_verifier_report_falls_back_to_full_text(self, config):
        query_fn = scripted_query([result_message("Tests are red.")])
        result = asyncio.run(_runner(config, query_fn).run_session(Role.VERIFIER, "v", 1))
        assert result.report == "Tests are red."

    def test_verified_session_has_no_report(self, config):
        query_fn = scripted_query([result_message(f"All good\n{VERIFIER_DONE}")])
        result = asyncio.run(_runner(config, query_fn).run_session(Role.VERIFIER, "v", 1))

        assert result.verifier_done
        assert result.completion_signaled
        assert result.report is None

    def test_printer_receives_normalized_events(self, config):
        printer = MagicMock()
        query_fn = scripted_query([init_message(), assistant_message("hi"), result_message("x")])
        asyncio.run(_runner(config, query_fn, printer=printer).run_session(Role.BUILDER, "go", 1))

        kinds = [c.args[1].kind for c in printer.call_args_list]
        assert kinds == ["init", "assistant", "result"]
        assert all(c.args[0] == Role.BUILDER for c in printer.call_args_list)
