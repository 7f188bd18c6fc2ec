"""Tests for the wiggum CLI commands."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from wiggum_loop.cli.main import cli
from wiggum_loop.models.session import LoopOutcome
from wiggum_loop.prompts import SanityPrompts, TemplatePrompts


@pytest.fixture
def env(tmp_path):
    return {
        "WIGGUM_REPO_ROOT": str(tmp_path),
        "WIGGUM_MAX_LOOPS": "4",
        "WIGGUM_COOLDOWN_SECONDS": "0",
        "WIGGUM_PROTECTED_DIRS": "",
    }


@pytest.fixture
def plan(tmp_path):
    plan_dir = tmp_path / "harness" / "project"
    plan_dir.mkdir(parents=True)
    (plan_dir / "CLAUDE.md").write_text("# Plan\n")
    return plan_dir


class TestRunCommand:
    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_success_exits_zero(self, mock_loop_cls, env, plan):
        mock_loop_cls.return_value.run = AsyncMock(return_value=LoopOutcome.SUCCESS)

        result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 0, result.output
        assert "VERIFIED COMPLETE (builder + verifier agree)" in result.output
        assert "Max loops:    4" in result.output
        config, _, prompts, _ = mock_loop_cls.call_args.args
        assert config.max_loops == 4
        assert isinstance(prompts, TemplatePrompts)

    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_exhaustion_exits_one(self, mock_loop_cls, env, plan):
        mock_loop_cls.return_value.run = AsyncMock(return_value=LoopOutcome.EXHAUSTED)

        result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 1
        assert "Hit maximum loops (4)" in result.output
        assert "wiggum_master.log" in result.output

    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_missing_plan_fails_before_any_session(self, mock_loop_cls, env):
        result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 1
        assert "Project plan not found" in result.output
        mock_loop_cls.assert_not_called()

    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_sanity_check_needs_no_plan(self, mock_loop_cls, env, tmp_path):
        mock_loop_cls.return_value.run = AsyncMock(return_value=LoopOutcome.SUCCESS)

        result = CliRunner().invoke(cli, ["run", "--sanity-check"], env=env)

        assert result.exit_code == 0, result.output
        assert "SANITY CHECK MODE" in result.output
        config, _, prompts, _ = mock_loop_cls.call_args.args
        assert config.max_loops == 1
        assert config.cooldown_seconds == 0
        assert isinstance(prompts, SanityPrompts)
        assert (tmp_path / "harness" / "logs").is_dir()

    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_interrupt_exits_130(self, mock_loop_cls, env, plan):
        mock_loop_cls.return_value.run = AsyncMock(side_effect=KeyboardInterrupt)

        result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 130

    @patch("wiggum_loop.cli.commands.run.WiggumLoop")
    def test_fatal_error_exits_one(self, mock_loop_cls, env, plan):
        mock_loop_cls.return_value.run = AsyncMock(side_effect=OSError("disk full"))

        result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 1
        assert "Fatal error: disk full" in result.output

    def test_bad_config_reported(self, env, plan):
        env["WIGGUM_MAX_LOOPS"] = "lots"
        result = CliRunner().invoke(cli, ["run"], env=env)
        assert result.exit_code == 1
        assert "Invalid value for max_loops" in result.output


class TestCheckCommand:
    def test_allowed_command(self, env):
        result = CliRunner().invoke(cli, ["check-command", "git diff HEAD"], env=env)
        assert result.exit_code == 0
        assert result.output.strip() == "allow"

    def test_denied_command(self, env):
        result = CliRunner().invoke(cli, ["check-command", "git push origin main"], env=env)
        assert result.exit_code == 1
        assert result.output.startswith("deny: Blocked git command: git push.")

    def test_protected_dirs_from_env_and_option(self, env):
        env["WIGGUM_PROTECTED_DIRS"] = "data/gold"
        runner = CliRunner()

        from_env = runner.invoke(cli, ["check-command", "mv data/gold/a /tmp"], env=env)
        assert "Cannot move files in data/gold/" in from_env.output

        from_option = runner.invoke(
            cli, ["check-command", "--protect", "fixtures", "mv fixtures/a b"], env=env
        )
        assert from_option.exit_code == 1
        assert "Cannot move files in fixtures/" in from_option.output


class TestLogLevel:
    def test_rejects_unknown_level(self, env):
        result = CliRunner().invoke(cli, ["--log-level", "LOUD", "check-command", "ls"], env=env)
        assert result.exit_code == 2

    @patch("wiggum_loop.cli.main.logging.basicConfig")
    def test_level_applied(self, mock_basic_config, env):
        CliRunner().invoke(cli, ["--log-level", "debug", "check-command", "ls"], env=env)
        assert mock_basic_config.call_args.kwargs["level"] == 10
