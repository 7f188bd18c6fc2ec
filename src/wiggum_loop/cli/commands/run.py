"""Run command for the Wiggum Loop CLI."""

import asyncio
import sys
from pathlib import Path

import click

from wiggum_loop.config import load_config
from wiggum_loop.exceptions import WiggumError
from wiggum_loop.models.session import LoopOutcome
from wiggum_loop.policies.command_policy import CommandPolicy
from wiggum_loop.prompts import SanityPrompts, TemplatePrompts
from wiggum_loop.services.loop_service import WiggumLoop, check_startup
from wiggum_loop.services.session_service import SessionRunner
from wiggum_loop.services.transcript_service import SummaryLog
from wiggum_loop.utils.console import print_banner

# Conventional exit status for SIGINT
EXIT_INTERRUPTED = 130


@click.command()
@click.option(
    "--sanity-check",
    is_flag=True,
    help="Run one iteration with trivial fixed prompts to prove the loop works",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Optional JSON config file (environment variables take precedence)",
)
def run(sanity_check, config_file):
    """Run builder sessions until the verifier confirms completion."""
    try:
        config = load_config(config_file)
        if sanity_check:
            config = config.for_sanity_check()
        check_startup(config)
    except WiggumError as e:
        raise click.ClickException(str(e))

    summary = SummaryLog(config.summary_log_path)
    if sanity_check:
        title = [
            "WIGGUM LOOP - SANITY CHECK MODE",
            "(trivial prompts to prove builder -> verifier -> exit works)",
        ]
    else:
        title = ["WIGGUM LOOP - Autonomous Builder-Verifier"]
    print_banner(title)
    if not sanity_check:
        click.echo(f"Plan dir:     {config.relative(config.plan_dir)}")
    click.echo(f"Logs:         {config.relative(config.log_dir)}")
    click.echo(f"Master log:   {config.relative(summary.path)}")
    click.echo(f"Max loops:    {config.max_loops}")
    click.echo(f"Cooldown:     {config.cooldown_seconds:g}s")
    if config.protected_dirs:
        click.echo(f"Protected:    {', '.join(config.protected_dirs)}")
    click.echo("=" * 60 + "\n")

    policy = CommandPolicy(config.protected_dirs)
    runner = SessionRunner(config, policy)
    prompts = SanityPrompts() if sanity_check else TemplatePrompts(config)
    loop = WiggumLoop(config, runner.run_session, prompts, summary)

    try:
        outcome = asyncio.run(loop.run())
    except KeyboardInterrupt:
        click.echo("\nInterrupted; the current session transcript is incomplete.", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        raise click.ClickException(f"Fatal error: {e}")

    if outcome == LoopOutcome.SUCCESS:
        click.echo()
        print_banner(["VERIFIED COMPLETE (builder + verifier agree)"])
        click.echo()
        return

    click.echo(
        f"\nHit maximum loops ({config.max_loops}). Check master log: {summary.path}\n",
        err=True,
    )
    sys.exit(1)
