"""Evaluate a shell command against the verifier command policy."""

import sys
from pathlib import Path

import click

from wiggum_loop.config import load_config
from wiggum_loop.exceptions import WiggumError
from wiggum_loop.policies.command_policy import CommandPolicy


@click.command("check-command")
@click.argument("command")
@click.option(
    "--protect",
    multiple=True,
    help="Extra protected directory (repeatable), added to WIGGUM_PROTECTED_DIRS",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Optional JSON config file",
)
def check_command(command, protect, config_file):
    """Show whether the verifier would be allowed to run COMMAND."""
    try:
        config = load_config(config_file)
    except WiggumError as e:
        raise click.ClickException(str(e))

    policy = CommandPolicy([*config.protected_dirs, *protect])
    decision = policy.evaluate(command)
    if decision.allowed:
        click.echo("allow")
        return
    click.echo(f"deny: {decision.reason}")
    sys.exit(1)
