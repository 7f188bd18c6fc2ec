"""Entry point for the Wiggum Loop CLI."""

import logging

import click

from wiggum_loop.cli.commands.check_command import check_command
from wiggum_loop.cli.commands.run import run

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Python logging level for harness diagnostics (default: WARNING)",
)
def cli(log_level):
    """Wiggum Loop - autonomous builder/verifier harness."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


cli.add_command(run)
cli.add_command(check_command)


def main():
    cli()


if __name__ == "__main__":
    main()
