"""Terminal pretty-printing of session events."""

import click

from wiggum_loop.models.events import AssistantEvent, InitEvent, ResultEvent, TranscriptEvent
from wiggum_loop.models.session import Role
from wiggum_loop.utils.signals import extract_text, extract_tool_uses

TOOL_HINT_CHARS = 180


def print_event(role: Role, event: TranscriptEvent) -> None:
    """Echo one normalized event, prefixed with the session role."""
    tag = f"[{role.value}]"
    if isinstance(event, InitEvent):
        click.echo(
            f"{tag} init: model={event.model} permissionMode={event.permission_mode} cwd={event.cwd}"
        )
        return

    if isinstance(event, AssistantEvent):
        for tool_use in extract_tool_uses(event):
            hint = ""
            command = tool_use.input.get("command") if tool_use.name == "Bash" else None
            if command:
                hint = f": {str(command)[:TOOL_HINT_CHARS]}"
            click.echo(f"{tag} tool -> {tool_use.name}{hint}")

        text = extract_text(event)
        if text.strip():
            click.echo(text, nl=not text.endswith("\n"))
        return

    if isinstance(event, ResultEvent):
        click.echo(f"{tag} done: {event.subtype} turns={event.num_turns} error={event.is_error}")


def print_session_header(role: Role, iteration: int, transcript: str) -> None:
    click.echo(f"\n--- {role.value.upper()} session start (iter {iteration}) ---")
    click.echo(f"log: {transcript}")
    click.echo(
        f'tail: tail -f "{transcript}" | jq -r \'select(.msg.type=="AssistantMessage") '
        "| (.msg.content[]? | select(.text) | .text)'"
    )
    click.echo("-" * 60)


def print_banner(lines: list) -> None:
    click.echo("=" * 60)
    for line in lines:
        click.echo(f"  {line}")
    click.echo("=" * 60)
