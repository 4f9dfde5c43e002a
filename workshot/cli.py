"""Command-line interface for saving and restoring development contexts."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone

import click

from workshot.git import GitCapturer
from workshot.manager import Manager
from workshot.render import (
    format_age,
    render_restore,
    render_restore_commands,
    render_snapshot,
)
from workshot.snapshot import SnapshotError, freeze as freeze_snapshot
from workshot.snapshot import restore as restore_snapshot
from workshot.storage import Storage, StorageError
from workshot.terminal import TerminalCapturer
from workshot.types import get_version

_ALIASES = {
    "rm": "delete",
    "remove": "delete",
    "ls": "list",
    "info": "show",
}


def build_plugin_manager() -> Manager:
    """Create a manager with every capture plugin registered."""
    manager = Manager()
    manager.register(GitCapturer())
    manager.register(TerminalCapturer())
    return manager


class _AliasedGroup(click.Group):
    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, _ALIASES.get(cmd_name, cmd_name))


def _cyan(text: str) -> str:
    return click.style(text, fg="cyan")


@click.group(
    cls=_AliasedGroup,
    help="""save and restore your development context

\b
workshot helps you save your development state
and restore it later with one command

this helps when switching tasks or getting interrupted

\b
examples
  workshot freeze my-work        save current context
  workshot restore my-work       restore saved context
  workshot list                  list all saved contexts
  workshot show my-work          view context details""",
)
@click.version_option(get_version(), message="%(version)s", prog_name="workshot")
def cli() -> None:
    """Save and restore your development context."""


@cli.command()
@click.argument("name")
@click.option("-f", "--force", is_flag=True, help="Overwrite if exists")
def freeze(name: str, force: bool) -> None:
    """Save your current development context."""
    click.echo(f"{click.style('', fg='yellow')} Freezing workshot '{_cyan(name)}'...")
    freeze_snapshot(name, build_plugin_manager())
    click.echo(f"{click.style('✓', fg='green')} Workshot '{_cyan(name)}' saved successfully!")
    click.echo(f"   Restore it anytime with: {_cyan(f'workshot restore {name}')}")


@cli.command(name="list")
def list_command() -> None:
    """List all saved workshots (alias: ls)."""
    entries = Storage().list()
    if not entries:
        click.echo("No saved workshots found.")
        click.echo("\nCreate your first workshot with:")
        click.echo(f"  {_cyan('workshot freeze my-work')}")
        return

    click.echo(f"Found {len(entries)} saved workshot(s):\n")
    now = datetime.now(timezone.utc)
    for meta in entries:
        click.echo(f"  {_cyan(meta.name)}")
        created = meta.created_at if meta.created_at.tzinfo else meta.created_at.astimezone()
        age = click.style(format_age(now - created), fg="bright_black")
        line = f"     {age} • {meta.working_dir}"
        if meta.git_branch:
            line += f" • {meta.git_branch}"
        click.echo(line)

    click.echo("\nRestore any workshot with:")
    click.echo(f"  {_cyan('workshot restore <name>')}")


@cli.command()
@click.argument("name")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
def delete(name: str, force: bool) -> None:
    """Delete a saved workshot (aliases: rm, remove)."""
    store = Storage()
    if not store.exists(name):
        raise click.ClickException(f"workshot '{name}' not found")

    if not force:
        click.echo(
            f"{click.style('⚠', fg='yellow')} Are you sure you want to delete "
            f"workshot '{_cyan(name)}'? (y/N): ",
            nl=False,
        )
        answer = sys.stdin.readline()
        if not answer.endswith("\n"):
            raise click.ClickException("EOF")
        if answer.strip().lower() not in ("y", "yes"):
            click.echo("Cancelled.")
            return

    store.delete(name)
    click.echo(f"{click.style('✓', fg='green')} Deleted workshot '{_cyan(name)}'")


@cli.command()
@click.argument("name")
@click.option("-c", "--commands", is_flag=True, help="Output only shell commands for eval")
def restore(name: str, commands: bool) -> None:
    """Restore a saved development context.

    \b
    Examples:
      workshot restore my-task            # Show context and commands
      eval $(workshot restore my-task -c) # Execute restore commands
    """
    try:
        snap, problems = restore_snapshot(name, build_plugin_manager())
    except SnapshotError as exc:
        raise click.ClickException(f"failed to load snapshot '{name}'") from exc

    if commands:
        click.echo(render_restore_commands(snap), nl=False)
    else:
        click.echo(render_restore(name, snap, problems), nl=False)


@cli.command()
@click.argument("name")
@click.option("-j", "--json", "as_json", is_flag=True, help="Output raw JSON")
def show(name: str, as_json: bool) -> None:
    """Show detailed information about a workshot (alias: info)."""
    snap = Storage().load(name)
    if as_json:
        click.echo(json.dumps(snap.to_dict(), indent=2, ensure_ascii=False))
        return
    click.echo(render_snapshot(name, snap), nl=False)


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return the process exit code."""
    try:
        result = cli.main(args=argv, prog_name="workshot", standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        return 1
    except click.ClickException as exc:
        click.echo(f"Error: {exc.format_message()}", err=True)
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except (StorageError, SnapshotError) as exc:
        click.echo(f"Error: {exc}", err=True)
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())