"""Text rendering of snapshots for the show and restore commands."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import click

from workshot.types import Snapshot

MAX_SHOWN_COMMANDS = 10
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_MINUTE = timedelta(minutes=1)
_HOUR = timedelta(hours=1)
_DAY = timedelta(days=1)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _bold(text: str) -> str:
    return click.style(text, bold=True)


def _cyan(text: str) -> str:
    return click.style(text, fg="cyan")


def _bold_cyan(text: str) -> str:
    return click.style(text, fg="cyan", bold=True)


def _gray(text: str) -> str:
    return click.style(text, fg="bright_black")


def _green(text: str) -> str:
    return click.style(text, fg="green")


def _yellow(text: str) -> str:
    return click.style(text, fg="yellow")


def _white(text: str) -> str:
    return click.style(text, fg="white")


def _quote(text: str) -> str:
    """Quote a string as a double-quoted, escaped literal."""
    parts = []
    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        else:
            code = ord(char)
            if code < 0x80:
                parts.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                parts.append(f"\\u{code:04x}")
            else:
                parts.append(f"\\U{code:08x}")
    return '"' + "".join(parts) + '"'


def _age(created: datetime, now: datetime | None) -> timedelta:
    if now is None:
        now = datetime.now(timezone.utc)
    if created.tzinfo is None:
        created = created.astimezone()
    if now.tzinfo is None:
        now = now.astimezone()
    return now - created


def _plugin(snap: Snapshot, key: str) -> dict[str, Any]:
    data = snap.plugin_data.get(key)
    return data if isinstance(data, dict) else {}


def _stash_count(git_data: dict[str, Any]) -> float:
    value = git_data.get("stash_count")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _recent_commands(snap: Snapshot) -> list[str]:
    commands = _plugin(snap, "terminal").get("recent_commands")
    if not isinstance(commands, list) or not commands:
        return []
    return [cmd for cmd in commands[-MAX_SHOWN_COMMANDS:] if isinstance(cmd, str)]


def _has_commands(snap: Snapshot) -> bool:
    commands = _plugin(snap, "terminal").get("recent_commands")
    return isinstance(commands, list) and len(commands) > 0


def _header(name: str, snap: Snapshot) -> list[str]:
    return [
        f" {_bold('Snapshot:')} {_bold_cyan(name)}",
        f"   {_bold('Created:')} {_gray(snap.created_at.strftime(TIME_FORMAT))}",
        "",
    ]


def _git_extras(snap: Snapshot) -> list[str]:
    lines = []
    git_data = _plugin(snap, "git")
    commit = git_data.get("commit")
    if isinstance(commit, str) and commit:
        lines.append(f"   {_bold('Commit:')}  {_gray(commit)}")
    stash = _stash_count(git_data)
    if stash > 0:
        lines.append(f"   {_bold('Stashes:')}  {stash:.0f}")
    return lines


def format_age(delta: timedelta) -> str:
    """Describe how long ago something happened, with singular units."""
    if delta < _MINUTE:
        return "just now"
    if delta < _HOUR:
        return f"{int(delta.total_seconds() / 60)} minutes ago"
    if delta < _DAY:
        hours = int(delta.total_seconds() / 3600)
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    days = int(delta.total_seconds() / 86400)
    return "1 day ago" if days == 1 else f"{days} days ago"


def format_duration(delta: timedelta) -> str:
    """Describe how long ago something happened, always in plural units."""
    if delta < _MINUTE:
        return "just now"
    if delta < _HOUR:
        return f"{int(delta.total_seconds() / 60)} minutes ago"
    if delta < _DAY:
        return f"{int(delta.total_seconds() / 3600)} hours ago"
    return f"{int(delta.total_seconds() / 86400)} days ago"


def render_snapshot(name: str, snap: Snapshot, now: datetime | None = None) -> str:
    """Render the detailed view of a snapshot."""
    lines = _header(name, snap)
    lines += [f" {_bold('Working Directory:')}", f"   {_green(snap.working_dir)}", ""]

    if snap.git_branch:
        status = "Dirty (uncommitted changes)" if snap.git_dirty else "Clean"
        lines += [
            f" {_bold('Git State:')}",
            f"   {_bold('Branch:')}  {_cyan(snap.git_branch)}",
            f"   {_bold('Status:')}  {status}",
        ]
        if snap.git_remote:
            lines.append(f"   {_bold('Remote:')}  {_gray(snap.git_remote)}")
        lines += _git_extras(snap)
        lines.append("")

    detected = _plugin(snap, "editor").get("detected")
    if isinstance(detected, str) and detected:
        lines += [f" {_bold('Editor:')}", f"   {_cyan(detected)}", ""]

    if _has_commands(snap):
        lines.append(f" {_bold('Recent Commands:')}")
        for cmd in _recent_commands(snap):
            paint = _cyan if cmd.startswith("git ") else _white
            lines.append(f"   {paint(cmd)}")
        lines.append("")

    lines += [
        f" {_bold('Metadata:')}",
        f"   {_bold('Schema Version:')} {snap.schema_version}",
        f"   {_bold('Age:')} {format_duration(_age(snap.created_at, now))}",
        f"   {_bold('Plugins:')} {len(snap.plugin_data)} active",
    ]
    return "\n".join(lines) + "\n"


def render_restore(name: str, snap: Snapshot, errors: Iterable[Exception] = ()) -> str:
    """Render a restored snapshot, the commands to finish restoring it and any warnings."""
    lines = _header(name, snap)
    lines += [f" {_bold('Working Directory:')}", f"   {snap.working_dir}", ""]

    if snap.git_branch or snap.git_remote:
        lines.append(f" {_bold('Git State:')}")
        if snap.git_branch:
            lines.append(f"   {_bold('Branch:')}  {_cyan(snap.git_branch)}")
        if snap.git_remote:
            lines.append(f"   {_bold('Remote:')}  {_gray(snap.git_remote)}")
        if snap.git_dirty:
            lines.append(
                f"   {_bold('Status:')}  {_yellow('Modified (uncommitted changes)')}"
            )
        else:
            lines.append(f"   {_bold('Status:')}  Clean")
        lines += _git_extras(snap)
        lines.append("")

    if _has_commands(snap):
        lines.append(f" {_bold('Recent Commands:')}")
        lines += [f"   {cmd}" for cmd in _recent_commands(snap)]
        lines.append("")

    lines.append(f" {_bold('Commands to restore:')}")
    lines.append(f"   cd {_quote(snap.working_dir)}")
    if snap.git_branch:
        lines.append(f"   git checkout {snap.git_branch}")

    warnings = list(errors)
    if warnings:
        lines.append("")
        lines += [f"⚠ {_bold('Warning:')} {err}" for err in warnings]
    return "\n".join(lines) + "\n"


def render_restore_commands(snap: Snapshot) -> str:
    """Render only the shell commands that restore a snapshot, for eval."""
    lines = [f"cd {_quote(snap.working_dir)}"]
    if snap.git_branch:
        lines.append(f"git checkout {snap.git_branch}")
    return "\n".join(lines) + "\n"