"""Captures recent shell commands from the user's history files."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Iterable

from workshot.types import Capturer

DEFAULT_MAX_COMMANDS = 20

_SENSITIVE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"(password|passwd|pwd)\s*=",
        r"(secret|token|key|api[-_]?key)\s*=",
        r"export\s+(AWS|GITHUB|GITLAB|API|AUTH)_",
        r"\$env:[A-Z_]*?(PASSWORD|SECRET|TOKEN|KEY)",
        r"(bearer|auth)\s+[a-zA-Z0-9+/=]{20,}",
        r"curl.*(-H|--header).*authorization",
        r"(ssh|scp|rsync).*password",
        r"(postgres|mysql|mongodb|redis)://.*:.*@",
        r"SECRET_KEY\s*=",
        r"DJANGO_(SECRET|DB_PASSWORD)",
    )
)


def default_history_files() -> list[Path]:
    """Return the shell history files to look at, in order of preference."""
    try:
        home = Path.home()
    except RuntimeError:
        return []
    if sys.platform == "win32":
        app_data = Path(os.environ.get("APPDATA", ""))
        first = (
            app_data / "Microsoft" / "Windows" / "PowerShell" / "PSReadLine"
            / "ConsoleHost_history.txt"
        )
    else:
        first = home / ".zsh_history"
    return [first, home / ".bash_history", home / ".history"]


def clean_history_line(line: str) -> str:
    """Strip zsh extended-history prefixes, trailing backticks and whitespace."""
    if line.startswith(":"):
        parts = line.split(";", 1)
        if len(parts) == 2:
            line = parts[1]
    return line.removesuffix("`").strip()


def is_sensitive(line: str) -> bool:
    """Tell whether a command looks like it carries credentials."""
    return any(pattern.search(line) for pattern in _SENSITIVE_PATTERNS)


class TerminalCapturer(Capturer):
    """Captures the most recent non-sensitive shell commands."""

    name = "terminal"
    priority = 30

    def __init__(
        self,
        max_commands: int = DEFAULT_MAX_COMMANDS,
        history_files: Iterable[str | os.PathLike[str]] | None = None,
    ) -> None:
        self.max_commands = max_commands
        self.history_files = None if history_files is None else list(history_files)

    def capture(self) -> dict[str, Any] | None:
        files = self.history_files if self.history_files is not None else default_history_files()
        for path in files:
            commands = self.read_history_file(path)
            if commands:
                return {"recent_commands": commands}
        return None

    def restore(self, data: dict[str, Any]) -> None:
        """Commands are only shown, never replayed."""

    def can_restore(self, data: dict[str, Any]) -> bool:
        return False

    def read_history_file(self, path: str | os.PathLike[str]) -> list[str]:
        """Return the last commands of a history file, or [] if it cannot be read."""
        commands: list[str] = []
        try:
            with open(path, encoding="utf-8", errors="replace", newline="") as handle:
                for raw in handle:
                    line = clean_history_line(raw.removesuffix("\n").removesuffix("\r"))
                    if line and not is_sensitive(line):
                        commands.append(line)
        except OSError:
            return []
        if len(commands) > self.max_commands:
            commands = commands[len(commands) - self.max_commands:]
        return commands