"""Captures and restores the state of the git repository in the working directory."""

from __future__ import annotations

import subprocess
from typing import Any

from workshot.manager import CaptureError
from workshot.types import Capturer

SHORT_HASH_LENGTH = 7


def _run(*args: str, combined: bool = False) -> subprocess.CompletedProcess[str] | None:
    """Run a git command; return None when git cannot be started at all."""
    try:
        return subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combined else subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError:
        return None


def _output(*args: str) -> str | None:
    """Return the standard output of a successful git command, else None."""
    result = _run(*args)
    if result is None or result.returncode != 0:
        return None
    return result.stdout or ""


def is_git_repo() -> bool:
    """Tell whether the current directory is inside a git repository."""
    result = _run("rev-parse", "--git-dir")
    return result is not None and result.returncode == 0


def git_branch() -> str:
    """Return the current branch name, or an empty string."""
    return (_output("rev-parse", "--abbrev-ref", "HEAD") or "").strip()


def _git_remote() -> str:
    return (_output("config", "--get", "remote.origin.url") or "").strip()


def _git_dirty() -> bool:
    output = _output("status", "--porcelain")
    return bool(output and output.strip())


def _git_commit() -> str:
    commit = (_output("rev-parse", "HEAD") or "").strip()
    return commit[:SHORT_HASH_LENGTH]


def _git_stash_count() -> int:
    text = (_output("stash", "list") or "").strip()
    return len(text.split("\n")) if text else 0


class GitCapturer(Capturer):
    """Captures branch, remote, commit, dirty state and stash count."""

    name = "git"
    priority = 10

    def capture(self) -> dict[str, Any] | None:
        if not is_git_repo():
            return None

        data: dict[str, Any] = {}
        branch = git_branch()
        if branch:
            data["branch"] = branch
        remote = _git_remote()
        if remote:
            data["remote"] = remote
        data["dirty"] = _git_dirty()
        commit = _git_commit()
        if commit:
            data["commit"] = commit
        stash_count = _git_stash_count()
        if stash_count > 0:
            data["stash_count"] = stash_count
        return data

    def restore(self, data: dict[str, Any]) -> None:
        """Check out the saved branch unless it is already checked out."""
        branch = data.get("branch")
        if not isinstance(branch, str) or not branch:
            return
        if git_branch() == branch:
            return
        result = _run("checkout", branch, combined=True)
        if result is None or result.returncode != 0:
            output = result.stdout if result is not None and result.stdout else ""
            raise CaptureError(f"failed to checkout branch '{branch}': {output}")

    def can_restore(self, data: dict[str, Any]) -> bool:
        return "branch" in data and is_git_repo()