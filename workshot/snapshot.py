"""Freezing the current work context into a snapshot and restoring it."""

from __future__ import annotations

import os

from workshot.manager import CaptureError, Manager
from workshot.storage import Storage, StorageError
from workshot.types import Snapshot, new_snapshot


class SnapshotError(Exception):
    """A snapshot could not be frozen or loaded."""


def _storage_or_default(storage: Storage | None) -> Storage:
    if storage is not None:
        return storage
    try:
        return Storage()
    except StorageError as exc:
        raise SnapshotError(f"failed to initialize storage: {exc}") from exc


def freeze(name: str, manager: Manager, storage: Storage | None = None) -> Snapshot:
    """Capture the current context and save it under ``name``."""
    snap = new_snapshot(name)

    try:
        snap.working_dir = os.getcwd()
    except OSError as exc:
        raise SnapshotError(f"failed to get working directory: {exc}") from exc

    try:
        plugin_data = manager.capture_all()
    except CaptureError as exc:
        raise SnapshotError(f"capture failed: {exc}") from exc
    snap.plugin_data = plugin_data

    git_data = plugin_data.get("git")
    if isinstance(git_data, dict):
        branch = git_data.get("branch")
        if isinstance(branch, str):
            snap.git_branch = branch
        remote = git_data.get("remote")
        if isinstance(remote, str):
            snap.git_remote = remote
        dirty = git_data.get("dirty")
        if isinstance(dirty, bool):
            snap.git_dirty = dirty

    store = _storage_or_default(storage)
    if store.exists(name):
        raise SnapshotError(
            f"workshot '{name}' already exists (use 'workshot delete {name}' first)"
        )
    try:
        store.save(snap)
    except StorageError as exc:
        raise SnapshotError(f"failed to save snapshot: {exc}") from exc
    return snap


def restore(
    name: str, manager: Manager, storage: Storage | None = None
) -> tuple[Snapshot, list[Exception]]:
    """Load a snapshot, move to its directory and let the plugins restore their data.

    Returns the snapshot and the non-fatal problems met along the way.
    """
    store = _storage_or_default(storage)
    try:
        snap = store.load(name)
    except StorageError as exc:
        raise SnapshotError(str(exc)) from exc

    problems: list[Exception] = []
    if snap.working_dir:
        try:
            os.chdir(snap.working_dir)
        except OSError as exc:
            problems.append(SnapshotError(f"failed to change directory: {exc}"))

    problems.extend(manager.restore_all(snap.plugin_data))
    return snap, problems