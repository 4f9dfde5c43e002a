"""On-disk storage of snapshots and of the index used for fast listing."""

from __future__ import annotations

import contextlib
import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from workshot.types import SCHEMA_VERSION, Snapshot, _format_time, _parse_time

DEFAULT_DIR_NAME = ".workshot"
SHOTS_SUBDIR = "shots"
INDEX_FILE = "index.json"
INDEX_VERSION = 1


class StorageError(Exception):
    """Snapshots could not be stored, read or removed."""


class SnapshotNotFoundError(StorageError):
    """The named snapshot does not exist."""


@dataclass
class Metadata:
    """The small part of a snapshot kept in the index."""

    name: str
    created_at: datetime
    working_dir: str = ""
    git_branch: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "created_at": _format_time(self.created_at),
            "working_dir": self.working_dir,
        }
        if self.git_branch:
            data["git_branch"] = self.git_branch
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Metadata:
        if not isinstance(data, Mapping):
            raise ValueError("metadata must be a JSON object")
        return cls(
            name=str(data.get("name") or ""),
            created_at=_parse_time(data.get("created_at")),
            working_dir=str(data.get("working_dir") or ""),
            git_branch=str(data.get("git_branch") or ""),
        )


def _metadata_of(snap: Snapshot) -> Metadata:
    return Metadata(
        name=snap.name,
        created_at=snap.created_at,
        working_dir=snap.working_dir,
        git_branch=snap.git_branch,
    )


def _newest_first(entries: list[Metadata]) -> list[Metadata]:
    return sorted(entries, key=lambda meta: meta.created_at, reverse=True)


def _warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


class Storage:
    """Saves and loads snapshots under ``<home>/.workshot``."""

    def __init__(self, home: str | os.PathLike[str] | None = None) -> None:
        if home is None:
            try:
                home = Path.home()
            except RuntimeError as exc:
                raise StorageError(f"failed to get home directory: {exc}") from exc
        root = Path(home) / DEFAULT_DIR_NAME
        self.base_path = root / SHOTS_SUBDIR
        self.index_path = root / INDEX_FILE
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"failed to create storage directory: {exc}") from exc

    def _path(self, name: str) -> Path:
        return self.base_path / f"{name}.json"

    def save(self, snap: Snapshot) -> None:
        """Write a snapshot atomically and record it in the index."""
        if snap.schema_version != SCHEMA_VERSION:
            raise StorageError(
                f"schema version mismatch: got {snap.schema_version}, expected {SCHEMA_VERSION}"
            )
        path = self._path(snap.name)
        text = json.dumps(snap.to_dict(), indent=2, ensure_ascii=False)
        temp = path.with_name(path.name + ".tmp")
        try:
            temp.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"failed to write snapshot file: {exc}") from exc
        try:
            os.replace(temp, path)
        except OSError as exc:
            temp.unlink(missing_ok=True)
            raise StorageError(f"failed to finalize snapshot file: {exc}") from exc
        try:
            self._update_index(snap)
        except (OSError, ValueError) as exc:
            # The index can always be rebuilt from the snapshot files.
            _warn(f"failed to update index: {exc}")

    def load(self, name: str) -> Snapshot:
        """Read a snapshot, migrating it to the current schema when it is older."""
        try:
            text = self._path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise SnapshotNotFoundError(f"workshot '{name}' not found") from None
        except OSError as exc:
            raise StorageError(f"failed to read snapshot file: {exc}") from exc
        except ValueError as exc:
            raise StorageError(f"failed to unmarshal snapshot: {exc}") from exc
        try:
            snap = Snapshot.from_dict(json.loads(text))
        except (ValueError, TypeError) as exc:
            raise StorageError(f"failed to unmarshal snapshot: {exc}") from exc
        if snap.schema_version < SCHEMA_VERSION:
            self._migrate(snap)
        return snap

    def list(self) -> list[Metadata]:
        """Return metadata of all snapshots, newest first."""
        try:
            snapshots = self._load_index()
        except (OSError, ValueError, TypeError):
            return self._rebuild_index()
        return _newest_first(list(snapshots.values()))

    def delete(self, name: str) -> None:
        """Remove a snapshot file and its index entry."""
        try:
            self._path(name).unlink()
        except FileNotFoundError:
            raise SnapshotNotFoundError(f"workshot '{name}' not found") from None
        except OSError as exc:
            raise StorageError(f"failed to delete snapshot: {exc}") from exc
        with contextlib.suppress(OSError, ValueError, TypeError):
            snapshots = self._load_index()
            snapshots.pop(name, None)
            self._save_index(snapshots)

    def exists(self, name: str) -> bool:
        """Tell whether a snapshot file is present."""
        return self._path(name).exists()

    def _update_index(self, snap: Snapshot) -> None:
        try:
            snapshots = self._load_index()
        except (OSError, ValueError, TypeError):
            snapshots = {}
        snapshots[snap.name] = _metadata_of(snap)
        self._save_index(snapshots)

    def _load_index(self) -> dict[str, Metadata]:
        data = json.loads(self.index_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("index must be a JSON object")
        entries = data.get("snapshots") or {}
        if not isinstance(entries, dict):
            raise ValueError("index snapshots must be a JSON object")
        return {key: Metadata.from_dict(value) for key, value in entries.items()}

    def _save_index(self, snapshots: Mapping[str, Metadata]) -> None:
        data = {
            "version": INDEX_VERSION,
            "snapshots": {key: snapshots[key].to_dict() for key in sorted(snapshots)},
        }
        self.index_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def _rebuild_index(self) -> list[Metadata]:
        try:
            entries = sorted(self.base_path.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            raise StorageError(f"failed to read shots directory: {exc}") from exc

        snapshots: dict[str, Metadata] = {}
        for entry in entries:
            if entry.is_dir() or entry.suffix != ".json":
                continue
            name = entry.name[: -len(".json")]
            try:
                snap = self.load(name)
            except StorageError as exc:
                _warn(f"skipping corrupted snapshot '{name}': {exc}")
                continue
            snapshots[name] = _metadata_of(snap)

        try:
            self._save_index(snapshots)
        except OSError as exc:
            _warn(f"failed to save rebuilt index: {exc}")

        return _newest_first(list(snapshots.values()))

    @staticmethod
    def _migrate(snap: Snapshot) -> None:
        snap.schema_version = SCHEMA_VERSION