"""Snapshot model, schema constants and the capture plugin contract."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

# Incremented only when a breaking change is made to the snapshot structure.
SCHEMA_VERSION = 1

VERSION = "v0.1.0"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


def get_version() -> str:
    """Return the program version string."""
    return VERSION


def _format_time(moment: datetime) -> str:
    """Format a timestamp as RFC 3339, using 'Z' for UTC."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _parse_time(text: Any) -> datetime:
    """Parse an RFC 3339 timestamp, accepting 'Z' and up to nanosecond precision."""
    if not isinstance(text, str):
        raise ValueError(f"invalid timestamp: {text!r}")
    value = text.strip()
    if value[-1:] in ("Z", "z"):
        value = value[:-1] + "+00:00"
    match = _FRACTION.search(value)
    if match:
        digits = match.group(1)[:6].ljust(6, "0")
        value = f"{value[:match.start()]}.{digits}{value[match.end():]}"
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp: {text!r}") from exc
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment


def _typed(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ValueError(f"field {key!r} has the wrong type: {value!r}")
    return value


@dataclass
class Snapshot:
    """A saved development context at a point in time."""

    name: str
    schema_version: int = SCHEMA_VERSION
    created_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    working_dir: str = ""
    git_branch: str = ""
    git_remote: str = ""
    git_dirty: bool = False
    plugin_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the snapshot, leaving out empty optional fields."""
        data: dict[str, Any] = {
            "schema_version": self.schema_version,
            "name": self.name,
            "created_at": _format_time(self.created_at),
            "working_dir": self.working_dir,
        }
        if self.git_branch:
            data["git_branch"] = self.git_branch
        if self.git_remote:
            data["git_remote"] = self.git_remote
        if self.git_dirty:
            data["git_dirty"] = True
        if self.plugin_data:
            data["plugin_data"] = self.plugin_data
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Snapshot:
        """Build a snapshot from its JSON form; raise ValueError on malformed data."""
        if not isinstance(data, Mapping):
            raise ValueError("snapshot data must be a JSON object")
        created = data.get("created_at")
        return cls(
            name=_typed(data, "name", str, ""),
            schema_version=_typed(data, "schema_version", int, 0),
            created_at=_ZERO_TIME if created is None else _parse_time(created),
            working_dir=_typed(data, "working_dir", str, ""),
            git_branch=_typed(data, "git_branch", str, ""),
            git_remote=_typed(data, "git_remote", str, ""),
            git_dirty=_typed(data, "git_dirty", bool, False),
            plugin_data=dict(_typed(data, "plugin_data", dict, {})),
        )


class Capturer(ABC):
    """A plugin that captures part of the environment and can restore it.

    ``name`` is the key under which its data is stored; capturers with a
    lower ``priority`` run first.
    """

    name: str = ""
    priority: int = 0

    @abstractmethod
    def capture(self) -> dict[str, Any] | None:
        """Collect data from the environment; return None when there is nothing."""

    @abstractmethod
    def restore(self, data: dict[str, Any]) -> None:
        """Apply previously captured data; raise on failure."""

    @abstractmethod
    def can_restore(self, data: dict[str, Any]) -> bool:
        """Tell whether the given data can be safely restored."""


def new_snapshot(name: str) -> Snapshot:
    """Create a snapshot stamped with the current time and the current schema."""
    return Snapshot(name=name)