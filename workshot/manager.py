"""Runs the registered capture plugins."""

from __future__ import annotations

from typing import Any, Mapping

from workshot.types import Capturer


class CaptureError(Exception):
    """A capture plugin failed to capture or to restore its data."""


class Manager:
    """Holds capture plugins and runs them in priority order."""

    def __init__(self) -> None:
        self._capturers: list[Capturer] = []

    def register(self, capturer: Capturer) -> None:
        self._capturers.append(capturer)

    def capture_all(self) -> dict[str, Any]:
        """Run every capturer, lowest priority first, and collect their data.

        A failing capturer is skipped; CaptureError is raised only when some
        capturer failed and none produced any data.
        """
        self._capturers.sort(key=lambda capturer: capturer.priority)

        plugin_data: dict[str, Any] = {}
        failures: list[CaptureError] = []
        for capturer in self._capturers:
            try:
                data = capturer.capture()
            except Exception as exc:
                failure = CaptureError(f"{capturer.name}: {exc}")
                failure.__cause__ = exc
                failures.append(failure)
                continue
            if data:
                plugin_data[capturer.name] = data

        if failures and not plugin_data:
            details = " ".join(str(failure) for failure in failures)
            raise CaptureError(f"all capture plugins failed: [{details}]")
        return plugin_data

    def restore_all(self, plugin_data: Mapping[str, Any]) -> list[CaptureError]:
        """Restore each capturer's saved data and return the failures."""
        failures: list[CaptureError] = []
        for capturer in self._capturers:
            if capturer.name not in plugin_data:
                continue
            data = plugin_data[capturer.name]
            if not isinstance(data, dict):
                failures.append(CaptureError(f"{capturer.name}: invalid data format"))
                continue
            if not capturer.can_restore(data):
                continue
            try:
                capturer.restore(data)
            except Exception as exc:
                failure = CaptureError(f"{capturer.name}: {exc}")
                failure.__cause__ = exc
                failures.append(failure)
        return failures

    def list_capturers(self) -> list[str]:
        return [capturer.name for capturer in self._capturers]