"""
Settings sources: where TrackedState is read from and written to.

The host picks the implementation. read() never returns None: a source with
nothing recorded yet returns a fresh default value.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol, Union, runtime_checkable

import yaml

from review_service.cancellation import CancellationToken
from review_service.tracked_state import TrackedState


@runtime_checkable
class SettingsSource(Protocol):
    """Persistence boundary for TrackedState."""

    async def read(self, ct: CancellationToken) -> TrackedState:
        """Return the current state, or a default value if none was written."""
        ...

    async def write(self, ct: CancellationToken, state: TrackedState) -> None:
        """Replace the stored state."""
        ...


class MemorySettingsSource:
    """In-memory source, for tests and hosts without persistence."""

    def __init__(self, default_factory: Callable[[], TrackedState] = TrackedState):
        self._state = default_factory()

    async def read(self, ct: CancellationToken) -> TrackedState:
        ct.raise_if_cancelled("settings read")
        return self._state

    async def write(self, ct: CancellationToken, state: TrackedState) -> None:
        ct.raise_if_cancelled("settings write")
        self._state = state

    def __repr__(self) -> str:
        return f"MemorySettingsSource({self._state!r})"


class YamlFileSettingsSource:
    """
    Source backed by a YAML document on disk.

    A missing or empty file reads as the default value. Writes go to a
    temporary file in the same directory which then replaces the target, so
    a crash mid-write leaves the previous document intact.

    Example file:
        application_launch_count: 4
        first_application_launch: '2024-05-01T09:30:00+00:00'
        request_count: 1
        last_request: '2024-06-01T10:00:00+00:00'
    """

    def __init__(
        self,
        path: Union[str, Path],
        default_factory: Callable[[], TrackedState] = TrackedState
    ):
        self.path = Path(path)
        self._default_factory = default_factory

    async def read(self, ct: CancellationToken) -> TrackedState:
        ct.raise_if_cancelled("settings read")
        return await asyncio.to_thread(self._read_sync)

    async def write(self, ct: CancellationToken, state: TrackedState) -> None:
        ct.raise_if_cancelled("settings write")
        await asyncio.to_thread(self._write_sync, state)

    def _read_sync(self) -> TrackedState:
        if not self.path.exists():
            return self._default_factory()

        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            return self._default_factory()
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a mapping")
        return TrackedState.from_dict(data)

    def _write_sync(self, state: TrackedState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(state.to_dict(), f, sort_keys=False, allow_unicode=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def __repr__(self) -> str:
        return f"YamlFileSettingsSource({str(self.path)!r})"


def is_settings_source(obj: Optional[object]) -> bool:
    """Check if an object implements the SettingsSource protocol."""
    return isinstance(obj, SettingsSource)
