"""
Settings source doubles shared by the test modules.
"""

from typing import Optional

from review_service.cancellation import CancellationToken
from review_service.sources import MemorySettingsSource
from review_service.tracked_state import TrackedState


class FailingWriteSource(MemorySettingsSource):
    """Memory source whose write() always fails."""

    def __init__(self, state: Optional[TrackedState] = None):
        super().__init__()
        if state is not None:
            self._state = state
        self.write_attempts = 0

    async def write(self, ct: CancellationToken, state: TrackedState) -> None:
        self.write_attempts += 1
        raise OSError("disk full")


class FailingReadSource(MemorySettingsSource):
    """Memory source whose read() always fails."""

    async def read(self, ct: CancellationToken) -> TrackedState:
        raise OSError("storage unavailable")


class CountingSource(MemorySettingsSource):
    """Memory source that counts reads and writes."""

    def __init__(self, state: Optional[TrackedState] = None):
        super().__init__()
        if state is not None:
            self._state = state
        self.reads = 0
        self.writes = 0

    async def read(self, ct: CancellationToken) -> TrackedState:
        self.reads += 1
        return await super().read(ct)

    async def write(self, ct: CancellationToken, state: TrackedState) -> None:
        self.writes += 1
        await super().write(ct, state)
