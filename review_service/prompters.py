"""
Prompters: the boundary that shows the platform review UI.

Real prompters live in the host application. The implementations here only
log, and select_prompter() picks one by platform so the orchestrator never
has to branch on it.
"""

import sys
from typing import Optional, Protocol, runtime_checkable

from review_service.logger import StructuredLogger, logger as default_logger


@runtime_checkable
class Prompter(Protocol):
    """Triggers the platform review prompt. The result is never inspected."""

    async def trigger(self) -> None:
        ...


class LoggingPrompter:
    """Prompter that only logs the trigger() invocation."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self._logger = logger or default_logger

    async def trigger(self) -> None:
        self._logger.info("Review prompt was triggered.")


class UnsupportedPlatformPrompter:
    """Prompter for platforms without a native review prompt."""

    def __init__(self, platform: str, logger: Optional[StructuredLogger] = None):
        self.platform = platform
        self._logger = logger or default_logger

    async def trigger(self) -> None:
        self._logger.warning(
            "Prompting for a review is not implemented on this platform.",
            platform=self.platform
        )


# sys.platform values without a review prompt
UNSUPPORTED_PLATFORMS = ("win32", "cygwin")


def select_prompter(
    platform: Optional[str] = None,
    logger: Optional[StructuredLogger] = None
) -> Prompter:
    """
    Pick the reference prompter for a platform (defaults to sys.platform).

    Hosts with a real prompt UI pass their own Prompter to ReviewService
    instead.
    """
    platform = platform or sys.platform
    if platform in UNSUPPORTED_PLATFORMS:
        return UnsupportedPlatformPrompter(platform, logger)
    return LoggingPrompter(logger)
