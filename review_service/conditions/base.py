"""
Condition protocol for review policies.

A condition is a named predicate over (TrackedState, now). Policies mix two
variants behind the same protocol:
- SynchronousCondition wraps a plain function (state, now) -> bool
- AsynchronousCondition wraps a coroutine function (ct, state, now) -> bool

Returning False means "not satisfied". Raising means the condition could not
be evaluated; the orchestrator reports that as an evaluation error.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from review_service.cancellation import CancellationToken
from review_service.tracked_state import TrackedState


SyncPredicate = Callable[[TrackedState, datetime], bool]
AsyncPredicate = Callable[[CancellationToken, TrackedState, datetime], Awaitable[bool]]


@runtime_checkable
class ReviewCondition(Protocol):
    """
    Protocol implemented by every condition in a policy.

    Attributes:
        name: Name used in traces and logs
    """

    name: str

    async def validate(
        self,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime
    ) -> bool:
        """Return True when the condition is satisfied."""
        ...


@dataclass(frozen=True)
class SynchronousCondition:
    """
    Condition backed by a pure function.

    Example:
        SynchronousCondition(
            "has_launched",
            lambda state, now: state.application_launch_count > 0
        )
    """
    name: str
    predicate: SyncPredicate

    async def validate(
        self,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime
    ) -> bool:
        ct.raise_if_cancelled(f"condition '{self.name}'")
        return bool(self.predicate(state, now))


@dataclass(frozen=True)
class AsynchronousCondition:
    """
    Condition backed by a coroutine function that receives the cancel token.

    Example:
        async def store_is_reachable(ct, state, now):
            return await store_client.ping()

        AsynchronousCondition("store_is_reachable", store_is_reachable)
    """
    name: str
    predicate: AsyncPredicate

    async def validate(
        self,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime
    ) -> bool:
        ct.raise_if_cancelled(f"condition '{self.name}'")
        return bool(await self.predicate(ct, state, now))


def condition_name(func: Any, default: str = "custom") -> str:
    """Name for a caller-supplied predicate: its __name__ unless it is a lambda."""
    name = getattr(func, "__name__", "")
    if not name or name == "<lambda>":
        return default
    return name


def is_review_condition(obj: Any) -> bool:
    """Check if an object implements the ReviewCondition protocol."""
    return isinstance(obj, ReviewCondition)
