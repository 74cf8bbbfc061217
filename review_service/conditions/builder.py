"""
PolicyBuilder: fluent assembly of a review policy.

A policy is an ordered list of conditions that must all hold. Registration
order only affects diagnostics; it never changes the outcome.

Example:
    policy = (
        PolicyBuilder()
        .minimum_application_launch_count(3)
        .minimum_elapsed_since_first_launch(timedelta(days=7))
        .minimum_elapsed_since_last_request(timedelta(days=30))
        .custom(lambda state, now: now.weekday() < 5, name="is_weekday")
    )
"""

from datetime import datetime, timedelta
from typing import Any, Iterator, List, Mapping, Optional

from review_service.conditions.base import (
    AsyncPredicate,
    AsynchronousCondition,
    ReviewCondition,
    SyncPredicate,
    SynchronousCondition,
    condition_name,
    is_review_condition,
)
from review_service.errors import InvalidPolicyConfigError
from review_service.tracked_state import TrackedState


# Default policy thresholds
DEFAULT_MINIMUM_PRIMARY_ACTIONS_COMPLETED = 3
DEFAULT_MINIMUM_APPLICATION_LAUNCH_COUNT = 3
DEFAULT_MINIMUM_ELAPSED_SINCE_FIRST_LAUNCH = timedelta(days=5)
DEFAULT_MINIMUM_ELAPSED_SINCE_LAST_REQUEST = timedelta(days=15)


def _check_count(value: Any, argument: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{argument} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{argument} cannot be negative")
    return value


def _check_duration(value: Any, argument: str) -> timedelta:
    if not isinstance(value, timedelta):
        raise TypeError(f"{argument} must be a timedelta, got {type(value).__name__}")
    if value < timedelta(0):
        raise ValueError(f"{argument} cannot be negative")
    return value


def _format_duration(value: timedelta) -> str:
    if value.seconds == 0 and value.microseconds == 0:
        return f"{value.days}d"
    return str(value)


class PolicyBuilder:
    """
    Accumulates conditions in insertion order.

    Every registration method appends exactly one condition and returns the
    builder itself. There is no de-duplication and no check for redundant or
    contradictory conditions.
    """

    def __init__(self, conditions: Optional[List[ReviewCondition]] = None):
        self._conditions: List[ReviewCondition] = list(conditions or [])

    @classmethod
    def default(cls) -> "PolicyBuilder":
        """Builder pre-filled with the default policy."""
        return default_policy()

    @property
    def conditions(self) -> List[ReviewCondition]:
        """The assembled conditions, in registration order."""
        return self._conditions

    def add(self, condition: ReviewCondition) -> "PolicyBuilder":
        """Append any object implementing ReviewCondition."""
        if not is_review_condition(condition):
            raise TypeError(
                f"{type(condition).__name__} does not implement ReviewCondition"
            )
        self._conditions.append(condition)
        return self

    def minimum_primary_actions_completed(self, minimum: int) -> "PolicyBuilder":
        """The number of completed primary actions must be at least `minimum`."""
        minimum = _check_count(minimum, "minimum")

        def predicate(state: TrackedState, now: datetime) -> bool:
            return state.primary_action_completed_count >= minimum

        return self.add(SynchronousCondition(
            f"minimum_primary_actions_completed({minimum})", predicate
        ))

    def minimum_secondary_actions_completed(self, minimum: int) -> "PolicyBuilder":
        """The number of completed secondary actions must be at least `minimum`."""
        minimum = _check_count(minimum, "minimum")

        def predicate(state: TrackedState, now: datetime) -> bool:
            return state.secondary_action_completed_count >= minimum

        return self.add(SynchronousCondition(
            f"minimum_secondary_actions_completed({minimum})", predicate
        ))

    def minimum_application_launch_count(self, minimum: int) -> "PolicyBuilder":
        """The application must have been launched at least `minimum` times."""
        minimum = _check_count(minimum, "minimum")

        def predicate(state: TrackedState, now: datetime) -> bool:
            return state.application_launch_count >= minimum

        return self.add(SynchronousCondition(
            f"minimum_application_launch_count({minimum})", predicate
        ))

    def minimum_elapsed_since_first_launch(self, duration: timedelta) -> "PolicyBuilder":
        """
        At least `duration` must have passed since the first launch.

        Not satisfied while the first launch has never been recorded.
        """
        duration = _check_duration(duration, "duration")

        def predicate(state: TrackedState, now: datetime) -> bool:
            first_launch = state.first_application_launch
            return first_launch is not None and first_launch + duration <= now

        return self.add(SynchronousCondition(
            f"minimum_elapsed_since_first_launch({_format_duration(duration)})",
            predicate
        ))

    def minimum_elapsed_since_last_request(self, duration: timedelta) -> "PolicyBuilder":
        """
        At least `duration` must have passed since the last review request.

        Satisfied when no review was ever requested.
        """
        duration = _check_duration(duration, "duration")

        def predicate(state: TrackedState, now: datetime) -> bool:
            last_request = state.last_request
            return last_request is None or last_request + duration <= now

        return self.add(SynchronousCondition(
            f"minimum_elapsed_since_last_request({_format_duration(duration)})",
            predicate
        ))

    def custom(self, predicate: SyncPredicate, name: Optional[str] = None) -> "PolicyBuilder":
        """Append a caller-supplied predicate (state, now) -> bool."""
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        return self.add(SynchronousCondition(
            name or condition_name(predicate, "custom"), predicate
        ))

    def custom_async(self, predicate: AsyncPredicate, name: Optional[str] = None) -> "PolicyBuilder":
        """Append a caller-supplied coroutine function (ct, state, now) -> bool."""
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        return self.add(AsynchronousCondition(
            name or condition_name(predicate, "custom_async"), predicate
        ))

    def __len__(self) -> int:
        return len(self._conditions)

    def __iter__(self) -> Iterator[ReviewCondition]:
        return iter(self._conditions)

    def __repr__(self) -> str:
        names = ", ".join(c.name for c in self._conditions)
        return f"PolicyBuilder([{names}])"


def default_policy() -> PolicyBuilder:
    """
    Conventional ready-to-use policy.

    Requires:
    - 3 completed primary actions
    - 3 application launches
    - 5 days since the first launch
    - 15 days since the last review request (or no request yet)
    """
    return (
        PolicyBuilder()
        .minimum_primary_actions_completed(DEFAULT_MINIMUM_PRIMARY_ACTIONS_COMPLETED)
        .minimum_application_launch_count(DEFAULT_MINIMUM_APPLICATION_LAUNCH_COUNT)
        .minimum_elapsed_since_first_launch(DEFAULT_MINIMUM_ELAPSED_SINCE_FIRST_LAUNCH)
        .minimum_elapsed_since_last_request(DEFAULT_MINIMUM_ELAPSED_SINCE_LAST_REQUEST)
    )


# Declarative keys, applied in this order
_COUNT_KEYS = {
    "minimum_primary_actions_completed": PolicyBuilder.minimum_primary_actions_completed,
    "minimum_secondary_actions_completed": PolicyBuilder.minimum_secondary_actions_completed,
    "minimum_application_launch_count": PolicyBuilder.minimum_application_launch_count,
}
_DAY_KEYS = {
    "minimum_days_since_first_launch": PolicyBuilder.minimum_elapsed_since_first_launch,
    "minimum_days_since_last_request": PolicyBuilder.minimum_elapsed_since_last_request,
}
POLICY_CONFIG_KEYS = tuple(_COUNT_KEYS) + tuple(_DAY_KEYS)


def policy_from_config(config: Mapping[str, Any]) -> PolicyBuilder:
    """
    Build a policy from a mapping, e.g. the `policy:` section of settings.yaml.

    Example:
        policy:
          minimum_application_launch_count: 3
          minimum_days_since_first_launch: 7
          minimum_days_since_last_request: 30

    Raises:
        InvalidPolicyConfigError: On unknown keys or invalid values
    """
    unknown = sorted(set(config) - set(POLICY_CONFIG_KEYS))
    if unknown:
        raise InvalidPolicyConfigError(unknown[0], "unknown policy setting")

    builder = PolicyBuilder()
    for key, register in _COUNT_KEYS.items():
        if config.get(key) is None:
            continue
        try:
            register(builder, config[key])
        except (TypeError, ValueError) as e:
            raise InvalidPolicyConfigError(key, str(e)) from e

    for key, register in _DAY_KEYS.items():
        value = config.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidPolicyConfigError(key, "must be a number of days")
        try:
            register(builder, timedelta(days=value))
        except (TypeError, ValueError) as e:
            raise InvalidPolicyConfigError(key, str(e)) from e

    return builder
