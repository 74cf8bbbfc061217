"""
ReviewService: decides whether to ask the user for a review, asks, and
records that it did.

Each call is a fresh read-evaluate-act cycle:

    state = read()                      # once per call
    now = clock()                       # once per call
    satisfied = AND(condition(state, now) for every condition)
    if satisfied:
        prompter.trigger()
        write(state.with_request_recorded(now))

Errors:
- a failure to decide (read error, condition error, cancellation) raises an
  EvaluationError and nothing else happens
- a failure to record (write error) after the prompt is logged as
  TrackingPersistenceError and not raised

There is no locking between concurrent calls. Two overlapping calls may both
prompt and their writes may race; hosts that care must serialize calls.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence, Union

from review_service.cancellation import CancellationToken, ensure_token
from review_service.conditions.base import ReviewCondition, is_review_condition
from review_service.conditions.builder import PolicyBuilder, default_policy, policy_from_config
from review_service.conditions.trace import EvaluationTrace
from review_service.errors import (
    ConditionEvaluationError,
    EvaluationError,
    OperationCancelledError,
    SettingsReadError,
    TrackingPersistenceError,
)
from review_service.logger import NullLogger
from review_service.prompters import Prompter
from review_service.settings import EVALUATION_MODES, get_settings
from review_service.sources import SettingsSource, is_settings_source
from review_service.tracked_state import TrackedState, as_utc


Transform = Callable[[TrackedState], TrackedState]
Policy = Union[PolicyBuilder, Sequence[ReviewCondition]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PolicyEvaluation:
    """
    Result of one policy evaluation.

    Attributes:
        satisfied: True when every condition holds
        state: The snapshot every condition saw
        now: The timestamp every condition saw
        trace: Per-condition outcomes
    """
    satisfied: bool
    state: TrackedState
    now: datetime
    trace: EvaluationTrace


def resolve_policy(policy: Optional[Policy]) -> List[ReviewCondition]:
    """
    Turn the constructor argument into a list of conditions.

    None means the `policy:` section of the settings when it is not empty,
    otherwise the default policy.
    """
    if policy is None:
        configured = get_settings().get_nested("policy") or {}
        policy = policy_from_config(configured) if configured else default_policy()

    conditions = list(policy.conditions if isinstance(policy, PolicyBuilder) else policy)
    for condition in conditions:
        if not is_review_condition(condition):
            raise TypeError(
                f"{type(condition).__name__} does not implement ReviewCondition"
            )
    return conditions


class ReviewService:
    """
    Orchestrates policy evaluation, the review prompt and request tracking.

    Example:
        service = ReviewService(
            prompter=MyStorePrompter(),
            settings_source=YamlFileSettingsSource("~/.myapp/review.yaml"),
            policy=PolicyBuilder().minimum_application_launch_count(3),
        )

        await service.track_application_launched()
        await service.try_request_review()
    """

    def __init__(
        self,
        prompter: Prompter,
        settings_source: SettingsSource,
        policy: Optional[Policy] = None,
        logger: Optional[Any] = None,
        clock: Optional[Callable[[], datetime]] = None,
        evaluation_mode: Optional[str] = None
    ):
        """
        Args:
            prompter: Shows the platform review prompt
            settings_source: Reads and writes the TrackedState
            policy: PolicyBuilder or sequence of conditions (see resolve_policy)
            logger: StructuredLogger-compatible logger, no-op when omitted
            clock: Returns the current time, timezone-aware UTC by default
            evaluation_mode: "all" or "short_circuit", defaults to settings
        """
        if not is_settings_source(settings_source):
            raise TypeError(
                f"{type(settings_source).__name__} does not implement SettingsSource"
            )

        mode = evaluation_mode or get_settings().get_nested("evaluation.mode", "all")
        if mode not in EVALUATION_MODES:
            raise ValueError(
                f"evaluation_mode must be one of {', '.join(EVALUATION_MODES)}, got {mode!r}"
            )

        self._logger = logger or NullLogger()
        self._prompter = prompter
        self._settings_source = settings_source
        self._conditions = resolve_policy(policy)
        self._clock = clock or utc_now
        self._evaluation_mode = mode

    @property
    def conditions(self) -> List[ReviewCondition]:
        return list(self._conditions)

    @property
    def evaluation_mode(self) -> str:
        return self._evaluation_mode

    async def try_request_review(self, ct: Optional[CancellationToken] = None) -> bool:
        """
        Prompt for a review if every condition is satisfied.

        Returns:
            True when the prompt was triggered

        Raises:
            EvaluationError: If the policy could not be evaluated

        Once the prompt has been shown, a cancellation of ct only skips the
        write; it is logged and True is still returned.
        """
        ct = ensure_token(ct)
        self._logger.debug("Trying to request a review.")

        evaluation = await self.explain(ct)
        if not evaluation.satisfied:
            self._logger.info(
                "Did not request a review because one or more conditions were not satisfied.",
                failed_conditions=evaluation.trace.failed_conditions
            )
            return False

        ct.raise_if_cancelled("review prompt")
        await self._prompter.trigger()

        now = evaluation.now
        try:
            await self.update_state(lambda state: state.with_request_recorded(now), ct)
        except OperationCancelledError as e:
            self._logger.warning("Review requested but not recorded.", error=str(e))
            return True

        self._logger.event("review_requested", requested_at=now.isoformat())
        self._logger.info("Review requested.")
        return True

    async def evaluate_policy(self, ct: Optional[CancellationToken] = None) -> bool:
        """
        Return True when every condition holds for the current state.

        Raises:
            EvaluationError: If the state could not be read, a condition
                failed, or ct was cancelled
        """
        evaluation = await self.explain(ct)
        return evaluation.satisfied

    async def explain(self, ct: Optional[CancellationToken] = None) -> PolicyEvaluation:
        """
        Evaluate the policy and return the full result with its trace.

        The state is read once and the clock is read once; every condition
        sees that same snapshot.
        """
        ct = ensure_token(ct)
        self._logger.debug("Evaluating conditions.", conditions=len(self._conditions))

        state = await self._read_state(ct)
        now = as_utc(self._clock())
        trace = EvaluationTrace(now=now, mode=self._evaluation_mode)

        if self._evaluation_mode == "short_circuit":
            satisfied = await self._evaluate_sequentially(ct, state, now, trace)
        else:
            satisfied = await self._evaluate_all(ct, state, now, trace)

        trace.set_result(satisfied)

        if satisfied:
            self._logger.info("Evaluated conditions and all conditions are satisfied.")
        else:
            self._logger.info(
                "Evaluated conditions and one or more conditions were not satisfied.",
                failed_conditions=trace.failed_conditions
            )
        self._logger.debug(trace.to_compact_string())

        return PolicyEvaluation(satisfied=satisfied, state=state, now=now, trace=trace)

    async def update_state(
        self,
        transform: Transform,
        ct: Optional[CancellationToken] = None
    ) -> None:
        """
        Read the state, apply `transform` and write the result.

        Raises:
            SettingsReadError: If the read failed
            OperationCancelledError: If ct was cancelled before the write

        Failures of the transform or the write are logged and not raised.
        """
        ct = ensure_token(ct)
        self._logger.debug("Updating tracked state.")

        current = await self._read_state(ct)
        ct.raise_if_cancelled("settings write")

        try:
            await self._settings_source.write(ct, transform(current))
        except OperationCancelledError:
            raise
        except Exception as e:
            error = TrackingPersistenceError(e)
            self._logger.exception("Failed to update tracked state.", error=str(error))
            return

        self._logger.info("Updated tracked state.")

    async def track_application_launched(self, ct: Optional[CancellationToken] = None) -> None:
        """Count one application launch; the first one also sets the first launch time."""
        now = as_utc(self._clock())
        await self.update_state(lambda state: state.with_application_launched(now), ct)

    async def track_primary_action_completed(self, ct: Optional[CancellationToken] = None) -> None:
        await self.update_state(lambda state: state.with_primary_action_completed(), ct)

    async def track_secondary_action_completed(self, ct: Optional[CancellationToken] = None) -> None:
        await self.update_state(lambda state: state.with_secondary_action_completed(), ct)

    async def _read_state(self, ct: CancellationToken) -> TrackedState:
        ct.raise_if_cancelled("settings read")
        try:
            state = await self._settings_source.read(ct)
        except EvaluationError:
            raise
        except Exception as e:
            raise SettingsReadError(e) from e

        if state is None:
            raise SettingsReadError(ValueError("settings source returned None"))
        return state

    async def _validate(
        self,
        position: int,
        condition: ReviewCondition,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime,
        trace: EvaluationTrace
    ) -> bool:
        start_time = time.perf_counter()
        try:
            result = await condition.validate(ct, state, now)
        except EvaluationError:
            raise
        except Exception as e:
            raise ConditionEvaluationError(condition.name, e) from e
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        trace.record(condition.name, result, position, elapsed_ms)
        return result

    async def _evaluate_all(
        self,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime,
        trace: EvaluationTrace
    ) -> bool:
        # Barrier: wait for every condition, then report the first failure
        # in registration order.
        results = await asyncio.gather(
            *(
                self._validate(position, condition, ct, state, now, trace)
                for position, condition in enumerate(self._conditions)
            ),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return all(results)

    async def _evaluate_sequentially(
        self,
        ct: CancellationToken,
        state: TrackedState,
        now: datetime,
        trace: EvaluationTrace
    ) -> bool:
        satisfied = True
        for position, condition in enumerate(self._conditions):
            if not satisfied:
                trace.record_skipped(condition.name, position)
                continue
            satisfied = await self._validate(position, condition, ct, state, now, trace)
        return satisfied
