"""
Review conditions.

Main components:
- ReviewCondition: protocol shared by every condition
- SynchronousCondition / AsynchronousCondition: the two built-in variants
- PolicyBuilder: fluent policy assembly, default_policy(), policy_from_config()
- EvaluationTrace: per-evaluation diagnostics
"""

from review_service.conditions.base import (
    AsyncPredicate,
    AsynchronousCondition,
    ReviewCondition,
    SyncPredicate,
    SynchronousCondition,
    is_review_condition,
)
from review_service.conditions.builder import (
    DEFAULT_MINIMUM_APPLICATION_LAUNCH_COUNT,
    DEFAULT_MINIMUM_ELAPSED_SINCE_FIRST_LAUNCH,
    DEFAULT_MINIMUM_ELAPSED_SINCE_LAST_REQUEST,
    DEFAULT_MINIMUM_PRIMARY_ACTIONS_COMPLETED,
    POLICY_CONFIG_KEYS,
    PolicyBuilder,
    default_policy,
    policy_from_config,
)
from review_service.conditions.trace import (
    ConditionEntry,
    EvaluationTrace,
    Outcome,
)


__all__ = [
    # Base
    "ReviewCondition",
    "SynchronousCondition",
    "AsynchronousCondition",
    "SyncPredicate",
    "AsyncPredicate",
    "is_review_condition",
    # Builder
    "PolicyBuilder",
    "default_policy",
    "policy_from_config",
    "POLICY_CONFIG_KEYS",
    "DEFAULT_MINIMUM_PRIMARY_ACTIONS_COMPLETED",
    "DEFAULT_MINIMUM_APPLICATION_LAUNCH_COUNT",
    "DEFAULT_MINIMUM_ELAPSED_SINCE_FIRST_LAUNCH",
    "DEFAULT_MINIMUM_ELAPSED_SINCE_LAST_REQUEST",
    # Trace
    "EvaluationTrace",
    "ConditionEntry",
    "Outcome",
]
