"""
review_service - decides when an application should ask its user for a
store review, and records that it did.

Usage:
    from review_service import ReviewService, PolicyBuilder, MemorySettingsSource

    service = ReviewService(
        prompter=my_prompter,
        settings_source=MemorySettingsSource(),
        policy=PolicyBuilder().minimum_application_launch_count(3),
    )
    await service.try_request_review()
"""

from review_service.cancellation import CancellationToken
from review_service.conditions import (
    AsynchronousCondition,
    EvaluationTrace,
    PolicyBuilder,
    ReviewCondition,
    SynchronousCondition,
    default_policy,
    policy_from_config,
)
from review_service.errors import (
    ConditionEvaluationError,
    EvaluationError,
    InvalidPolicyConfigError,
    OperationCancelledError,
    ReviewServiceError,
    SettingsReadError,
    TrackingPersistenceError,
)
from review_service.logger import NullLogger, StructuredLogger
from review_service.prompters import (
    LoggingPrompter,
    Prompter,
    UnsupportedPlatformPrompter,
    select_prompter,
)
from review_service.service import PolicyEvaluation, ReviewService
from review_service.sources import (
    MemorySettingsSource,
    SettingsSource,
    YamlFileSettingsSource,
)
from review_service.tracked_state import TrackedState


__version__ = "1.0.0"

__all__ = [
    "ReviewService",
    "PolicyEvaluation",
    "TrackedState",
    "CancellationToken",
    # Conditions
    "ReviewCondition",
    "SynchronousCondition",
    "AsynchronousCondition",
    "PolicyBuilder",
    "default_policy",
    "policy_from_config",
    "EvaluationTrace",
    # Collaborators
    "Prompter",
    "LoggingPrompter",
    "UnsupportedPlatformPrompter",
    "select_prompter",
    "SettingsSource",
    "MemorySettingsSource",
    "YamlFileSettingsSource",
    # Logging
    "StructuredLogger",
    "NullLogger",
    # Errors
    "ReviewServiceError",
    "EvaluationError",
    "ConditionEvaluationError",
    "SettingsReadError",
    "OperationCancelledError",
    "TrackingPersistenceError",
    "InvalidPolicyConfigError",
]
