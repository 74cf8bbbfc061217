"""
Errors raised by review_service.

Two families with different handling:
- EvaluationError: the decision could not be made. Always propagates.
- TrackingPersistenceError: recording a request failed after the decision.
  The orchestrator logs it and does not re-raise.
"""

from typing import Optional


class ReviewServiceError(Exception):
    """Base class for all review_service errors."""


class EvaluationError(ReviewServiceError):
    """Raised when the review policy could not be evaluated."""


class ConditionEvaluationError(EvaluationError):
    """Raised when a single condition fails to produce a result."""

    def __init__(self, condition_name: str, original_error: Exception):
        self.condition_name = condition_name
        self.original_error = original_error
        super().__init__(
            f"Error evaluating condition '{condition_name}': {original_error}"
        )


class SettingsReadError(EvaluationError):
    """Raised when the tracked state could not be read."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"Error reading tracked state: {original_error}")


class OperationCancelledError(EvaluationError):
    """Raised when a CancellationToken was cancelled before the work completed."""

    def __init__(self, operation: Optional[str] = None):
        self.operation = operation
        message = "Operation was cancelled"
        if operation:
            message += f" during {operation}"
        super().__init__(message)


class TrackingPersistenceError(ReviewServiceError):
    """Wraps a failure of the write step of a tracked state update."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"Error writing tracked state: {original_error}")


class InvalidPolicyConfigError(ReviewServiceError):
    """Raised when a declarative policy mapping cannot be turned into conditions."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid policy setting '{key}': {reason}")
