"""
Tests for the error taxonomy (errors.py) and CancellationToken (cancellation.py).
"""

import pytest

from review_service.cancellation import CancellationToken, ensure_token
from review_service.errors import (
    ConditionEvaluationError,
    EvaluationError,
    InvalidPolicyConfigError,
    OperationCancelledError,
    ReviewServiceError,
    SettingsReadError,
    TrackingPersistenceError,
)


class TestErrors:

    def test_condition_evaluation_error(self):
        original = RuntimeError("boom")
        error = ConditionEvaluationError("is_weekday", original)

        assert error.condition_name == "is_weekday"
        assert error.original_error is original
        assert str(error) == "Error evaluating condition 'is_weekday': boom"

    def test_evaluation_family(self):
        for error in (
            ConditionEvaluationError("c", ValueError()),
            SettingsReadError(OSError("x")),
            OperationCancelledError(),
        ):
            assert isinstance(error, EvaluationError)
            assert isinstance(error, ReviewServiceError)

    def test_tracking_error_is_not_an_evaluation_error(self):
        error = TrackingPersistenceError(OSError("disk full"))
        assert not isinstance(error, EvaluationError)
        assert "disk full" in str(error)

    def test_cancelled_message(self):
        assert str(OperationCancelledError()) == "Operation was cancelled"
        assert str(OperationCancelledError("settings read")) == (
            "Operation was cancelled during settings read"
        )

    def test_invalid_policy_config(self):
        error = InvalidPolicyConfigError("minimum_launches", "unknown policy setting")
        assert error.key == "minimum_launches"
        assert str(error) == "Invalid policy setting 'minimum_launches': unknown policy setting"


class TestCancellationToken:

    def test_starts_uncancelled(self):
        token = CancellationToken()
        assert token.is_cancelled is False
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()

        assert token.is_cancelled is True
        with pytest.raises(OperationCancelledError, match="settings write"):
            token.raise_if_cancelled("settings write")

    def test_ensure_token(self):
        token = CancellationToken()
        assert ensure_token(token) is token
        assert isinstance(ensure_token(None), CancellationToken)
        assert CancellationToken.none().is_cancelled is False
