"""
Tests for TrackedState (tracked_state.py).
"""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

from review_service.tracked_state import TrackedState, as_utc


NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestTrackedStateDefaults:
    """Default instance and validation."""

    def test_default_instance(self):
        state = TrackedState()
        assert state.primary_action_completed_count == 0
        assert state.secondary_action_completed_count == 0
        assert state.application_launch_count == 0
        assert state.first_application_launch is None
        assert state.request_count == 0
        assert state.last_request is None

    def test_defaults_are_equal(self):
        assert TrackedState() == TrackedState()

    @pytest.mark.parametrize("field_name", [
        "primary_action_completed_count",
        "secondary_action_completed_count",
        "application_launch_count",
        "request_count",
    ])
    def test_negative_count_raises(self, field_name):
        with pytest.raises(ValueError, match=f"{field_name} cannot be negative"):
            TrackedState(**{field_name: -1})

    def test_is_frozen(self):
        state = TrackedState()
        with pytest.raises(FrozenInstanceError):
            state.request_count = 5

    def test_naive_timestamp_becomes_utc(self):
        state = TrackedState(last_request=datetime(2024, 1, 1, 8, 0))
        assert state.last_request.tzinfo == timezone.utc

    def test_as_utc_keeps_aware_datetimes(self):
        offset = timezone(timedelta(hours=2))
        value = datetime(2024, 1, 1, 8, 0, tzinfo=offset)
        assert as_utc(value) is value


class TestTrackedStateTransforms:
    """Pure transforms return new values and leave the original untouched."""

    def test_with_request_recorded(self):
        state = TrackedState(request_count=2)
        updated = state.with_request_recorded(NOW)

        assert updated.request_count == 3
        assert updated.last_request == NOW
        assert state.request_count == 2
        assert state.last_request is None

    def test_with_request_recorded_never_moves_backwards(self):
        state = TrackedState(request_count=1, last_request=NOW)
        updated = state.with_request_recorded(NOW - timedelta(hours=1))

        assert updated.last_request == NOW
        assert updated.request_count == 2

    def test_with_application_launched_sets_first_launch_once(self):
        first = TrackedState().with_application_launched(NOW)
        second = first.with_application_launched(NOW + timedelta(days=1))

        assert first.application_launch_count == 1
        assert first.first_application_launch == NOW
        assert second.application_launch_count == 2
        assert second.first_application_launch == NOW

    def test_with_actions_completed(self):
        state = TrackedState()
        state = state.with_primary_action_completed().with_primary_action_completed()
        state = state.with_secondary_action_completed()

        assert state.primary_action_completed_count == 2
        assert state.secondary_action_completed_count == 1


class TestTrackedStateSerialization:
    """to_dict / from_dict used by file-backed sources."""

    def test_to_dict_uses_iso_timestamps(self):
        state = TrackedState(application_launch_count=4, last_request=NOW)
        data = state.to_dict()

        assert data["application_launch_count"] == 4
        assert data["last_request"] == "2024-06-15T12:00:00+00:00"
        assert data["first_application_launch"] is None

    def test_from_dict_restores_value(self):
        state = TrackedState(
            primary_action_completed_count=3,
            application_launch_count=5,
            first_application_launch=NOW - timedelta(days=10),
            request_count=1,
            last_request=NOW,
        )
        assert TrackedState.from_dict(state.to_dict()) == state

    def test_from_empty_returns_default(self):
        assert TrackedState.from_dict(None) == TrackedState()
        assert TrackedState.from_dict({}) == TrackedState()

    def test_from_dict_ignores_unknown_keys(self):
        state = TrackedState.from_dict({"request_count": 2, "theme": "dark"})
        assert state.request_count == 2

    def test_from_dict_accepts_legacy_first_launch_name(self):
        state = TrackedState.from_dict({
            "application_first_launched": "2024-01-01T00:00:00+00:00",
        })
        assert state.first_application_launch == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_from_dict_prefers_current_name_over_legacy(self):
        state = TrackedState.from_dict({
            "application_first_launched": "2023-01-01T00:00:00+00:00",
            "first_application_launch": "2024-01-01T00:00:00+00:00",
        })
        assert state.first_application_launch.year == 2024

    def test_from_dict_accepts_datetime_values(self):
        state = TrackedState.from_dict({"last_request": NOW})
        assert state.last_request == NOW
