"""
TrackedState: the usage signals a review policy is evaluated against.

The value is frozen. Every change goes through a pure transform that returns
a new instance, so readers never observe a half-updated value.

The request pair (request_count, last_request) is written by ReviewService;
the other fields belong to the host application, which usually updates them
through the ReviewService.track_* helpers.
"""

from dataclasses import dataclass, replace, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Older settings files used this name for first_application_launch
_LEGACY_FIELD_NAMES = {
    "application_first_launched": "first_application_launch",
}

_TIMESTAMP_FIELDS = ("first_application_launch", "last_request")
_COUNT_FIELDS = (
    "primary_action_completed_count",
    "secondary_action_completed_count",
    "application_launch_count",
    "request_count",
)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware datetimes are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class TrackedState:
    """
    Accumulated usage signals.

    Attributes:
        primary_action_completed_count: Completed primary actions
        secondary_action_completed_count: Completed secondary actions
        application_launch_count: Number of application launches
        first_application_launch: When the application was first launched
        request_count: Number of review requests made so far
        last_request: When the last review request was made
    """
    primary_action_completed_count: int = 0
    secondary_action_completed_count: int = 0
    application_launch_count: int = 0
    first_application_launch: Optional[datetime] = None
    request_count: int = 0
    last_request: Optional[datetime] = None

    def __post_init__(self):
        for name in _COUNT_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        for name in _TIMESTAMP_FIELDS:
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                object.__setattr__(self, name, as_utc(value))

    def with_request_recorded(self, now: datetime) -> "TrackedState":
        """
        State after a review request made at `now`.

        last_request never moves backwards, even if the clock does.
        """
        now = as_utc(now)
        if self.last_request is not None and self.last_request > now:
            now = self.last_request
        return replace(
            self,
            last_request=now,
            request_count=self.request_count + 1
        )

    def with_application_launched(self, now: datetime) -> "TrackedState":
        """State after one more launch; the first launch time is kept once set."""
        return replace(
            self,
            application_launch_count=self.application_launch_count + 1,
            first_application_launch=self.first_application_launch or now
        )

    def with_primary_action_completed(self) -> "TrackedState":
        return replace(
            self,
            primary_action_completed_count=self.primary_action_completed_count + 1
        )

    def with_secondary_action_completed(self) -> "TrackedState":
        return replace(
            self,
            secondary_action_completed_count=self.secondary_action_completed_count + 1
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping with ISO-8601 timestamps (for YAML/JSON storage)."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TrackedState":
        """
        Build a TrackedState from a stored mapping.

        Unknown keys are ignored and missing keys take their defaults, so a
        file written by an older or newer version still loads.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _LEGACY_FIELD_NAMES:
                if _LEGACY_FIELD_NAMES[key] in data:
                    continue
                key = _LEGACY_FIELD_NAMES[key]
            if key not in known or value is None:
                continue
            if key in _TIMESTAMP_FIELDS:
                if not isinstance(value, datetime):
                    value = datetime.fromisoformat(str(value))
            else:
                value = int(value)
            values[key] = value

        return cls(**values)
