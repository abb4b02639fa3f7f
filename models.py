"""Data models for the Jira tools."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

WORKDAY_SECONDS = 28800  # 8h


@dataclass(frozen=True)
class WorkLogRequest:
    """Per-run state of log-work, filled step by step."""

    date: str  # YYYY-MM-DD
    story_key: str | None = None
    issue_key: str | None = None
    worked_seconds: int = 0
    missing_seconds: int = WORKDAY_SECONDS

    @staticmethod
    def to_seconds(hours: int, minutes: int) -> int:
        return hours * 3600 + minutes * 60


@dataclass
class Issue:
    """A search hit from Jira."""

    key: str
    summary: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class WorklogEntry:
    """A worklog to add on an issue."""

    started: str  # YYYY-MM-DD
    time_spent_seconds: int

    def to_payload(self) -> dict:
        """Jira wants a full timestamp; the entry starts at local midnight."""
        started = datetime.strptime(self.started, "%Y-%m-%d").astimezone()
        return {
            "started": started.strftime("%Y-%m-%dT%H:%M:%S.000%z"),
            "timeSpentSeconds": self.time_spent_seconds,
        }


@dataclass
class UpdateSpec:
    """A single custom field update on one issue."""

    issue_key: str
    custom_field_id: str
    value: str

    def to_payload(self) -> dict:
        return {"fields": {self.custom_field_id: self.value}}


# ============================================================================
# Step outcomes
# ============================================================================


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    reason: str = ""


@dataclass(frozen=True)
class Failed:
    error: Exception


@dataclass(frozen=True)
class Declined:
    """The operator answered no."""


Resolution = Union[Found, NotFound, Failed, Declined]
