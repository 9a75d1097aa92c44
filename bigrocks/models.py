from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

SUMMARY_ACTIVITY_ID = "SUMMARY"

DEFAULT_MIN_NOTIFICATIONS = 3
DEFAULT_MAX_NOTIFICATIONS = 8
DEFAULT_NOTIFICATIONS_TODAY = 5


@dataclass(frozen=True)
class Activity:
    id: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class LogEntry:
    id: str
    activity_id: str
    activity_text: str
    timestamp: datetime
    completed: bool
    is_summary: bool = False

    @property
    def counts_toward_stats(self) -> bool:
        return not self.is_summary and self.activity_id != SUMMARY_ACTIVITY_ID


@dataclass(frozen=True)
class Settings:
    min_notifications: int
    max_notifications: int
    notifications_today: int
    last_generated_date: str

    @classmethod
    def defaults(cls, today: str) -> Settings:
        return cls(
            min_notifications=DEFAULT_MIN_NOTIFICATIONS,
            max_notifications=DEFAULT_MAX_NOTIFICATIONS,
            notifications_today=DEFAULT_NOTIFICATIONS_TODAY,
            last_generated_date=today,
        )


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Prompting:
    activity: Activity


@dataclass(frozen=True)
class SummaryPending:
    pass


PromptState = Union[Idle, Prompting, SummaryPending]

IDLE = Idle()
SUMMARY_PENDING = SummaryPending()


@dataclass(frozen=True)
class AppState:
    """Everything the store persists, one field per stored key."""

    activities: tuple[Activity, ...]
    logs: tuple[LogEntry, ...]
    settings: Settings
    prompt: PromptState = IDLE
    last_activity_id: str | None = None
    has_seen_onboarding: bool = False

    @classmethod
    def defaults(cls, today: str) -> AppState:
        return cls(activities=(), logs=(), settings=Settings.defaults(today))

    @property
    def current_activity(self) -> Activity | None:
        if isinstance(self.prompt, Prompting):
            return self.prompt.activity
        return None

    @property
    def is_summary_pending(self) -> bool:
        return isinstance(self.prompt, SummaryPending)


@dataclass(frozen=True)
class Stats:
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class Snapshot:
    today: str
    activities: tuple[Activity, ...]
    settings: Settings
    prompt: PromptState
    prompts_answered_today: int
    has_seen_onboarding: bool
    summary: Stats | None = None
    recent_logs: tuple[LogEntry, ...] = ()
