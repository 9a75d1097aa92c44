from __future__ import annotations

import random
import sqlite3
import threading
import uuid
from dataclasses import replace
from datetime import datetime

from .clock import Clock
from .database import StateStore
from .log import get_logger
from .models import (
    IDLE,
    SUMMARY_PENDING,
    Activity,
    AppState,
    Idle,
    LogEntry,
    Prompting,
    Settings,
    Snapshot,
    Stats,
    SummaryPending,
)
from .rollover import check_rollover
from .selector import select_next
from .settings import with_max, with_min, with_range
from .stats import TimeRange, daily_stats, entries_for_day, stats, window_start

logger = get_logger(__name__)

RECENT_LOG_LIMIT = 10


class PromptEngine:
    """Single owner of the reminder state.

    Every public event runs under one lock: the rollover check first, then the
    transition, then a full write to the store before the call returns. The
    store is never written by anything else.
    """

    def __init__(
        self,
        store: StateStore,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._store = store
        self._clock = clock or Clock()
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._state = AppState.defaults(self._clock.today())
        self._started = False
        self._unsaved = False

    @property
    def state(self) -> AppState:
        return self._state

    def start(self) -> bool:
        """Load persisted state and reconcile it with the wall clock.

        Returns True when a new day began since the state was last saved.
        """
        with self._lock:
            self._state = self._load()
            self._started = True
            did_roll = self._reconcile(self._state.settings)
            self._persist()
            logger.info(
                "Started: day=%s quota=%d state=%s",
                self._state.settings.last_generated_date,
                self._state.settings.notifications_today,
                type(self._state.prompt).__name__,
            )
            return did_roll

    def app_resumed(self) -> bool:
        """Re-check the day after the host was suspended, against the persisted settings."""
        with self._lock:
            self._ensure_started()
            # after a failed write the in-memory copy is newer than the store
            settings = self._state.settings if self._unsaved else self._load().settings
            did_roll = self._reconcile(settings)
            if did_roll or self._unsaved:
                self._persist()
            return did_roll

    def trigger(self) -> None:
        with self._lock:
            self._begin_event()
            prompt = self._state.prompt
            if not isinstance(prompt, Idle):
                logger.debug("Trigger ignored while %s", type(prompt).__name__)
                return

            today = self._clock.today()
            answered = len(entries_for_day(self._state.logs, today))
            if answered >= self._state.settings.notifications_today:
                logger.info("Daily quota of %d reached; summary pending", self._state.settings.notifications_today)
                self._update(prompt=SUMMARY_PENDING)
                return

            selected = select_next(self._state.activities, self._state.last_activity_id, self._rng)
            if selected is None:
                logger.debug("Trigger ignored: no activities to prompt")
                return

            logger.info("Prompting activity %s (%d/%d today)", selected.id, answered + 1, self._state.settings.notifications_today)
            self._update(prompt=Prompting(selected))

    def respond(self, completed: bool) -> LogEntry | None:
        with self._lock:
            self._begin_event()
            prompt = self._state.prompt
            if not isinstance(prompt, Prompting):
                logger.debug("Response ignored while %s", type(prompt).__name__)
                return None

            activity = prompt.activity
            entry = LogEntry(
                id=str(uuid.uuid4()),
                activity_id=activity.id,
                activity_text=activity.text,
                timestamp=self._clock.now(),
                completed=bool(completed),
            )
            self._update(
                logs=self._state.logs + (entry,),
                last_activity_id=activity.id,
                prompt=IDLE,
            )
            logger.info("Logged %s for activity %s", "completed" if entry.completed else "missed", activity.id)
            return entry

    def dismiss_summary(self) -> None:
        with self._lock:
            self._begin_event()
            if not isinstance(self._state.prompt, SummaryPending):
                logger.debug("Summary dismissal ignored while %s", type(self._state.prompt).__name__)
                return
            self._update(prompt=IDLE)

    def add_activity(self, text: str) -> Activity | None:
        with self._lock:
            self._begin_event()
            text = (text or "").strip()
            if not text:
                logger.debug("Ignoring empty activity text")
                return None
            activity = Activity(id=str(uuid.uuid4()), text=text, created_at=self._clock.now())
            self._update(activities=self._state.activities + (activity,))
            return activity

    def delete_activity(self, activity_id: str) -> bool:
        with self._lock:
            self._begin_event()
            remaining = tuple(a for a in self._state.activities if a.id != activity_id)
            if len(remaining) == len(self._state.activities):
                logger.debug("Delete ignored: unknown activity %s", activity_id)
                return False
            # A live prompt for this activity keeps its own copy and stays answerable.
            self._update(activities=remaining)
            return True

    def update_settings(self, min_notifications: int | None = None, max_notifications: int | None = None) -> None:
        with self._lock:
            self._begin_event()
            settings = self._state.settings
            if min_notifications is not None and max_notifications is not None:
                settings = with_range(settings, min_notifications, max_notifications)
            elif min_notifications is not None:
                settings = with_min(settings, min_notifications)
            elif max_notifications is not None:
                settings = with_max(settings, max_notifications)
            if settings != self._state.settings:
                self._update(settings=settings)

    def dismiss_onboarding(self) -> None:
        with self._lock:
            self._begin_event()
            if not self._state.has_seen_onboarding:
                self._update(has_seen_onboarding=True)

    def snapshot(self) -> Snapshot:
        with self._lock:
            state = self._state
            today = self._clock.today()
            return Snapshot(
                today=today,
                activities=state.activities,
                settings=state.settings,
                prompt=state.prompt,
                prompts_answered_today=len(entries_for_day(state.logs, today)),
                has_seen_onboarding=state.has_seen_onboarding,
                summary=daily_stats(state.logs, today) if state.is_summary_pending else None,
                recent_logs=state.logs[-RECENT_LOG_LIMIT:],
            )

    def stats(self, since: datetime | None = None) -> Stats:
        with self._lock:
            return stats(self._state.logs, since)

    def stats_for(self, time_range: TimeRange) -> Stats:
        return self.stats(window_start(time_range, self._clock.now()))

    def today_summary(self) -> Stats:
        with self._lock:
            return daily_stats(self._state.logs, self._clock.today())

    def _ensure_started(self) -> None:
        if not self._started:
            self.start()

    def _begin_event(self) -> None:
        self._ensure_started()
        if self._reconcile(self._state.settings) or self._unsaved:
            self._persist()

    def _reconcile(self, settings: Settings) -> bool:
        result = check_rollover(settings, self._clock.today(), self._rng)
        if not result.did_roll:
            return False
        logger.info(
            "New day %s: quota %d (was day %s)",
            result.settings.last_generated_date,
            result.settings.notifications_today,
            settings.last_generated_date,
        )
        self._state = replace(self._state, settings=result.settings, prompt=IDLE)
        return True

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self._persist()

    def _load(self) -> AppState:
        today = self._clock.today()
        try:
            return self._store.load(today)
        except sqlite3.Error:
            logger.exception("Could not read stored state; continuing with defaults")
            return AppState.defaults(today)

    def _persist(self) -> None:
        try:
            self._store.save(self._state)
        except sqlite3.Error:
            self._unsaved = True
            logger.exception("Could not write state; it will be retried on the next event")
        else:
            self._unsaved = False
