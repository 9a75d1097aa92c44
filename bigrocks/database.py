from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from .log import get_logger
from .models import (
    IDLE,
    SUMMARY_PENDING,
    Activity,
    AppState,
    LogEntry,
    Prompting,
    PromptState,
    Settings,
)
from .settings import normalize

logger = get_logger(__name__)

ACTIVITIES_KEY = "bigrocks_activities"
LOGS_KEY = "bigrocks_logs"
SETTINGS_KEY = "bigrocks_settings"
CURRENT_ROCK_KEY = "bigrocks_current_rock"
LAST_ID_KEY = "bigrocks_last_id"
SUMMARY_PENDING_KEY = "bigrocks_summary_pending"
ONBOARDING_KEY = "bigrocks_has_seen_onboarding"

ALL_KEYS = (
    ACTIVITIES_KEY,
    LOGS_KEY,
    SETTINGS_KEY,
    CURRENT_ROCK_KEY,
    LAST_ID_KEY,
    SUMMARY_PENDING_KEY,
    ONBOARDING_KEY,
)

# Errors that mean "this one record is unreadable", as opposed to the store being unreachable.
_RECORD_ERRORS = (ValueError, TypeError, KeyError, AttributeError)


class StateStore(Protocol):
    def load(self, today: str) -> AppState: ...

    def save(self, state: AppState, keys: Iterable[str] | None = None) -> None: ...


class BigRocksDatabase:
    """sqlite key/value store holding one JSON record per persisted key."""

    def __init__(self, db_file: Path):
        self._db_file = Path(db_file)
        self._db_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_file, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=FULL")
        return conn

    @contextmanager
    def _connection(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            conn.commit()

    def read_raw(self) -> dict[str, str]:
        with self._lock, self._connection() as conn:
            rows = conn.execute("SELECT key, value FROM app_state").fetchall()
        return {str(row["key"]): str(row["value"]) for row in rows}

    def write_raw(self, values: dict[str, str]) -> None:
        with self._lock, self._connection() as conn:
            try:
                for key, value in values.items():
                    conn.execute(
                        """
                        INSERT INTO app_state(key, value)
                        VALUES(?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value
                        """,
                        (key, value),
                    )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

    def load(self, today: str) -> AppState:
        raw = self.read_raw()
        defaults = AppState.defaults(today)

        activities = _decode_key(raw, ACTIVITIES_KEY, _decode_activities, defaults.activities)
        logs = _decode_key(raw, LOGS_KEY, _decode_logs, defaults.logs)
        settings = _decode_key(raw, SETTINGS_KEY, _decode_settings, defaults.settings)
        current = _decode_key(raw, CURRENT_ROCK_KEY, _decode_optional_activity, None)
        last_id = _decode_key(raw, LAST_ID_KEY, _decode_optional_str, None)
        summary_pending = _decode_key(raw, SUMMARY_PENDING_KEY, _decode_bool, False)
        onboarded = _decode_key(raw, ONBOARDING_KEY, _decode_bool, False)

        return AppState(
            activities=activities,
            logs=logs,
            settings=settings,
            prompt=_prompt_from_flags(current, summary_pending),
            last_activity_id=last_id,
            has_seen_onboarding=onboarded,
        )

    def save(self, state: AppState, keys: Iterable[str] | None = None) -> None:
        encoded = encode_state(state)
        if keys is not None:
            wanted = set(keys)
            unknown = wanted.difference(ALL_KEYS)
            if unknown:
                raise ValueError(f"Unknown state keys: {sorted(unknown)}")
            encoded = {key: value for key, value in encoded.items() if key in wanted}
        self.write_raw(encoded)


def encode_state(state: AppState) -> dict[str, str]:
    current = state.current_activity
    return {
        ACTIVITIES_KEY: _dumps([_activity_to_json(a) for a in state.activities]),
        LOGS_KEY: _dumps([_log_to_json(entry) for entry in state.logs]),
        SETTINGS_KEY: _dumps(_settings_to_json(state.settings)),
        CURRENT_ROCK_KEY: _dumps(_activity_to_json(current) if current is not None else None),
        LAST_ID_KEY: _dumps(state.last_activity_id),
        SUMMARY_PENDING_KEY: _dumps(state.is_summary_pending),
        ONBOARDING_KEY: _dumps(state.has_seen_onboarding),
    }


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _decode_key(raw: dict[str, str], key: str, decoder: Callable[[Any], Any], default: Any) -> Any:
    text = raw.get(key)
    if text is None:
        return default
    try:
        return decoder(json.loads(text))
    except _RECORD_ERRORS as exc:
        logger.warning("Stored %s is unreadable (%s); using default", key, exc)
        return default


def _prompt_from_flags(current: Activity | None, summary_pending: bool) -> PromptState:
    if current is not None:
        if summary_pending:
            logger.warning("Stored state had both a live prompt and a pending summary; keeping the prompt")
        return Prompting(current)
    if summary_pending:
        return SUMMARY_PENDING
    return IDLE


def _timestamp_to_json(value: datetime) -> str:
    return value.isoformat()


def _timestamp_from_json(value: Any) -> datetime:
    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    if isinstance(value, (int, float)):
        # epoch milliseconds
        return datetime.fromtimestamp(value / 1000).astimezone()
    return datetime.fromisoformat(str(value)).astimezone()


def _activity_to_json(activity: Activity) -> dict[str, Any]:
    return {
        "id": activity.id,
        "text": activity.text,
        "createdAt": _timestamp_to_json(activity.created_at),
    }


def _activity_from_json(data: dict[str, Any]) -> Activity:
    text = str(data["text"]).strip()
    if not text:
        raise ValueError("activity text is empty")
    return Activity(id=str(data["id"]), text=text, created_at=_timestamp_from_json(data["createdAt"]))


def _log_to_json(entry: LogEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": entry.id,
        "activityId": entry.activity_id,
        "activityText": entry.activity_text,
        "timestamp": _timestamp_to_json(entry.timestamp),
        "completed": entry.completed,
    }
    if entry.is_summary:
        data["isSummary"] = True
    return data


def _log_from_json(data: dict[str, Any]) -> LogEntry:
    return LogEntry(
        id=str(data["id"]),
        activity_id=str(data["activityId"]),
        activity_text=str(data.get("activityText", "")),
        timestamp=_timestamp_from_json(data["timestamp"]),
        completed=bool(data["completed"]),
        is_summary=bool(data.get("isSummary", False)),
    )


def _settings_to_json(settings: Settings) -> dict[str, Any]:
    return {
        "minNotifications": settings.min_notifications,
        "maxNotifications": settings.max_notifications,
        "notificationsToday": settings.notifications_today,
        "lastGeneratedDate": settings.last_generated_date,
    }


def _decode_settings(data: Any) -> Settings:
    settings = Settings(
        min_notifications=int(data["minNotifications"]),
        max_notifications=int(data["maxNotifications"]),
        notifications_today=int(data["notificationsToday"]),
        last_generated_date=str(data["lastGeneratedDate"]),
    )
    return normalize(settings)


def _decode_activities(data: Any) -> tuple[Activity, ...]:
    if not isinstance(data, list):
        raise TypeError(f"expected a list, got {type(data).__name__}")
    return tuple(_activity_from_json(item) for item in data)


def _decode_logs(data: Any) -> tuple[LogEntry, ...]:
    if not isinstance(data, list):
        raise TypeError(f"expected a list, got {type(data).__name__}")
    return tuple(_log_from_json(item) for item in data)


def _decode_optional_activity(data: Any) -> Activity | None:
    if data is None:
        return None
    return _activity_from_json(data)


def _decode_optional_str(data: Any) -> str | None:
    if data is None:
        return None
    if not isinstance(data, str):
        raise TypeError(f"expected a string, got {type(data).__name__}")
    return data or None


def _decode_bool(data: Any) -> bool:
    if not isinstance(data, bool):
        raise TypeError(f"expected a boolean, got {type(data).__name__}")
    return data
